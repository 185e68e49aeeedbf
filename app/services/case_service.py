# app/services/case_service.py
import datetime
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.models.case import Case
from app.services.completion import estimate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("last_section_completed", "notes", "collaborators")


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


def _mirror_minor_name(form_data: Dict[str, Any]) -> Optional[str]:
    value = form_data.get("minor_name")
    if value is None or value == "":
        return None
    return str(value)


class CaseService:
    def __init__(self, db: Session):
        self.db = db

    def create_case(self, owner: str, initial_data: Dict[str, Any] = None, minor_name: str = None):
        form_data = dict(initial_data or {})
        if minor_name and "minor_name" not in form_data:
            form_data["minor_name"] = minor_name
        c = Case(
            owner=owner,
            status="draft",
            form_data=form_data,
            completion_percentage=estimate(form_data),
            minor_name=_mirror_minor_name(form_data),
            collaborators=[],
            updated_at=_utcnow(),
        )
        self.db.add(c)
        self.db.commit()
        self.db.refresh(c)
        logger.info("Created case %s for %s", c.id, owner)
        return c

    def get_case(self, case_id: str):
        return self.db.query(Case).filter(Case.id == case_id).first()

    def get_owned_case(self, case_id: str, owner: str):
        c = self.get_case(case_id)
        if not c or c.owner != owner:
            return None
        return c

    def list_cases(self, owner: str, q: str = None, skip: int = 0, limit: int = 20):
        cases = (
            self.db.query(Case)
            .filter(Case.owner == owner)
            .order_by(Case.updated_at.desc())
            .all()
        )
        if q and q.strip():
            term = q.strip().lower()
            cases = [
                c for c in cases
                if term in (c.minor_name or "").lower()
                or term in json.dumps(c.form_data or {}, default=str).lower()
            ]
        return cases[skip:skip + limit]

    def save_form_data(self, case_id: str, form_data: Dict[str, Any], completion_percentage: int = None):
        """
        Persist a full form-data snapshot in one commit.

        Refreshes updated_at, the minor_name mirror and the draft/ready status.
        Returns None when the case does not exist.
        """
        c = self.get_case(case_id)
        if not c:
            return None
        if completion_percentage is None:
            completion_percentage = estimate(form_data)
        c.form_data = dict(form_data)
        c.completion_percentage = completion_percentage
        c.minor_name = _mirror_minor_name(form_data)
        c.updated_at = _utcnow()
        if c.status == "draft" and completion_percentage >= 100:
            c.status = "ready"
        elif c.status == "ready" and completion_percentage < 100:
            c.status = "draft"
        self.db.commit()
        self.db.refresh(c)
        return c

    def update_case(self, case_id: str, updates: Dict[str, Any]):
        c = self.get_case(case_id)
        if not c:
            return None
        for key in UPDATABLE_FIELDS:
            if updates.get(key) is not None:
                setattr(c, key, updates[key])
        if updates.get("form_data") is not None:
            # commits the other attributes too
            return self.save_form_data(case_id, updates["form_data"])
        c.updated_at = _utcnow()
        self.db.commit()
        self.db.refresh(c)
        return c

    def mark_generated(self, case_id: str, summary: Dict[str, Any]):
        c = self.get_case(case_id)
        if not c:
            return None
        c.status = "generated"
        c.generated_pdfs = summary
        c.updated_at = _utcnow()
        self.db.commit()
        self.db.refresh(c)
        return c

    def delete_case(self, case_id: str) -> bool:
        c = self.get_case(case_id)
        if not c:
            return False
        self.db.delete(c)
        self.db.commit()
        logger.info("Deleted case %s", case_id)
        return True
