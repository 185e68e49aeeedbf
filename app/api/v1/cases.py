# app/api/v1/cases.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from app.core.dependencies import get_db, get_current_owner
from app.schemas.case import CaseCreate, CaseOut, CaseListOut, CaseUpdate
from app.services.case_service import CaseService
from app.services.completion import status_label
from typing import List, Optional

router = APIRouter()


@router.post("", response_model=CaseOut, status_code=201)
def create_case(payload: CaseCreate, db: Session = Depends(get_db), owner: str = Depends(get_current_owner)):
    svc = CaseService(db)
    return svc.create_case(owner, initial_data=payload.initial_data, minor_name=payload.minor_name)


@router.get("/list-cases", response_model=List[CaseListOut])
def list_cases(
    q: Optional[str] = Query(None, description="Search minor name and answers"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, le=100),
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
):
    """
    List the signed-in user's cases, most recently edited first
    """
    service = CaseService(db)
    return [
        CaseListOut(
            id=c.id,
            status=c.status,
            status_label=status_label(c.completion_percentage, c.status),
            minor_name=c.minor_name,
            completion_percentage=c.completion_percentage,
            updated_at=c.updated_at,
        )
        for c in service.list_cases(owner, q=q, skip=skip, limit=limit)
    ]


@router.get("/{case_id}", response_model=CaseOut)
def get_case(case_id: str, db: Session = Depends(get_db), owner: str = Depends(get_current_owner)):
    svc = CaseService(db)
    c = svc.get_owned_case(case_id, owner)
    if not c:
        raise HTTPException(status_code=404, detail="Case not found")
    return c


@router.put("/{case_id}", response_model=CaseOut)
def update_case(
    case_id: str,
    payload: CaseUpdate,
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
):
    """
    Bulk update: replaces form_data wholesale (completion is recomputed)
    """
    svc = CaseService(db)
    if not svc.get_owned_case(case_id, owner):
        raise HTTPException(status_code=404, detail="Case not found")
    return svc.update_case(case_id, payload.model_dump(exclude_none=True))


@router.delete("/{case_id}", status_code=204)
def delete_case(case_id: str, db: Session = Depends(get_db), owner: str = Depends(get_current_owner)):
    svc = CaseService(db)
    if not svc.get_owned_case(case_id, owner) or not svc.delete_case(case_id):
        raise HTTPException(status_code=404, detail="Case not found")
