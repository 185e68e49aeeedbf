# app/services/field_mapper.py
import logging
from typing import Any, Dict, Mapping

from app.services.court_forms import COURT_FORMS, CourtForm
from app.utils.field_values import Derivation, to_display

logger = logging.getLogger(__name__)


class FormFieldMapper:
    """
    Maps a case's free-form answers onto one court form's field vocabulary.

    The algorithm is the same for every form; only the tables differ. Absent
    sources map to "" and an unknown form maps to {}.
    """

    def __init__(self, forms: Mapping[str, CourtForm] = None):
        self.forms = dict(forms) if forms is not None else dict(COURT_FORMS)

    @property
    def document_types(self):
        return tuple(self.forms)

    def map_fields(self, doc_type: str, form_data: Mapping[str, Any]) -> Dict[str, str]:
        form = self.forms.get(doc_type)
        if form is None:
            logger.warning("No field table for document type %s", doc_type)
            return {}
        form_data = form_data or {}
        mapped = {}
        for target, source in form.fields.items():
            mapped[target] = self._resolve(doc_type, target, source, form_data)
        return mapped

    def _resolve(self, doc_type, target, source, form_data) -> str:
        try:
            if isinstance(source, Derivation):
                return source.resolve(form_data)
            return to_display(form_data.get(source))
        except Exception:
            logger.exception("Could not map %s.%s, leaving it blank", doc_type, target)
            return ""
