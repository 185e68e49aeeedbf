# app/services/pdf_generation_service.py
import copy
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from app.core.config import settings
from app.core.errors import RendererNotConfiguredError
from app.services.completion import is_answered
from app.services.court_forms import DOCUMENT_TYPES
from app.services.field_mapper import FormFieldMapper
from app.services.pdf_renderer import DocumentRenderer
from app.utils.s3 import s3_configured, upload_bytes_to_s3

logger = logging.getLogger(__name__)


def _form_data_of(case) -> Mapping[str, Any]:
    if isinstance(case, Mapping):
        return case.get("form_data") or {}
    return getattr(case, "form_data", None) or {}


def _case_id_of(case) -> Optional[str]:
    if isinstance(case, Mapping):
        return case.get("id")
    return getattr(case, "id", None)


class PdfGenerationService:
    """
    Renders every known court form for a case.

    Forms are rendered one after another; a form that fails at every
    fallback level is logged and left out of the result.
    """

    def __init__(
        self,
        renderer: DocumentRenderer,
        mapper: FormFieldMapper = None,
        document_types: Iterable[str] = None,
    ):
        self.renderer = renderer
        self.mapper = mapper or FormFieldMapper()
        self.document_types = tuple(document_types or DOCUMENT_TYPES)

    def ensure_configured(self):
        if not self.renderer.is_configured():
            raise RendererNotConfiguredError(self.renderer.status()["message"])

    def generate(self, case) -> Dict[str, bytes]:
        # the mapper only reads, but keep the caller's record out of reach
        form_data = copy.deepcopy(dict(_form_data_of(case)))
        case_id = _case_id_of(case)
        if not any(is_answered(v) for v in form_data.values()):
            logger.info("Case %s has no answers, nothing to generate", case_id)
            return {}

        forms = {}
        for doc_type in self.document_types:
            try:
                values = self.mapper.map_fields(doc_type, form_data)
                forms[doc_type] = self.renderer.render(doc_type, values).data
            except Exception:
                logger.exception("Failed to generate %s for case %s", doc_type, case_id)
        logger.info("Generated %d/%d forms for case %s", len(forms), len(self.document_types), case_id)
        return forms


def archive_forms(case_id: str, forms: Mapping[str, bytes]) -> Dict[str, Dict[str, Any]]:
    """
    Upload generated forms to S3 when a bucket is configured and describe
    them for the case record. Upload failures are logged, not raised.
    """
    summary = {}
    for doc_type, data in forms.items():
        entry = {"name": f"{doc_type}_{case_id}.pdf", "size": len(data), "s3_key": None}
        if s3_configured():
            key = f"{settings.S3_PREFIX}/{case_id}/{doc_type}.pdf"
            try:
                entry["s3_key"] = upload_bytes_to_s3(key, data)
            except Exception as e:
                logger.warning("Could not archive %s for case %s: %s", doc_type, case_id, e)
        summary[doc_type] = entry
    return summary
