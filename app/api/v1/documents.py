# app/api/v1/documents.py
import base64
import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_owner, get_db, get_generation_service
from app.core.errors import RendererNotConfiguredError
from app.schemas.documents import GeneratePdfRequest, GeneratePdfResponse, PdfServiceStatus
from app.services.case_service import CaseService
from app.services.pdf_generation_service import PdfGenerationService, archive_forms

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Documents"])


@router.get("", response_model=PdfServiceStatus)
def pdf_service_status(service: PdfGenerationService = Depends(get_generation_service)):
    return service.renderer.status()


@router.post("", response_model=GeneratePdfResponse)
def generate_pdf(
    payload: Optional[GeneratePdfRequest] = None,
    db: Session = Depends(get_db),
    owner: str = Depends(get_current_owner),
    service: PdfGenerationService = Depends(get_generation_service),
):
    """
    Render every court form for a case. Forms that could not be produced are
    left out; a partial set is still a success.
    """
    if payload is None or not payload.case_id:
        raise HTTPException(status_code=400, detail="Case ID is required")

    try:
        service.ensure_configured()
    except RendererNotConfiguredError as e:
        logger.error("PDF renderer not configured: %s", e)
        raise HTTPException(status_code=503, detail=f"PDF service not configured: {e}")

    case_svc = CaseService(db)
    case = case_svc.get_owned_case(payload.case_id, owner)
    if not case:
        raise HTTPException(status_code=404, detail="Case not found")

    try:
        logger.info("Generating PDFs for case %s", case.id)
        generated = service.generate(case)
        forms = {
            doc_type: {
                "name": f"{doc_type}_{case.id}.pdf",
                "data": base64.b64encode(data).decode("ascii"),
                "size": len(data),
            }
            for doc_type, data in generated.items()
        }
        if generated:
            case_svc.mark_generated(case.id, archive_forms(case.id, generated))
    except Exception as e:
        logger.exception("PDF generation failed for case %s", payload.case_id)
        raise HTTPException(status_code=500, detail=f"PDF generation failed: {e}")

    return {
        "success": True,
        "caseId": case.id,
        "forms": forms,
        "generatedAt": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "message": f"Generated {len(forms)} PDF forms successfully",
    }
