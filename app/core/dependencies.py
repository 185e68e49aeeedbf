# app/core/dependencies.py
from fastapi import Header, HTTPException, Request

from app.db.session import SessionLocal
from app.services.autosave import AutoSaveRegistry
from app.services.pdf_generation_service import PdfGenerationService
from app.services.pdf_renderer import DocumentRenderer


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_owner(x_user_email: str = Header(None)) -> str:
    """
    Identity comes from the upstream auth provider, which forwards the
    signed-in user's email.
    """
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Email header")
    return x_user_email.strip().lower()


def get_renderer() -> DocumentRenderer:
    return DocumentRenderer.from_settings()


def get_generation_service(request: Request) -> PdfGenerationService:
    renderer = getattr(request.app.state, "renderer", None) or get_renderer()
    return PdfGenerationService(renderer)


def get_autosave_registry(request: Request) -> AutoSaveRegistry:
    return request.app.state.autosave
