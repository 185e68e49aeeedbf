from fastapi import APIRouter
from app.api.v1 import autosave, cases, documents

api_router = APIRouter()
api_router.include_router(cases.router, prefix="/v1/cases", tags=["cases"])
api_router.include_router(autosave.router, prefix="/v1/cases")
api_router.include_router(documents.router, prefix="/generate-pdf")
