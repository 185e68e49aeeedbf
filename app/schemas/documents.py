# app/schemas/documents.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Optional


class GeneratePdfRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # optional here so a missing id is a 400, not a 422
    case_id: Optional[str] = Field(default=None, alias="caseId")


class GeneratedForm(BaseModel):
    name: str
    data: str  # base64
    size: int


class GeneratePdfResponse(BaseModel):
    success: bool
    caseId: str
    forms: Dict[str, GeneratedForm]
    generatedAt: str
    message: str


class PdfServiceStatus(BaseModel):
    configured: bool
    status: str
    message: str
