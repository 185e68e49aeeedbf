# app/schemas/case.py
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime


class CaseCreate(BaseModel):
    minor_name: Optional[str] = None
    initial_data: Dict[str, Any] = {}


class CaseUpdate(BaseModel):
    form_data: Optional[Dict[str, Any]] = None
    last_section_completed: Optional[str] = None
    notes: Optional[str] = None
    collaborators: Optional[List[str]] = None


class CaseOut(BaseModel):
    id: str
    owner: str
    status: str
    form_data: Dict[str, Any]
    completion_percentage: int
    minor_name: Optional[str]
    last_section_completed: Optional[str]
    notes: Optional[str]
    collaborators: List[str]
    generated_pdfs: Optional[Dict[str, Any]]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class CaseListOut(BaseModel):
    id: str
    status: str
    status_label: str
    minor_name: Optional[str]
    completion_percentage: int
    updated_at: Optional[datetime]
