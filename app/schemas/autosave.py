# app/schemas/autosave.py
from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import datetime


class FieldEdits(BaseModel):
    fields: Dict[str, Any]


class AutoSaveSessionOut(BaseModel):
    session_id: str
    case_id: str
    state: str
    status: Optional[str] = None
    completion_percentage: int
    pending: bool
    last_saved_at: Optional[datetime] = None
