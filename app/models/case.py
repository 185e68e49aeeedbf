# app/models/case.py
import uuid

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB

from app.db.base import Base

JSONType = JSON().with_variant(JSONB, "postgresql")


def _new_case_id():
    return str(uuid.uuid4())


class Case(Base):
    __tablename__ = "cases"
    id = Column(String(36), primary_key=True, default=_new_case_id)
    owner = Column(String(255), nullable=False, index=True)  # creator's email
    status = Column(String(20), nullable=False, default="draft")
    form_data = Column(JSONType, nullable=False, default=dict)
    completion_percentage = Column(Integer, nullable=False, default=0)
    minor_name = Column(String(255), nullable=True, index=True)
    last_section_completed = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    collaborators = Column(JSONType, nullable=False, default=list)
    generated_pdfs = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
