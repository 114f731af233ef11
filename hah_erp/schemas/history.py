"""
Schemas del historial clínico y de exámenes del paciente.
"""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

ExamStatus = Literal["Pendiente", "En Proceso", "Completado", "Cancelado"]


class PatientHistoryCreate(BaseModel):
    patient_id: UUID
    entry_date: date
    entry_type: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    notes: str | None = None
    attachments: list[str] = []


class PatientHistoryUpdate(BaseModel):
    entry_date: date | None = None
    entry_type: str | None = Field(None, min_length=1, max_length=100)
    title: str | None = Field(None, min_length=1, max_length=200)
    notes: str | None = None
    attachments: list[str] | None = None


class PatientHistoryResponse(BaseModel):
    id: UUID
    patient_id: UUID
    entry_date: date
    entry_type: str
    title: str
    notes: str | None = None
    attachments: list[str] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ExamHistoryCreate(BaseModel):
    patient_id: UUID
    exam_date: date
    exam_type: str = Field(..., min_length=1, max_length=100)
    exam_name: str = Field(..., min_length=1, max_length=200)
    exam_code: str | None = Field(None, max_length=50)
    results: str | None = None
    notes: str | None = None
    ordered_by: str | None = Field(None, max_length=200)
    performed_by: str | None = Field(None, max_length=200)
    status: ExamStatus = "Pendiente"
    attachments: list[str] = []


class ExamHistoryUpdate(BaseModel):
    exam_date: date | None = None
    exam_type: str | None = Field(None, min_length=1, max_length=100)
    exam_name: str | None = Field(None, min_length=1, max_length=200)
    exam_code: str | None = Field(None, max_length=50)
    results: str | None = None
    notes: str | None = None
    ordered_by: str | None = Field(None, max_length=200)
    performed_by: str | None = Field(None, max_length=200)
    status: ExamStatus | None = None
    attachments: list[str] | None = None


class ExamHistoryResponse(BaseModel):
    id: UUID
    patient_id: UUID
    exam_date: date
    exam_type: str
    exam_name: str
    exam_code: str | None = None
    results: str | None = None
    notes: str | None = None
    ordered_by: str | None = None
    performed_by: str | None = None
    status: str
    attachments: list[str] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
