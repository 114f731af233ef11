"""
Schemas de registros de citas médicas (ingreso / costo por cita).
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from hah_erp.schemas.common import PageMeta


class MedicalRecordCreate(BaseModel):
    appointment_id: UUID | None = Field(None, description="Vacío para un registro manual")
    record_date: date
    patient_id: UUID | None = None
    patient_name: str | None = Field(None, max_length=200)
    appointment_type: str = Field("consulta", max_length=30)
    doctor_name: str | None = Field(None, max_length=200)
    income: Decimal = Field(Decimal("0"), ge=0)
    cost: Decimal = Field(Decimal("0"), ge=0)
    notes: str | None = None


class MedicalRecordUpdate(BaseModel):
    """Solo los montos y las notas son editables."""
    income: Decimal | None = Field(None, ge=0)
    cost: Decimal | None = Field(None, ge=0)
    notes: str | None = None


class MedicalRecordResponse(BaseModel):
    id: UUID
    appointment_id: UUID | None = None
    record_date: date
    patient_id: UUID | None = None
    patient_name: str | None = None
    appointment_type: str
    doctor_name: str | None = None
    income: Decimal
    cost: Decimal
    utility: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MedicalRecordListResponse(PageMeta):
    items: list[MedicalRecordResponse]


class MedicalReportRow(BaseModel):
    id: UUID
    record_date: date
    patient_name: str
    appointment_type: str
    doctor_name: str | None = None
    income: Decimal
    cost: Decimal
    utility: Decimal


class MedicalReportTotals(BaseModel):
    total_records: int
    total_income: Decimal
    total_cost: Decimal
    total_utility: Decimal


class MedicalReport(BaseModel):
    date_from: date
    date_to: date
    rows: list[MedicalReportRow]
    totals: MedicalReportTotals
