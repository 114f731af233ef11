"""
Schemas para turnos eventuales de cuidado.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hah_erp.core.timeutils import parse_time_12h
from hah_erp.schemas.common import PageMeta


def _normalize_time(v: str | None) -> str | None:
    if not v:
        return None
    return parse_time_12h(v)


class CareShiftCreate(BaseModel):
    shift_date: date
    start_time: str | None = Field(None, description='HH:MM o "8:00 AM"')
    patient_id: UUID | None = None
    responsible_family_member: str | None = Field(None, max_length=200)
    district: str | None = Field(None, max_length=100)
    shift: str | None = Field(None, max_length=30)
    amount_due: Decimal = Field(Decimal("0"), ge=0)
    payment_method: str | None = Field(None, max_length=30)
    operation_number: str | None = Field(None, max_length=50)
    nurse: str | None = Field(None, max_length=200)
    extra_expenses: Decimal = Field(Decimal("0"), ge=0)
    utility: Decimal | None = None
    notes: str | None = None

    @field_validator("start_time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return _normalize_time(v)


class CareShiftUpdate(BaseModel):
    shift_date: date | None = None
    start_time: str | None = None
    patient_id: UUID | None = None
    responsible_family_member: str | None = None
    district: str | None = None
    shift: str | None = None
    amount_due: Decimal | None = Field(None, ge=0)
    payment_method: str | None = None
    operation_number: str | None = None
    nurse: str | None = None
    extra_expenses: Decimal | None = Field(None, ge=0)
    utility: Decimal | None = None
    notes: str | None = None

    @field_validator("start_time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return _normalize_time(v)


class ShiftPatient(BaseModel):
    id: UUID
    name: str
    phone: str | None = None

    model_config = {"from_attributes": True}


class CareShiftResponse(BaseModel):
    id: UUID
    shift_date: date
    start_time: str | None = None
    patient_id: UUID | None = None
    patient: ShiftPatient | None = None
    responsible_family_member: str | None = None
    district: str | None = None
    shift: str | None = None
    amount_due: Decimal
    payment_method: str | None = None
    operation_number: str | None = None
    nurse: str | None = None
    extra_expenses: Decimal
    utility: Decimal | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CareShiftListResponse(PageMeta):
    items: list[CareShiftResponse]


class ShiftReportRow(BaseModel):
    id: UUID
    shift_date: date
    start_time: str | None = None
    patient_name: str | None = None
    district: str | None = None
    shift: str | None = None
    nurse: str | None = None
    amount_due: Decimal
    payment_method: str | None = None
    extra_expenses: Decimal
    utility: Decimal | None = None


class ShiftReportTotals(BaseModel):
    total_revenue: Decimal
    total_shifts: int
    average: Decimal


class ShiftReport(BaseModel):
    date_from: date
    date_to: date
    rows: list[ShiftReportRow]
    totals: ShiftReportTotals
