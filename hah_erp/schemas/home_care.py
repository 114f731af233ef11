"""
Schemas de cuidados en casa: planes, contratos y periodos quincenales.

Las listas de fechas (feriados, pausas) aceptan fechas ISO o el texto
libre de las planillas antiguas ("23-28-29/07/2025", "08 Y 09/12/2025").
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hah_erp.core.timeutils import parse_time_12h
from hah_erp.models.home_care import HomeCarePaymentMethod
from hah_erp.services.date_lists import coerce_date_list, parse_pause_hours


# ── Planes ───────────────────────────────────────────


class HomeCarePlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    shift: str | None = Field(None, max_length=30)
    monthly_amount: Decimal = Field(..., ge=0)


class HomeCarePlanUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    shift: str | None = Field(None, max_length=30)
    monthly_amount: Decimal | None = Field(None, ge=0)
    is_active: bool | None = None


class HomeCarePlanResponse(BaseModel):
    id: UUID
    name: str
    shift: str | None = None
    monthly_amount: Decimal
    is_active: bool

    model_config = {"from_attributes": True}


# ── Contratos ────────────────────────────────────────


def _check_start_time(v: str | None) -> str | None:
    if v is None:
        return v
    parse_time_12h(v)
    return v.strip()


class HomeCareContractCreate(BaseModel):
    patient_id: UUID
    plan_id: UUID | None = None
    responsible_family_member: str | None = Field(None, max_length=200)
    start_time: str = Field("8:00 AM", max_length=20)
    start_date: date | None = None
    plan_name: str | None = Field(None, max_length=150)
    monthly_amount: Decimal | None = Field(None, ge=0)

    @field_validator("start_time")
    @classmethod
    def valid_start_time(cls, v: str) -> str:
        return _check_start_time(v)


class HomeCareContractUpdate(BaseModel):
    plan_id: UUID | None = None
    responsible_family_member: str | None = Field(None, max_length=200)
    start_time: str | None = Field(None, max_length=20)
    start_date: date | None = None
    plan_name: str | None = Field(None, max_length=150)
    monthly_amount: Decimal | None = Field(None, ge=0)
    is_active: bool | None = None

    @field_validator("start_time")
    @classmethod
    def valid_start_time(cls, v: str | None) -> str | None:
        return _check_start_time(v)


class ContractPatient(BaseModel):
    id: UUID
    name: str
    dni: str | None = None
    phone: str | None = None
    address: str | None = None
    district: str | None = None

    model_config = {"from_attributes": True}


class HomeCareContractResponse(BaseModel):
    id: UUID
    patient_id: UUID
    patient: ContractPatient | None = None
    plan_id: UUID | None = None
    responsible_family_member: str | None = None
    start_time: str
    start_date: date | None = None
    plan_name: str | None = None
    monthly_amount: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class HomeCareContractSummary(BaseModel):
    contract_id: UUID
    total_billed: Decimal
    total_paid: Decimal
    total_pending: Decimal
    period_count: int


# ── Periodos ─────────────────────────────────────────


class _PeriodInputs(BaseModel):
    """Validadores compartidos para las entradas legacy."""

    @field_validator("holiday_dates", "pause_dates", mode="before", check_fields=False)
    @classmethod
    def parse_dates(cls, v):
        if v is None:
            return v
        return coerce_date_list(v)

    @field_validator("pause_hours", mode="before", check_fields=False)
    @classmethod
    def parse_hours(cls, v):
        if v is None:
            return v
        return parse_pause_hours(v)


class HomeCarePeriodCreate(_PeriodInputs):
    item_number: int | None = Field(None, ge=1)
    payment_number: int | None = Field(None, ge=1)
    quincena_payment_date: date | None = None
    shift: str = Field("24X24", max_length=30)
    date_from: date | None = None
    date_to: date | None = None
    holiday_dates: list[date] = []
    pause_hours: int = Field(0, ge=0)
    pause_dates: list[date] = []
    paid_at: date | None = None
    payment_method: HomeCarePaymentMethod | None = None
    operation_number: str | None = Field(None, max_length=50)
    invoice_number: str | None = Field(None, max_length=50)


class HomeCarePeriodUpdate(_PeriodInputs):
    item_number: int | None = Field(None, ge=1)
    payment_number: int | None = Field(None, ge=1)
    quincena_payment_date: date | None = None
    shift: str | None = Field(None, max_length=30)
    date_from: date | None = None
    date_to: date | None = None
    holiday_dates: list[date] | None = None
    pause_hours: int | None = Field(None, ge=0)
    pause_dates: list[date] | None = None
    paid_at: date | None = None
    payment_method: HomeCarePaymentMethod | None = None
    operation_number: str | None = None
    invoice_number: str | None = None


class HomeCarePeriodResponse(BaseModel):
    id: UUID
    contract_id: UUID
    item_number: int
    payment_number: int
    quincena_payment_date: date | None = None
    shift: str
    date_from: date
    date_to: date
    base_amount: Decimal
    holiday_dates: list[date] = []
    holiday_amount: Decimal
    pause_hours: int
    pause_dates: list[date] = []
    total_amount: Decimal
    paid_at: date | None = None
    payment_method: HomeCarePaymentMethod | None = None
    operation_number: str | None = None
    invoice_number: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("holiday_dates", "pause_dates", mode="before")
    @classmethod
    def stored_dates(cls, v):
        return coerce_date_list(v)


class BillingPreviewRequest(_PeriodInputs):
    monthly_amount: Decimal | None = Field(None, ge=0)
    contract_id: UUID | None = None
    holiday_dates: list[date] = []
    pause_hours: int = Field(0, ge=0)


class BillingPreviewResponse(BaseModel):
    quincena_amount: Decimal
    per_day: Decimal
    per_hour: Decimal
    holiday_count: int
    holiday_amount: Decimal
    pause_hours: int
    pause_deduction: Decimal
    total_amount: Decimal


# ── Reporte ──────────────────────────────────────────


class HomeCareReportRow(BaseModel):
    period_id: UUID
    paid_at: date | None = None
    patient_name: str | None = None
    shift: str
    date_from: date
    date_to: date
    total_amount: Decimal
    payment_method: HomeCarePaymentMethod | None = None


class HomeCareReportTotals(BaseModel):
    total_revenue: Decimal
    total_periods: int
    average: Decimal


class HomeCareReport(BaseModel):
    date_from: date
    date_to: date
    rows: list[HomeCareReportRow]
    totals: HomeCareReportTotals
