"""
Schemas para contratos de servicio con pacientes.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from hah_erp.core.timeutils import parse_time_12h
from hah_erp.models.contract import ContractStatus
from hah_erp.schemas.common import PageMeta


class PatientContractCreate(BaseModel):
    patient_id: UUID
    contract_date: date | None = None
    responsible_family_member: str = Field(..., min_length=1, max_length=200)
    service_type: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: date | None = None
    start_time: str | None = None
    monthly_amount: Decimal = Field(Decimal("0"), ge=0)
    hourly_rate: Decimal | None = Field(None, ge=0)
    payment_method: str = Field(..., min_length=1, max_length=30)
    status: ContractStatus = ContractStatus.ACTIVO
    notes: str | None = None

    @field_validator("responsible_family_member", "service_type", "payment_method")
    @classmethod
    def not_blank(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("El campo no puede estar vacío")
        return cleaned

    @field_validator("start_time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return parse_time_12h(v) if v else None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("La fecha de fin no puede ser anterior a la de inicio")
        return self


class PatientContractUpdate(BaseModel):
    contract_date: date | None = None
    responsible_family_member: str | None = Field(None, min_length=1, max_length=200)
    service_type: str | None = Field(None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    start_time: str | None = None
    monthly_amount: Decimal | None = Field(None, ge=0)
    hourly_rate: Decimal | None = Field(None, ge=0)
    payment_method: str | None = Field(None, min_length=1, max_length=30)
    status: ContractStatus | None = None
    notes: str | None = None

    @field_validator("start_time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return parse_time_12h(v) if v else None


class ContractPatientSummary(BaseModel):
    id: UUID
    name: str
    dni: str | None = None

    model_config = {"from_attributes": True}


class PatientContractResponse(BaseModel):
    id: UUID
    contract_number: str
    patient_id: UUID
    patient: ContractPatientSummary | None = None
    contract_date: date
    responsible_family_member: str
    service_type: str
    start_date: date
    end_date: date | None = None
    start_time: str | None = None
    monthly_amount: Decimal
    hourly_rate: Decimal | None = None
    payment_method: str
    status: ContractStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PatientContractListResponse(PageMeta):
    items: list[PatientContractResponse]


class ContractStats(BaseModel):
    total: int
    active: int
    inactive: int
    suspended: int
    finished: int
