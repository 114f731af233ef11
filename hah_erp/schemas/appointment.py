"""
Schemas para Appointment (agendas de medicina y procedimientos).
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from hah_erp.core.timeutils import parse_time_12h
from hah_erp.models.appointment import AppointmentStatus, AppointmentType, AppointmentVariant
from hah_erp.schemas.common import PageMeta


def _normalize_time(v: str | None) -> str | None:
    if v is None:
        return v
    return parse_time_12h(v)


class AppointmentCreate(BaseModel):
    variant: AppointmentVariant = AppointmentVariant.MEDICINA
    patient_id: UUID | None = None
    patient_name: str | None = Field(None, max_length=200)
    patient_email: EmailStr | None = None
    patient_phone: str | None = Field(None, max_length=20)
    doctor_name: str | None = Field(None, max_length=200)
    doctor_specialty: str | None = Field(None, max_length=100)
    appointment_date: date
    appointment_time: str = Field(..., description='HH:MM o "8:00 AM"')
    duration: int = Field(30, ge=5, le=24 * 60, description="Duración en minutos")
    type: AppointmentType = AppointmentType.CONSULTA
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    location: str | None = Field(None, max_length=300)
    notes: str | None = None
    procedure_catalog_id: UUID | None = None
    procedure_name: str | None = Field(None, max_length=200)

    @field_validator("appointment_time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return _normalize_time(v)


class AppointmentUpdate(BaseModel):
    patient_id: UUID | None = None
    patient_name: str | None = Field(None, max_length=200)
    patient_email: EmailStr | None = None
    patient_phone: str | None = Field(None, max_length=20)
    doctor_name: str | None = None
    doctor_specialty: str | None = None
    appointment_date: date | None = None
    appointment_time: str | None = None
    duration: int | None = Field(None, ge=5, le=24 * 60)
    type: AppointmentType | None = None
    status: AppointmentStatus | None = None
    location: str | None = None
    notes: str | None = None
    procedure_catalog_id: UUID | None = None
    procedure_name: str | None = None

    @field_validator("appointment_time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return _normalize_time(v)


class AppointmentResponse(BaseModel):
    id: UUID
    variant: AppointmentVariant
    patient_id: UUID | None = None
    patient_name: str
    patient_email: str | None = None
    patient_phone: str | None = None
    doctor_name: str | None = None
    doctor_specialty: str | None = None
    appointment_date: date
    appointment_time: str
    duration: int
    type: AppointmentType
    status: AppointmentStatus
    location: str | None = None
    notes: str | None = None
    procedure_catalog_id: UUID | None = None
    procedure_name: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AppointmentListResponse(PageMeta):
    items: list[AppointmentResponse]
