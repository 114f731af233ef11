"""
Schemas para Patient.
"""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from hah_erp.schemas.common import PageMeta

PatientStatus = Literal["Activo", "Inactivo"]


class PatientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    dni: str | None = Field(
        None, min_length=8, max_length=15,
        description="DNI o carné de extranjería"
    )
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    age: int | None = Field(None, ge=0, le=130)
    gender: str | None = Field(None, pattern=r"^[MF]$")
    address: str | None = Field(None, max_length=500)
    district: str | None = Field(None, max_length=100)
    last_visit: date | None = None
    status: PatientStatus = "Activo"
    blood_type: str | None = Field(
        None, pattern=r"^(A|B|AB|O)[+-]$",
        description="Tipo de sangre: A+, A-, B+, B-, O+, O-, AB+, AB-"
    )
    allergies: list[str] | None = None
    current_medications: list[str] | None = None
    primary_physician: str | None = Field(None, max_length=200)
    primary_diagnosis: str | None = None
    notes: str | None = Field(None, max_length=2000)
    emergency_contact_name: str | None = Field(None, max_length=200)
    emergency_contact_phone: str | None = Field(None, max_length=20)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("El nombre no puede estar vacío")
        return cleaned

    @field_validator("dni")
    @classmethod
    def validate_dni(cls, v: str | None) -> str | None:
        if v is None:
            return v
        cleaned = v.strip()
        return cleaned or None


class PatientCreate(PatientBase):
    pass


class PatientUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    dni: str | None = Field(None, min_length=8, max_length=15)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    age: int | None = Field(None, ge=0, le=130)
    gender: str | None = Field(None, pattern=r"^[MF]$")
    address: str | None = Field(None, max_length=500)
    district: str | None = Field(None, max_length=100)
    last_visit: date | None = None
    status: PatientStatus | None = None
    blood_type: str | None = Field(None, pattern=r"^(A|B|AB|O)[+-]$")
    allergies: list[str] | None = None
    current_medications: list[str] | None = None
    primary_physician: str | None = None
    primary_diagnosis: str | None = None
    notes: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None


class PatientResponse(BaseModel):
    id: UUID
    name: str
    dni: str | None = None
    email: str | None = None
    phone: str | None = None
    age: int | None = None
    gender: str | None = None
    address: str | None = None
    district: str | None = None
    last_visit: date | None = None
    status: str
    blood_type: str | None = None
    allergies: list[str] | None = None
    current_medications: list[str] | None = None
    primary_physician: str | None = None
    primary_diagnosis: str | None = None
    notes: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PatientSummary(BaseModel):
    """Datos mínimos del paciente para listados de otros módulos."""
    id: UUID
    name: str
    dni: str | None = None
    phone: str | None = None
    district: str | None = None

    model_config = {"from_attributes": True}


class PatientListResponse(PageMeta):
    """Respuesta paginada de listado de pacientes."""
    items: list[PatientResponse]


class PatientStats(BaseModel):
    total: int
    male: int
    female: int
    active: int
    with_visit_this_month: int
