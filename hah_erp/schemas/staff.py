"""
Schemas para Staff (personal de la empresa).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from hah_erp.schemas.common import PageMeta

StaffStatus = Literal["Activo", "Inactivo", "Vacaciones", "Licencia"]


class StaffBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    age: int | None = Field(None, ge=14, le=100)
    gender: str | None = Field(None, pattern=r"^[MF]$")
    address: str | None = Field(None, max_length=500)
    position: str = Field(..., min_length=1, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    salary: Decimal | None = Field(None, ge=0, decimal_places=2)
    hire_date: date | None = None
    status: StaffStatus = "Activo"
    emergency_contact: str | None = Field(None, max_length=200)
    emergency_phone: str | None = Field(None, max_length=20)
    qualifications: list[str] | None = None
    certifications: list[str] | None = None

    @field_validator("name", "position", "department")
    @classmethod
    def not_blank(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("El campo no puede estar vacío")
        return cleaned


class StaffCreate(StaffBase):
    pass


class StaffUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    age: int | None = Field(None, ge=14, le=100)
    gender: str | None = Field(None, pattern=r"^[MF]$")
    address: str | None = None
    position: str | None = Field(None, min_length=1, max_length=100)
    department: str | None = Field(None, min_length=1, max_length=100)
    salary: Decimal | None = Field(None, ge=0, decimal_places=2)
    hire_date: date | None = None
    status: StaffStatus | None = None
    emergency_contact: str | None = None
    emergency_phone: str | None = None
    qualifications: list[str] | None = None
    certifications: list[str] | None = None


class StaffResponse(BaseModel):
    id: UUID
    name: str
    email: str | None = None
    phone: str | None = None
    age: int | None = None
    gender: str | None = None
    address: str | None = None
    position: str
    department: str
    salary: Decimal | None = None
    hire_date: date | None = None
    status: str
    emergency_contact: str | None = None
    emergency_phone: str | None = None
    qualifications: list[str] | None = None
    certifications: list[str] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StaffListResponse(PageMeta):
    items: list[StaffResponse]


class StaffStats(BaseModel):
    total: int
    male: int
    female: int
    active: int
    hired_this_month: int
    hired_this_year: int


ActivityType = Literal[
    "cita_medicina",
    "cita_procedimiento",
    "turno_cuidado",
    "eliminacion",
    "valoracion",
    "evolucion",
    "signos_vitales",
]


class StaffActivityItem(BaseModel):
    """Entrada del feed de actividad reciente de un empleado."""
    id: str = Field(..., description="Prefijo de la fuente + id del registro (med-, shift-, vs-...)")
    type: ActivityType
    type_label: str
    description: str
    date: date
    time: str = ""
    extra: str | None = None
