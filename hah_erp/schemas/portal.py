"""
Schemas del portal de pacientes (consulta de resultados de laboratorio).
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PortalAccountResponse(BaseModel):
    """Credenciales para entregar al paciente. `password` solo al crear o resetear."""

    dni: str
    password: str | None = None
    already_exists: bool = False


class PortalLoginRequest(BaseModel):
    dni: str = Field(..., min_length=1, max_length=15)
    password: str = Field(..., min_length=1)

    @field_validator("dni")
    @classmethod
    def strip_dni(cls, v: str) -> str:
        return v.strip()


class PortalPatientProfile(BaseModel):
    id: UUID
    name: str
    dni: str | None = None
    email: str | None = None
    phone: str | None = None
    age: int | None = None
    gender: str | None = None

    model_config = {"from_attributes": True}


class PortalLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    patient: PortalPatientProfile


class PortalOrderItem(BaseModel):
    exam_code: str
    exam_name: str
    status: str

    model_config = {"from_attributes": True}


class PortalOrderResponse(BaseModel):
    id: UUID
    order_date: date
    physician_name: str | None = None
    status: str
    has_result: bool
    result_date: datetime | None = None
    result_notes: str | None = None
    items: list[PortalOrderItem] = []
