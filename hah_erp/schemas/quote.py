"""
Schemas para cotizaciones de servicios.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from hah_erp.models.quote import QuoteStatus
from hah_erp.schemas.common import PageMeta


class QuoteItemInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class QuoteCreate(BaseModel):
    patient_id: UUID | None = None
    patient_name: str | None = Field(None, max_length=200)
    patient_email: EmailStr | None = None
    patient_phone: str | None = Field(None, max_length=20)
    doctor_name: str | None = Field(None, max_length=200)
    items: list[QuoteItemInput] = Field(..., min_length=1)
    valid_until: date | None = Field(None, description="Por defecto hoy + 30 días")
    notes: str | None = None


class QuoteUpdate(BaseModel):
    patient_id: UUID | None = None
    patient_name: str | None = Field(None, max_length=200)
    patient_email: EmailStr | None = None
    patient_phone: str | None = Field(None, max_length=20)
    doctor_name: str | None = None
    items: list[QuoteItemInput] | None = Field(None, min_length=1)
    valid_until: date | None = None
    notes: str | None = None


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus


class QuoteItemResponse(BaseModel):
    id: UUID
    name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    sort_order: int

    model_config = {"from_attributes": True}


class QuoteResponse(BaseModel):
    id: UUID
    patient_id: UUID | None = None
    patient_name: str
    patient_email: str | None = None
    patient_phone: str | None = None
    doctor_name: str | None = None
    items: list[QuoteItemResponse] = []
    total_amount: Decimal
    status: QuoteStatus
    valid_until: date
    is_expired: bool = False
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class QuoteListResponse(PageMeta):
    items: list[QuoteResponse]


class QuoteStats(BaseModel):
    total: int
    draft: int
    sent: int
    accepted: int
    rejected: int
    expired: int
    accepted_value: Decimal
