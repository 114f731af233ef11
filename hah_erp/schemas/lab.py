"""
Schemas de laboratorio: catálogo de exámenes, cotización y órdenes.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hah_erp.models.lab import LabOrderPriority, LabOrderStatus
from hah_erp.schemas.common import PageMeta
from hah_erp.services.billing import parse_legacy_price


# ── Catálogo de exámenes ─────────────────────────────


class LabExamCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=30)
    name: str = Field(..., min_length=1, max_length=300)
    price: Decimal = Field(Decimal("0"), ge=0, description='Acepta "S/ 1,234.50"')
    category: str | None = Field(None, max_length=100)
    description: str | None = None
    result_time: str | None = Field(None, max_length=100)
    preparation: str | None = None

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v):
        return parse_legacy_price(v)

    @field_validator("code", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("El campo no puede estar vacío")
        return cleaned


class LabExamUpdate(BaseModel):
    code: str | None = Field(None, min_length=1, max_length=30)
    name: str | None = Field(None, min_length=1, max_length=300)
    price: Decimal | None = Field(None, ge=0)
    category: str | None = None
    description: str | None = None
    result_time: str | None = None
    preparation: str | None = None
    is_active: bool | None = None

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v):
        if v is None:
            return v
        return parse_legacy_price(v)


class LabExamResponse(BaseModel):
    id: UUID
    code: str
    name: str
    price: Decimal
    category: str | None = None
    description: str | None = None
    result_time: str | None = None
    preparation: str | None = None
    is_active: bool

    model_config = {"from_attributes": True}


class LabExamListResponse(PageMeta):
    items: list[LabExamResponse]


class LabExamStats(BaseModel):
    total: int
    categories: int


# ── Cotización ───────────────────────────────────────


class LabQuoteRequest(BaseModel):
    exam_ids: list[UUID] = Field(..., min_length=1)


class LabQuoteLineResponse(BaseModel):
    exam_id: UUID
    code: str
    name: str
    price: Decimal
    client_price: Decimal


class LabQuoteResponse(BaseModel):
    exams: list[LabQuoteLineResponse]
    subtotal: Decimal
    markup_rate: Decimal
    surcharge_total: Decimal
    unit_surcharge: Decimal
    client_total: Decimal
    home_visit_cost: Decimal
    total: Decimal


# ── Órdenes ──────────────────────────────────────────


class LabOrderCreate(BaseModel):
    patient_id: UUID
    exam_ids: list[UUID] = Field(..., min_length=1)
    order_date: date | None = None
    physician_name: str | None = Field(None, max_length=200)
    priority: LabOrderPriority = LabOrderPriority.NORMAL
    observations: str | None = None


class LabOrderStatusUpdate(BaseModel):
    status: LabOrderStatus


class LabOrderResultUpdate(BaseModel):
    result_notes: str | None = None
    result_date: datetime | None = None
    status: LabOrderStatus | None = None


class LabOrderItemResponse(BaseModel):
    id: UUID
    exam_id: UUID | None = None
    exam_code: str
    exam_name: str
    price: Decimal
    status: LabOrderStatus

    model_config = {"from_attributes": True}


class LabOrderPatient(BaseModel):
    id: UUID
    name: str
    dni: str | None = None
    phone: str | None = None

    model_config = {"from_attributes": True}


class LabOrderResponse(BaseModel):
    id: UUID
    patient_id: UUID
    patient: LabOrderPatient | None = None
    order_date: date
    physician_name: str | None = None
    priority: LabOrderPriority
    observations: str | None = None
    status: LabOrderStatus
    total_amount: Decimal
    result_file_path: str | None = None
    result_date: datetime | None = None
    result_notes: str | None = None
    items: list[LabOrderItemResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LabOrderListResponse(PageMeta):
    items: list[LabOrderResponse]


class SignedUrlResponse(BaseModel):
    url: str
    expires_in: int
