"""
Schemas del catálogo de procedimientos y de los registros de procedimientos.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hah_erp.schemas.common import PageMeta


# ── Catálogo ─────────────────────────────────────────


class MaterialItem(BaseModel):
    name: str = Field(..., max_length=200)
    quantity: Decimal | None = Field(None, description="<= 0 o vacío se toma como 1")
    unit_cost: Decimal = Field(Decimal("0"), ge=0)


class ProcedureCatalogCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    base_price: Decimal = Field(Decimal("0"), ge=0)
    professional_fees: Decimal = Field(Decimal("0"), ge=0)
    mobility_cost: Decimal = Field(Decimal("0"), ge=0)
    materials: list[MaterialItem] = []

    @field_validator("name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("El nombre del procedimiento es requerido")
        return cleaned


class ProcedureCatalogUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    base_price: Decimal | None = Field(None, ge=0)
    professional_fees: Decimal | None = Field(None, ge=0)
    mobility_cost: Decimal | None = Field(None, ge=0)
    materials: list[MaterialItem] | None = None
    is_active: bool | None = None


class CatalogMaterialResponse(BaseModel):
    id: UUID
    material_name: str
    quantity: Decimal
    unit_cost: Decimal
    sort_order: int

    model_config = {"from_attributes": True}


class ProcedureCatalogResponse(BaseModel):
    id: UUID
    name: str
    base_price: Decimal
    professional_fees: Decimal
    mobility_cost: Decimal
    total_cost: Decimal
    utility: Decimal
    is_active: bool
    materials: list[CatalogMaterialResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CostPreviewRequest(BaseModel):
    base_price: Decimal = Field(Decimal("0"), ge=0)
    professional_fees: Decimal = Field(Decimal("0"), ge=0)
    mobility_cost: Decimal = Field(Decimal("0"), ge=0)
    materials: list[MaterialItem] = []


class CostPreviewResponse(BaseModel):
    materials: list[MaterialItem]
    materials_cost: Decimal
    total_cost: Decimal
    utility: Decimal


# ── Registros ────────────────────────────────────────

PaymentStatus = Literal["pendiente", "cancelado"]


class PaymentInput(BaseModel):
    """Pago con un solo método; se reparte en la columna correspondiente."""

    method: Literal["yape", "plin", "transferencia", "tarjeta", "efectivo"]
    amount: Decimal = Field(..., ge=0)


class PaymentMethodOption(BaseModel):
    value: str
    label: str


class ProcedureRecordBase(BaseModel):
    record_date: date
    patient_id: UUID | None = None
    patient_name: str | None = Field(None, max_length=200)
    procedure_catalog_id: UUID | None = None
    procedure_name: str | None = Field(None, max_length=200)
    quantity: int = Field(1, ge=1)
    district: str | None = Field(None, max_length=100)
    yape: Decimal = Field(Decimal("0"), ge=0)
    plin: Decimal = Field(Decimal("0"), ge=0)
    transfer_deposit: Decimal = Field(Decimal("0"), ge=0)
    card_link_pos: Decimal = Field(Decimal("0"), ge=0)
    cash: Decimal = Field(Decimal("0"), ge=0)
    operation_number: str | None = Field(None, max_length=50)
    material_expenses: Decimal = Field(Decimal("0"), ge=0)
    fuel: Decimal = Field(Decimal("0"), ge=0)
    additional_cost: Decimal = Field(Decimal("0"), ge=0)
    notes: str | None = None


class ProcedureRecordCreate(ProcedureRecordBase):
    payment: PaymentInput | None = Field(
        None, description="Alternativa a llenar las columnas de pago una por una"
    )


class ProcedureRecordUpdate(BaseModel):
    record_date: date | None = None
    patient_id: UUID | None = None
    patient_name: str | None = Field(None, max_length=200)
    procedure_catalog_id: UUID | None = None
    procedure_name: str | None = Field(None, max_length=200)
    quantity: int | None = Field(None, ge=1)
    district: str | None = None
    yape: Decimal | None = Field(None, ge=0)
    plin: Decimal | None = Field(None, ge=0)
    transfer_deposit: Decimal | None = Field(None, ge=0)
    card_link_pos: Decimal | None = Field(None, ge=0)
    cash: Decimal | None = Field(None, ge=0)
    operation_number: str | None = None
    material_expenses: Decimal | None = Field(None, ge=0)
    fuel: Decimal | None = Field(None, ge=0)
    additional_cost: Decimal | None = Field(None, ge=0)
    notes: str | None = None
    payment: PaymentInput | None = None


class ProcedureRecordResponse(ProcedureRecordBase):
    id: UUID
    income: Decimal
    utility: Decimal | None = None
    payment_method: str
    payment_amount: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProcedureRecordListResponse(PageMeta):
    items: list[ProcedureRecordResponse]


class RecordTotals(BaseModel):
    """Totales rápidos del rango: ingresos, materiales y movilidad."""
    income: Decimal
    materials: Decimal
    mobility: Decimal


class ProcedureReportTotals(BaseModel):
    total_records: int
    income: Decimal
    materials: Decimal
    mobility: Decimal
    cost: Decimal
    utility: Decimal


class ProcedureReportRow(BaseModel):
    id: UUID
    record_date: date
    patient_name: str | None = None
    procedure_name: str | None = None
    quantity: int
    district: str | None = None
    payment_method: str
    operation_number: str | None = None
    income: Decimal
    material_expenses: Decimal
    fuel: Decimal
    cost: Decimal
    utility: Decimal


class ProcedureReport(BaseModel):
    date_from: date
    date_to: date
    rows: list[ProcedureReportRow]
    totals: ProcedureReportTotals
