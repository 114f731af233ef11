"""
Schemas del maestro de materiales / inventario.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hah_erp.models.material import MaterialStatus
from hah_erp.schemas.common import PageMeta


class MaterialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    unit_cost: Decimal = Field(Decimal("0"), ge=0)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    max_stock: int | None = Field(None, ge=0)
    unit: str = Field("unidades", max_length=30)
    supplier: str | None = Field(None, max_length=200)
    category: str | None = Field(None, max_length=100)
    description: str | None = None
    last_restocked: date | None = None
    expiry_date: date | None = None

    @field_validator("name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("El nombre del material es requerido")
        return cleaned


class MaterialUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    unit_cost: Decimal | None = Field(None, ge=0)
    stock: int | None = Field(None, ge=0)
    min_stock: int | None = Field(None, ge=0)
    max_stock: int | None = Field(None, ge=0)
    unit: str | None = Field(None, max_length=30)
    supplier: str | None = None
    category: str | None = None
    description: str | None = None
    last_restocked: date | None = None
    expiry_date: date | None = None
    status: MaterialStatus | None = None


class StockAdjustment(BaseModel):
    delta: int = Field(..., description="Positivo para ingreso, negativo para consumo")
    reason: str | None = Field(None, max_length=200)


class MaterialResponse(BaseModel):
    id: UUID
    name: str
    unit_cost: Decimal
    stock: int
    min_stock: int
    max_stock: int | None = None
    unit: str
    status: MaterialStatus
    supplier: str | None = None
    category: str | None = None
    description: str | None = None
    last_restocked: date | None = None
    expiry_date: date | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MaterialListResponse(PageMeta):
    items: list[MaterialResponse]


class InventoryStats(BaseModel):
    total: int
    low_stock: int
    out_of_stock: int
    expired: int
    inventory_value: Decimal
