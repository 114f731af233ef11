"""
Modelo Material — Maestro de materiales e inventario.

Es a la vez el catálogo de insumos que usan los procedimientos y el
registro de stock. El estado se recalcula en cada escritura a partir
del stock y los mínimos; `expired` solo se asigna manualmente al editar y
solo prevalece mientras haya stock por encima del mínimo.
"""

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from hah_erp.database import Base


class MaterialStatus(str, enum.Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    EXPIRED = "expired"


class Material(Base):
    __tablename__ = "materials"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Costo unitario (S/)"
    )

    # ── Stock ────────────────────────────────────────
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_stock: Mapped[int | None] = mapped_column(Integer)
    unit: Mapped[str] = mapped_column(String(30), nullable=False, default="unidades")
    status: Mapped[MaterialStatus] = mapped_column(
        Enum(MaterialStatus), nullable=False, default=MaterialStatus.IN_STOCK
    )
    last_restocked: Mapped[date | None] = mapped_column(Date)
    expiry_date: Mapped[date | None] = mapped_column(Date)

    # ── Clasificación ────────────────────────────────
    supplier: Mapped[str | None] = mapped_column(String(200))
    category: Mapped[str | None] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Material {self.name} stock={self.stock} [{self.status.value}]>"
