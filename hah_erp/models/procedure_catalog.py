"""
Modelos del catálogo de procedimientos de enfermería.

Cada procedimiento tiene un precio base, honorarios, movilidad y una lista
de materiales. El costo total y la utilidad se persisten ya calculados:

    total_cost = honorarios + movilidad + Σ(cantidad × costo unitario)
    utility    = base_price − total_cost
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hah_erp.database import Base


class ProcedureCatalog(Base):
    __tablename__ = "procedure_catalog"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # ── Precio y costos (S/) ─────────────────────────
    base_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Precio al cliente"
    )
    professional_fees: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Honorarios"
    )
    mobility_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Movilidad"
    )
    total_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    utility: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relaciones ───────────────────────────────────
    materials: Mapped[list["ProcedureCatalogMaterial"]] = relationship(
        "ProcedureCatalogMaterial",
        back_populates="procedure",
        cascade="all, delete-orphan",
        order_by="ProcedureCatalogMaterial.sort_order",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_procedure_catalog_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<ProcedureCatalog {self.name} S/{self.base_price}>"


class ProcedureCatalogMaterial(Base):
    __tablename__ = "procedure_catalog_materials"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    procedure_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("procedure_catalog.id", ondelete="CASCADE"), nullable=False, index=True
    )
    material_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=1
    )
    unit_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Costo unitario (S/)"
    )
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    procedure: Mapped["ProcedureCatalog"] = relationship(
        "ProcedureCatalog", back_populates="materials"
    )

    def __repr__(self) -> str:
        return f"<ProcedureCatalogMaterial {self.material_name} x{self.quantity}>"
