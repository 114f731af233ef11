"""
Modelo ProcedureRecord — Registro de procedimientos realizados y su cobro.

El ingreso es la suma de las columnas de pago (yape, plin, transferencia,
tarjeta/POS, efectivo). La utilidad se guarda calculada:

    utility = ingreso − costo catálogo − gastos material − combustible − costo adicional
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from hah_erp.database import Base

PAYMENT_COLUMNS = ("yape", "plin", "transfer_deposit", "card_link_pos", "cash")


class ProcedureRecord(Base):
    __tablename__ = "procedure_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    record_date: Mapped[date] = mapped_column(Date, nullable=False)

    # ── Paciente y procedimiento (snapshot) ──────────
    patient_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("patients.id", ondelete="SET NULL"), index=True
    )
    patient_name: Mapped[str | None] = mapped_column(String(200))
    procedure_catalog_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("procedure_catalog.id", ondelete="SET NULL")
    )
    procedure_name: Mapped[str | None] = mapped_column(String(200))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    district: Mapped[str | None] = mapped_column(String(100))

    # ── Pagos (S/) ───────────────────────────────────
    yape: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    plin: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    transfer_deposit: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Transferencia / depósito"
    )
    card_link_pos: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Tarjeta, link de pago o POS"
    )
    cash: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Efectivo"
    )
    operation_number: Mapped[str | None] = mapped_column(String(50))

    # ── Gastos (S/) ──────────────────────────────────
    material_expenses: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    fuel: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Combustible"
    )
    additional_cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Costo adicional del servicio"
    )
    utility: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_procedure_record_date", "record_date"),
    )

    @property
    def income(self) -> Decimal:
        return sum(
            (Decimal(getattr(self, column) or 0) for column in PAYMENT_COLUMNS),
            Decimal("0"),
        )

    def __repr__(self) -> str:
        return f"<ProcedureRecord {self.record_date} {self.procedure_name}>"
