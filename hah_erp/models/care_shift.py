"""
Modelo CareShift — Turnos eventuales de cuidado (por horas, sin contrato).
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hah_erp.database import Base


class CareShift(Base):
    __tablename__ = "care_shifts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    shift_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(5), comment="HH:MM")
    patient_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("patients.id", ondelete="SET NULL"), index=True
    )
    responsible_family_member: Mapped[str | None] = mapped_column(String(200))
    district: Mapped[str | None] = mapped_column(String(100))
    shift: Mapped[str | None] = mapped_column(String(30), comment="Turno: 6H, 12H, 24H")

    # ── Cobro ────────────────────────────────────────
    amount_due: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Monto a pagar"
    )
    payment_method: Mapped[str | None] = mapped_column(String(30))
    operation_number: Mapped[str | None] = mapped_column(String(50))

    # ── Personal y costos ────────────────────────────
    nurse: Mapped[str | None] = mapped_column(String(200))
    extra_expenses: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    utility: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relaciones ───────────────────────────────────
    patient: Mapped["Patient | None"] = relationship("Patient", lazy="selectin")  # noqa: F821

    __table_args__ = (
        Index("idx_care_shift_date", "shift_date"),
    )

    def __repr__(self) -> str:
        return f"<CareShift {self.shift_date} {self.shift}>"
