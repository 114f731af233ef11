"""
Modelo MedicalAppointmentRecord — Ingreso y costo de las citas de medicina
completadas. Una cita genera a lo sumo un registro; también se admiten
registros manuales sin cita.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from hah_erp.database import Base


class MedicalAppointmentRecord(Base):
    __tablename__ = "medical_appointment_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    appointment_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("appointments.id", ondelete="SET NULL"), unique=True
    )
    record_date: Mapped[date] = mapped_column(Date, nullable=False)

    # ── Snapshot de la cita ──────────────────────────
    patient_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("patients.id", ondelete="SET NULL"), index=True
    )
    patient_name: Mapped[str | None] = mapped_column(String(200))
    appointment_type: Mapped[str] = mapped_column(
        String(30), nullable=False, default="consulta"
    )
    doctor_name: Mapped[str | None] = mapped_column(String(200))

    # ── Montos (S/) ──────────────────────────────────
    income: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Ingreso"
    )
    cost: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Costo"
    )
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_medical_record_date", "record_date"),
    )

    @property
    def utility(self) -> Decimal:
        return Decimal(self.income or 0) - Decimal(self.cost or 0)

    def __repr__(self) -> str:
        return f"<MedicalAppointmentRecord {self.record_date} {self.patient_name}>"
