"""
Modelo Appointment — Citas de medicina y de procedimientos de enfermería.

La fecha se guarda como DATE y la hora como texto HH:MM, sin zona horaria:
son datos de agenda, no instantes.
"""

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from hah_erp.database import Base


class AppointmentVariant(str, enum.Enum):
    """Agenda a la que pertenece la cita."""
    MEDICINA = "medicina"
    PROCEDIMIENTOS = "procedimientos"


class AppointmentType(str, enum.Enum):
    CONSULTA = "consulta"
    EXAMEN = "examen"
    EMERGENCIA = "emergencia"
    SEGUIMIENTO = "seguimiento"
    PROCEDIMIENTO = "procedimiento"


class AppointmentStatus(str, enum.Enum):
    """Estados de una cita."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    variant: Mapped[AppointmentVariant] = mapped_column(
        Enum(AppointmentVariant), nullable=False, default=AppointmentVariant.MEDICINA
    )

    # ── Paciente (snapshot) ──────────────────────────
    patient_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("patients.id", ondelete="SET NULL"), index=True
    )
    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    patient_email: Mapped[str | None] = mapped_column(String(255))
    patient_phone: Mapped[str | None] = mapped_column(String(20))

    # ── Profesional ──────────────────────────────────
    doctor_name: Mapped[str | None] = mapped_column(String(200))
    doctor_specialty: Mapped[str | None] = mapped_column(String(100))

    # ── Agenda ───────────────────────────────────────
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[str] = mapped_column(
        String(5), nullable=False, comment="HH:MM"
    )
    duration: Mapped[int] = mapped_column(Integer, default=30, comment="Minutos")
    type: Mapped[AppointmentType] = mapped_column(
        Enum(AppointmentType), nullable=False, default=AppointmentType.CONSULTA
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(AppointmentStatus), nullable=False, default=AppointmentStatus.SCHEDULED
    )
    location: Mapped[str | None] = mapped_column(String(300))
    notes: Mapped[str | None] = mapped_column(Text)

    # ── Procedimiento (agenda de procedimientos) ─────
    procedure_catalog_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("procedure_catalog.id", ondelete="SET NULL")
    )
    procedure_name: Mapped[str | None] = mapped_column(String(200))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_appointment_variant_date", "variant", "appointment_date"),
    )

    def __repr__(self) -> str:
        return f"<Appointment {self.appointment_date} {self.appointment_time} [{self.status.value}]>"
