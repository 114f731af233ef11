"""
Modelos de cuidados en casa: planes mensuales, contratos y periodos
quincenales de facturación.

Un paciente tiene como máximo un contrato de cuidado en casa. Cada
contrato genera periodos (quincenas) cuyo monto se calcula a partir
del monto mensual del contrato, los feriados trabajados y las horas
de pausa del servicio.
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
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hah_erp.database import Base, JSONType


class HomeCarePaymentMethod(str, enum.Enum):
    TRANSFERENCIA = "TRANSFERENCIA"
    YAPE = "YAPE"
    PLIN = "PLIN"
    EFECTIVO = "EFECTIVO"
    TARJETA = "TARJETA"


class HomeCarePlan(Base):
    __tablename__ = "home_care_plans"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    shift: Mapped[str | None] = mapped_column(
        String(30), comment="Turno: 12H, 24X24, etc."
    )
    monthly_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<HomeCarePlan {self.name} S/{self.monthly_amount}>"


class HomeCareContract(Base):
    __tablename__ = "home_care_contracts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id"), nullable=False
    )
    plan_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("home_care_plans.id", ondelete="SET NULL")
    )

    # ── Datos del contrato ───────────────────────────
    responsible_family_member: Mapped[str | None] = mapped_column(String(200))
    start_time: Mapped[str] = mapped_column(
        String(20), nullable=False, default="8:00 AM", comment="Hora de inicio del turno"
    )
    start_date: Mapped[date | None] = mapped_column(Date)
    plan_name: Mapped[str | None] = mapped_column(
        String(150), comment="Copia del nombre del plan al contratar"
    )
    monthly_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0,
        comment="Copia del monto mensual del plan al contratar"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relaciones ───────────────────────────────────
    patient: Mapped["Patient"] = relationship("Patient", lazy="selectin")  # noqa: F821
    periods: Mapped[list["HomeCarePeriod"]] = relationship(
        "HomeCarePeriod",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="HomeCarePeriod.item_number",
    )

    __table_args__ = (
        UniqueConstraint("patient_id", name="uq_home_care_contract_patient"),
    )

    def __repr__(self) -> str:
        return f"<HomeCareContract patient={self.patient_id} plan={self.plan_name}>"


class HomeCarePeriod(Base):
    """Quincena facturable de un contrato de cuidado en casa."""
    __tablename__ = "home_care_periods"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    contract_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("home_care_contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_number: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_number: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Rango del periodo ────────────────────────────
    quincena_payment_date: Mapped[date | None] = mapped_column(Date)
    shift: Mapped[str] = mapped_column(String(30), nullable=False, default="24X24")
    date_from: Mapped[date] = mapped_column(Date, nullable=False)
    date_to: Mapped[date] = mapped_column(Date, nullable=False)

    # ── Montos (S/) ──────────────────────────────────
    base_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0, comment="Monto de la quincena"
    )
    holiday_dates: Mapped[list | None] = mapped_column(
        JSONType, comment="Feriados trabajados (fechas ISO)"
    )
    holiday_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    pause_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pause_dates: Mapped[list | None] = mapped_column(
        JSONType, comment="Días con pausa del servicio (fechas ISO)"
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )

    # ── Pago ─────────────────────────────────────────
    paid_at: Mapped[date | None] = mapped_column(Date, comment="Fecha de pago")
    payment_method: Mapped[HomeCarePaymentMethod | None] = mapped_column(
        Enum(HomeCarePaymentMethod)
    )
    operation_number: Mapped[str | None] = mapped_column(String(50))
    invoice_number: Mapped[str | None] = mapped_column(
        String(50), comment="Factura o boleta"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    contract: Mapped["HomeCareContract"] = relationship(
        "HomeCareContract", back_populates="periods"
    )

    def __repr__(self) -> str:
        return f"<HomeCarePeriod #{self.item_number} {self.date_from}..{self.date_to}>"
