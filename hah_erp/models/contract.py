"""
Modelo PatientContract — Contratos de servicio firmados con la familia.
Numeración correlativa por año: CON-2025-0001, llevada en ContractSequence
para no reutilizar números de contratos eliminados.
"""

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hah_erp.database import Base


class ContractStatus(str, enum.Enum):
    ACTIVO = "Activo"
    INACTIVO = "Inactivo"
    SUSPENDIDO = "Suspendido"
    FINALIZADO = "Finalizado"


class PatientContract(Base):
    __tablename__ = "patient_contracts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    contract_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id"), nullable=False, index=True
    )
    contract_date: Mapped[date] = mapped_column(Date, nullable=False)
    responsible_family_member: Mapped[str] = mapped_column(String(200), nullable=False)
    service_type: Mapped[str] = mapped_column(String(100), nullable=False)

    # ── Vigencia ─────────────────────────────────────
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date)
    start_time: Mapped[str | None] = mapped_column(String(5), comment="HH:MM")

    # ── Condiciones económicas (S/) ──────────────────
    monthly_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    payment_method: Mapped[str] = mapped_column(String(30), nullable=False)

    status: Mapped[ContractStatus] = mapped_column(
        Enum(ContractStatus), nullable=False, default=ContractStatus.ACTIVO
    )
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relaciones ───────────────────────────────────
    patient: Mapped["Patient"] = relationship("Patient", lazy="selectin")  # noqa: F821

    def __repr__(self) -> str:
        return f"<PatientContract {self.contract_number} [{self.status.value}]>"


class ContractSequence(Base):
    """Último correlativo emitido por año; se bloquea con SELECT FOR UPDATE."""

    __tablename__ = "contract_sequences"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    year: Mapped[int] = mapped_column(SmallInteger, unique=True, nullable=False)
    last_number: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<ContractSequence {self.year} #{self.last_number}>"
