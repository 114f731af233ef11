"""
Modelo Staff — Personal de la empresa (enfermería, médicos, administración).
Independiente de User: no todo el personal tiene acceso al sistema.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from hah_erp.database import Base, JSONType


class Staff(Base):
    __tablename__ = "staff"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    # ── Datos personales ─────────────────────────────
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(20))
    age: Mapped[int | None] = mapped_column(Integer)
    gender: Mapped[str | None] = mapped_column(String(1), comment="M | F")
    address: Mapped[str | None] = mapped_column(String(500))

    # ── Datos laborales ──────────────────────────────
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str] = mapped_column(String(100), nullable=False)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    hire_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Activo",
        comment="Activo | Inactivo | Vacaciones | Licencia"
    )
    qualifications: Mapped[list | None] = mapped_column(JSONType)
    certifications: Mapped[list | None] = mapped_column(JSONType)

    # ── Contacto de emergencia ───────────────────────
    emergency_contact: Mapped[str | None] = mapped_column(String(200))
    emergency_phone: Mapped[str | None] = mapped_column(String(20))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_staff_department", "department"),
        Index("idx_staff_hire_date", "hire_date"),
    )

    def __repr__(self) -> str:
        return f"<Staff {self.name} ({self.position})>"
