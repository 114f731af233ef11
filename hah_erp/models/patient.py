"""
Modelo Patient — Pacientes atendidos a domicilio.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from hah_erp.database import Base, JSONType


class Patient(Base):
    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    # ── Identificación ───────────────────────────────
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    dni: Mapped[str | None] = mapped_column(
        String(15), unique=True, comment="DNI o carné de extranjería"
    )
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(20))
    age: Mapped[int | None] = mapped_column(Integer)
    gender: Mapped[str | None] = mapped_column(String(1), comment="M | F")
    address: Mapped[str | None] = mapped_column(String(500))
    district: Mapped[str | None] = mapped_column(String(100))

    # ── Datos clínicos ───────────────────────────────
    last_visit: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Activo", comment="Activo | Inactivo"
    )
    blood_type: Mapped[str | None] = mapped_column(String(5))
    allergies: Mapped[list | None] = mapped_column(JSONType)
    current_medications: Mapped[list | None] = mapped_column(JSONType)
    primary_physician: Mapped[str | None] = mapped_column(String(200))
    primary_diagnosis: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)

    # ── Contacto de emergencia ───────────────────────
    emergency_contact_name: Mapped[str | None] = mapped_column(String(200))
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(20))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_patient_name", "name"),
        Index("idx_patient_district", "district"),
    )

    def __repr__(self) -> str:
        return f"<Patient {self.name}>"
