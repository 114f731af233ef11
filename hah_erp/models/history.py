"""
Modelos de historial del paciente: entradas clínicas generales y exámenes.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from hah_erp.database import Base, JSONType


class PatientHistoryEntry(Base):
    __tablename__ = "patient_history"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    entry_type: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Consulta, Diagnóstico, Prescripción, Procedimiento"
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    attachments: Mapped[list | None] = mapped_column(JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PatientHistoryEntry {self.entry_date} {self.title}>"


class ExamHistoryEntry(Base):
    __tablename__ = "exam_history"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exam_date: Mapped[date] = mapped_column(Date, nullable=False)
    exam_type: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Laboratorio, Imagenología, Cardíaco..."
    )
    exam_name: Mapped[str] = mapped_column(String(200), nullable=False)
    exam_code: Mapped[str | None] = mapped_column(String(50))
    results: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    ordered_by: Mapped[str | None] = mapped_column(String(200))
    performed_by: Mapped[str | None] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Pendiente",
        comment="Pendiente | En Proceso | Completado | Cancelado"
    )
    attachments: Mapped[list | None] = mapped_column(JSONType)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<ExamHistoryEntry {self.exam_date} {self.exam_name} [{self.status}]>"
