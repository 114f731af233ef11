"""
Modelos de registros de enfermería en domicilio.

- NursingVitalSign: control puntual de signos vitales.
- NursingEvolution / NursingEvolutionRecord: hoja de evolución por turno
  con sus filas NANDA / NOC / NIC.
- NursingInitialAssessment: valoración de ingreso del paciente.
- EliminationRecord: control diario de heces y orina por turno.
- NursingHistoryEntry: bitácora libre de atenciones de enfermería.

Todos pertenecen a un paciente y se eliminan con él.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hah_erp.database import Base, JSONType


def _patient_fk():
    return mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )


def _created_at():
    return mapped_column(DateTime(timezone=True), server_default=func.now())


def _updated_at():
    return mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class NursingVitalSign(Base):
    __tablename__ = "nursing_vital_signs"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = _patient_fk()
    assessment_datetime: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    nurse_name: Mapped[str] = mapped_column(String(200), nullable=False)

    blood_pressure_systolic: Mapped[str | None] = mapped_column(String(10))
    blood_pressure_diastolic: Mapped[str | None] = mapped_column(String(10))
    heart_rate: Mapped[int | None] = mapped_column(SmallInteger, comment="lpm")
    respiratory_rate: Mapped[int | None] = mapped_column(SmallInteger, comment="rpm")
    spo2: Mapped[int | None] = mapped_column(SmallInteger, comment="%")
    temperature: Mapped[Decimal | None] = mapped_column(Numeric(4, 1), comment="°C")
    capillary_glucose: Mapped[int | None] = mapped_column(SmallInteger, comment="mg/dl")
    observation: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        Index("idx_vital_sign_datetime", "assessment_datetime"),
    )

    def __repr__(self) -> str:
        return f"<NursingVitalSign {self.assessment_datetime} {self.nurse_name}>"


class NursingEvolution(Base):
    __tablename__ = "nursing_evolutions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = _patient_fk()
    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer)
    evolution_date: Mapped[date] = mapped_column(Date, nullable=False)
    shift: Mapped[str | None] = mapped_column(String(30))
    nurse_name: Mapped[str] = mapped_column(String(200), nullable=False)
    dependency_grade: Mapped[str | None] = mapped_column(String(50))
    nursing_assessment: Mapped[str | None] = mapped_column(Text)
    pain_scale: Mapped[int | None] = mapped_column(SmallInteger, comment="EVA 0-10")

    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        CheckConstraint("pain_scale BETWEEN 0 AND 10", name="ck_evolution_pain_scale"),
    )

    records: Mapped[list["NursingEvolutionRecord"]] = relationship(
        back_populates="evolution",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="NursingEvolutionRecord.record_order",
    )

    def __repr__(self) -> str:
        return f"<NursingEvolution {self.evolution_date} {self.patient_name}>"


class NursingEvolutionRecord(Base):
    """Fila de la hoja de evolución (diagnóstico, objetivo, intervenciones)."""

    __tablename__ = "nursing_evolution_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    evolution_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("nursing_evolutions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nanda_diagnosis: Mapped[str | None] = mapped_column(Text)
    noc_objective: Mapped[str | None] = mapped_column(Text)
    time: Mapped[str | None] = mapped_column(String(5), comment="HH:MM")
    nic_interventions: Mapped[str | None] = mapped_column(Text)
    evaluation: Mapped[str | None] = mapped_column(Text)
    observation: Mapped[str | None] = mapped_column(Text)
    record_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    evolution: Mapped["NursingEvolution"] = relationship(back_populates="records")


class NursingInitialAssessment(Base):
    __tablename__ = "nursing_initial_assessments"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = _patient_fk()
    patient_name: Mapped[str | None] = mapped_column(String(200))
    assessment_date: Mapped[date] = mapped_column(Date, nullable=False)
    nurse_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # ── Datos del paciente ───────────────────────────
    age: Mapped[int | None] = mapped_column(Integer)
    weight: Mapped[Decimal | None] = mapped_column(Numeric(5, 1), comment="kg")
    height: Mapped[Decimal | None] = mapped_column(Numeric(5, 1), comment="Talla en cm")
    blood_type: Mapped[str | None] = mapped_column(String(10))
    medical_diagnosis: Mapped[str | None] = mapped_column(Text)
    attending_physician: Mapped[str | None] = mapped_column(String(200))

    # ── Antecedentes ─────────────────────────────────
    pathological_history: Mapped[str | None] = mapped_column(Text)
    prophylactic_medications: Mapped[str | None] = mapped_column(Text)
    medication_allergies: Mapped[str | None] = mapped_column(Text)

    # ── Valoración (JSONB) ───────────────────────────
    vital_signs: Mapped[dict | None] = mapped_column(
        JSONType, comment="PA, FC, FR, SatO2, temperatura, glicemia, hora"
    )
    physical_exam: Mapped[dict | None] = mapped_column(
        JSONType, comment="Neurológico, cardiovascular, respiratorio, etc."
    )

    nursing_actions: Mapped[str | None] = mapped_column(Text)
    pending_actions: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    def __repr__(self) -> str:
        return f"<NursingInitialAssessment {self.assessment_date} {self.nurse_name}>"


class EliminationRecord(Base):
    """
    Control de eliminación de un día. `feces` y `urine` guardan, por turno
    (morning / afternoon / night), la cantidad de deposiciones o micciones
    y sus características.
    """

    __tablename__ = "elimination_records"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = _patient_fk()
    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer)
    nurse_name: Mapped[str] = mapped_column(String(200), nullable=False)
    record_date: Mapped[date] = mapped_column(Date, nullable=False)

    feces: Mapped[dict | None] = mapped_column(JSONType)
    urine: Mapped[dict | None] = mapped_column(JSONType)

    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        Index("idx_elimination_patient_date", "patient_id", "record_date"),
    )

    def __repr__(self) -> str:
        return f"<EliminationRecord {self.record_date} {self.patient_name}>"


class NursingHistoryEntry(Base):
    __tablename__ = "nursing_history"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    patient_id: Mapped[uuid.UUID] = _patient_fk()
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    entry_type: Mapped[str] = mapped_column(
        String(100), nullable=False,
        comment="Atención de Enfermería, Control de Signos Vitales, Cuidado de Heridas..."
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    vital_signs: Mapped[dict | None] = mapped_column(JSONType)
    attachments: Mapped[list | None] = mapped_column(JSONType, comment="URLs o claves de archivos")
    nurse_name: Mapped[str | None] = mapped_column(String(200))

    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    def __repr__(self) -> str:
        return f"<NursingHistoryEntry {self.entry_date} {self.title}>"
