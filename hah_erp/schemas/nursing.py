"""
Schemas de registros de enfermería: signos vitales, evoluciones,
valoración inicial, control de eliminación e historial.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hah_erp.core.timeutils import parse_time_12h


def _normalize_time(v: str | None) -> str | None:
    if not v:
        return None
    return parse_time_12h(v)


# ── Signos vitales ───────────────────────────────────

class VitalSignCreate(BaseModel):
    patient_id: UUID
    assessment_datetime: datetime
    nurse_name: str = Field(..., min_length=1, max_length=200)
    blood_pressure_systolic: str | None = Field(None, max_length=10)
    blood_pressure_diastolic: str | None = Field(None, max_length=10)
    heart_rate: int | None = Field(None, ge=0, le=300, description="lpm")
    respiratory_rate: int | None = Field(None, ge=0, le=100, description="rpm")
    spo2: int | None = Field(None, ge=0, le=100, description="%")
    temperature: Decimal | None = Field(None, ge=25, le=45, description="°C")
    capillary_glucose: int | None = Field(None, ge=0, le=1000, description="mg/dl")
    observation: str | None = None


class VitalSignUpdate(BaseModel):
    assessment_datetime: datetime | None = None
    nurse_name: str | None = Field(None, min_length=1, max_length=200)
    blood_pressure_systolic: str | None = Field(None, max_length=10)
    blood_pressure_diastolic: str | None = Field(None, max_length=10)
    heart_rate: int | None = Field(None, ge=0, le=300)
    respiratory_rate: int | None = Field(None, ge=0, le=100)
    spo2: int | None = Field(None, ge=0, le=100)
    temperature: Decimal | None = Field(None, ge=25, le=45)
    capillary_glucose: int | None = Field(None, ge=0, le=1000)
    observation: str | None = None


class VitalSignResponse(BaseModel):
    id: UUID
    patient_id: UUID
    assessment_datetime: datetime
    nurse_name: str
    blood_pressure_systolic: str | None = None
    blood_pressure_diastolic: str | None = None
    heart_rate: int | None = None
    respiratory_rate: int | None = None
    spo2: int | None = None
    temperature: Decimal | None = None
    capillary_glucose: int | None = None
    observation: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── Evoluciones ──────────────────────────────────────

class EvolutionRecordCreate(BaseModel):
    nanda_diagnosis: str | None = None
    noc_objective: str | None = None
    time: str | None = Field(None, description='HH:MM o "8:00 AM"')
    nic_interventions: str | None = None
    evaluation: str | None = None
    observation: str | None = None
    record_order: int = Field(0, ge=0)

    @field_validator("time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return _normalize_time(v)


class EvolutionRecordUpdate(BaseModel):
    nanda_diagnosis: str | None = None
    noc_objective: str | None = None
    time: str | None = None
    nic_interventions: str | None = None
    evaluation: str | None = None
    observation: str | None = None
    record_order: int | None = Field(None, ge=0)

    @field_validator("time")
    @classmethod
    def normalize_time(cls, v: str | None) -> str | None:
        return _normalize_time(v)


class EvolutionRecordResponse(BaseModel):
    id: UUID
    evolution_id: UUID
    nanda_diagnosis: str | None = None
    noc_objective: str | None = None
    time: str | None = None
    nic_interventions: str | None = None
    evaluation: str | None = None
    observation: str | None = None
    record_order: int

    model_config = {"from_attributes": True}


class EvolutionCreate(BaseModel):
    patient_id: UUID
    patient_name: str | None = Field(None, max_length=200, description="Por defecto, el del paciente")
    age: int | None = Field(None, ge=0, le=130)
    evolution_date: date
    shift: str | None = Field(None, max_length=30)
    nurse_name: str = Field(..., min_length=1, max_length=200)
    dependency_grade: str | None = Field(None, max_length=50)
    nursing_assessment: str | None = None
    pain_scale: int | None = Field(None, ge=0, le=10, description="EVA 0-10")
    records: list[EvolutionRecordCreate] = []


class EvolutionUpdate(BaseModel):
    age: int | None = Field(None, ge=0, le=130)
    evolution_date: date | None = None
    shift: str | None = Field(None, max_length=30)
    nurse_name: str | None = Field(None, min_length=1, max_length=200)
    dependency_grade: str | None = Field(None, max_length=50)
    nursing_assessment: str | None = None
    pain_scale: int | None = Field(None, ge=0, le=10)


class EvolutionResponse(BaseModel):
    id: UUID
    patient_id: UUID
    patient_name: str
    age: int | None = None
    evolution_date: date
    shift: str | None = None
    nurse_name: str
    dependency_grade: str | None = None
    nursing_assessment: str | None = None
    pain_scale: int | None = None
    records: list[EvolutionRecordResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── Valoración inicial ───────────────────────────────

class AssessmentVitalSigns(BaseModel):
    blood_pressure_systolic: str | None = None
    blood_pressure_diastolic: str | None = None
    heart_rate: int | None = Field(None, ge=0, le=300)
    respiratory_rate: int | None = Field(None, ge=0, le=100)
    oxygen_saturation: int | None = Field(None, ge=0, le=100)
    temperature: float | None = Field(None, ge=25, le=45)
    capillary_glucose: int | None = Field(None, ge=0, le=1000)
    vital_signs_time: str | None = None


class PhysicalExam(BaseModel):
    neurological: str | None = None
    cardiovascular: str | None = None
    respiratory: str | None = None
    gastrointestinal: str | None = None
    genitourinary: str | None = None
    extremities: str | None = Field(None, description="Miembros superiores e inferiores")


class InitialAssessmentCreate(BaseModel):
    patient_id: UUID
    assessment_date: date
    nurse_name: str = Field(..., min_length=1, max_length=200)
    age: int | None = Field(None, ge=0, le=130)
    weight: Decimal | None = Field(None, gt=0, le=400, description="kg")
    height: Decimal | None = Field(None, gt=0, le=250, description="cm")
    blood_type: str | None = Field(None, max_length=10)
    medical_diagnosis: str | None = None
    attending_physician: str | None = Field(None, max_length=200)
    pathological_history: str | None = None
    prophylactic_medications: str | None = None
    medication_allergies: str | None = None
    vital_signs: AssessmentVitalSigns | None = None
    physical_exam: PhysicalExam | None = None
    nursing_actions: str | None = None
    pending_actions: str | None = None


class InitialAssessmentUpdate(BaseModel):
    assessment_date: date | None = None
    nurse_name: str | None = Field(None, min_length=1, max_length=200)
    age: int | None = Field(None, ge=0, le=130)
    weight: Decimal | None = Field(None, gt=0, le=400)
    height: Decimal | None = Field(None, gt=0, le=250)
    blood_type: str | None = Field(None, max_length=10)
    medical_diagnosis: str | None = None
    attending_physician: str | None = Field(None, max_length=200)
    pathological_history: str | None = None
    prophylactic_medications: str | None = None
    medication_allergies: str | None = None
    vital_signs: AssessmentVitalSigns | None = None
    physical_exam: PhysicalExam | None = None
    nursing_actions: str | None = None
    pending_actions: str | None = None


class InitialAssessmentResponse(BaseModel):
    id: UUID
    patient_id: UUID
    patient_name: str | None = None
    assessment_date: date
    nurse_name: str
    age: int | None = None
    weight: Decimal | None = None
    height: Decimal | None = None
    blood_type: str | None = None
    medical_diagnosis: str | None = None
    attending_physician: str | None = None
    pathological_history: str | None = None
    prophylactic_medications: str | None = None
    medication_allergies: str | None = None
    vital_signs: AssessmentVitalSigns | None = None
    physical_exam: PhysicalExam | None = None
    nursing_actions: str | None = None
    pending_actions: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── Control de eliminación ───────────────────────────

class FecesShift(BaseModel):
    count: int | None = Field(None, ge=0)
    color: str | None = None
    appearance: str | None = None
    quantity: str | None = None


class UrineShift(BaseModel):
    count: int | None = Field(None, ge=0)
    color: str | None = None
    odor: str | None = None
    quantity: str | None = None


class FecesControl(BaseModel):
    morning: FecesShift | None = None
    afternoon: FecesShift | None = None
    night: FecesShift | None = None


class UrineControl(BaseModel):
    morning: UrineShift | None = None
    afternoon: UrineShift | None = None
    night: UrineShift | None = None


class EliminationCreate(BaseModel):
    patient_id: UUID
    patient_name: str | None = Field(None, max_length=200, description="Por defecto, el del paciente")
    age: int | None = Field(None, ge=0, le=130)
    nurse_name: str = Field(..., min_length=1, max_length=200)
    record_date: date
    feces: FecesControl | None = None
    urine: UrineControl | None = None


class EliminationUpdate(BaseModel):
    age: int | None = Field(None, ge=0, le=130)
    nurse_name: str | None = Field(None, min_length=1, max_length=200)
    record_date: date | None = None
    feces: FecesControl | None = None
    urine: UrineControl | None = None


class EliminationResponse(BaseModel):
    id: UUID
    patient_id: UUID
    patient_name: str
    age: int | None = None
    nurse_name: str
    record_date: date
    feces: FecesControl | None = None
    urine: UrineControl | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── Historial de enfermería ──────────────────────────

class HistoryVitalSigns(BaseModel):
    blood_pressure: str | None = None
    heart_rate: int | None = Field(None, ge=0, le=300)
    temperature: float | None = Field(None, ge=25, le=45)
    respiratory_rate: int | None = Field(None, ge=0, le=100)
    oxygen_saturation: int | None = Field(None, ge=0, le=100)


class NursingHistoryCreate(BaseModel):
    patient_id: UUID
    entry_date: date
    entry_type: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    notes: str | None = None
    vital_signs: HistoryVitalSigns | None = None
    attachments: list[str] = []
    nurse_name: str | None = Field(None, max_length=200)


class NursingHistoryUpdate(BaseModel):
    entry_date: date | None = None
    entry_type: str | None = Field(None, min_length=1, max_length=100)
    title: str | None = Field(None, min_length=1, max_length=200)
    notes: str | None = None
    vital_signs: HistoryVitalSigns | None = None
    attachments: list[str] | None = None
    nurse_name: str | None = Field(None, max_length=200)


class NursingHistoryResponse(BaseModel):
    id: UUID
    patient_id: UUID
    entry_date: date
    entry_type: str
    title: str
    notes: str | None = None
    vital_signs: HistoryVitalSigns | None = None
    attachments: list[str] | None = None
    nurse_name: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
