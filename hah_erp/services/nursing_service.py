"""
Servicio de registros de enfermería del paciente.

Los registros que guardan el nombre del paciente lo toman de la ficha
cuando no se envía. Las listas por paciente van de la más reciente a la
más antigua.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException
from hah_erp.models.nursing import (
    EliminationRecord,
    NursingEvolution,
    NursingEvolutionRecord,
    NursingHistoryEntry,
    NursingInitialAssessment,
    NursingVitalSign,
)
from hah_erp.models.patient import Patient
from hah_erp.schemas.nursing import (
    EliminationCreate,
    EliminationUpdate,
    EvolutionCreate,
    EvolutionRecordCreate,
    EvolutionRecordUpdate,
    EvolutionUpdate,
    InitialAssessmentCreate,
    InitialAssessmentUpdate,
    NursingHistoryCreate,
    NursingHistoryUpdate,
    VitalSignCreate,
    VitalSignUpdate,
)

VITAL_SIGNS_BY_PATIENT_LIMIT = 50
VITAL_SIGNS_LIMIT = 100
ELIMINATION_BY_PATIENT_LIMIT = 30

# Campos obligatorios que una actualización con null no debe borrar
_REQUIRED = {
    "assessment_datetime", "nurse_name", "evolution_date", "assessment_date",
    "record_date", "entry_date", "entry_type", "title", "record_order",
}


async def _get_patient(db: AsyncSession, patient_id: UUID) -> Patient:
    patient = await db.get(Patient, patient_id)
    if not patient:
        raise NotFoundException("Paciente")
    return patient


async def _get(db: AsyncSession, model, entity_id: UUID, label: str):
    entity = await db.get(model, entity_id)
    if not entity:
        raise NotFoundException(label)
    return entity


def _apply(entity, update_data: dict) -> None:
    for key, value in update_data.items():
        if value is None and key in _REQUIRED:
            continue
        setattr(entity, key, value)


async def _save(db: AsyncSession, entity):
    await db.flush()
    await db.refresh(entity)
    return entity


# ── Signos vitales ───────────────────────────────────

async def list_vital_signs(
    db: AsyncSession, patient_id: UUID | None = None, limit: int | None = None
) -> list[NursingVitalSign]:
    query = select(NursingVitalSign)
    if patient_id:
        query = query.where(NursingVitalSign.patient_id == patient_id)
        limit = limit or VITAL_SIGNS_BY_PATIENT_LIMIT
    result = await db.execute(
        query.order_by(NursingVitalSign.assessment_datetime.desc()).limit(
            limit or VITAL_SIGNS_LIMIT
        )
    )
    return list(result.scalars().all())


async def create_vital_sign(db: AsyncSession, data: VitalSignCreate) -> NursingVitalSign:
    await _get_patient(db, data.patient_id)
    entry = NursingVitalSign(**data.model_dump())
    db.add(entry)
    return await _save(db, entry)


async def update_vital_sign(
    db: AsyncSession, entry_id: UUID, data: VitalSignUpdate
) -> NursingVitalSign:
    entry = await _get(db, NursingVitalSign, entry_id, "Registro de signos vitales")
    _apply(entry, data.model_dump(exclude_unset=True))
    return await _save(db, entry)


async def delete_vital_sign(db: AsyncSession, entry_id: UUID) -> None:
    entry = await _get(db, NursingVitalSign, entry_id, "Registro de signos vitales")
    await db.delete(entry)
    await db.flush()


# ── Evoluciones ──────────────────────────────────────

async def _load_evolution(db: AsyncSession, evolution_id: UUID) -> NursingEvolution:
    result = await db.execute(
        select(NursingEvolution)
        .where(NursingEvolution.id == evolution_id)
        .execution_options(populate_existing=True)
    )
    evolution = result.scalar_one_or_none()
    if not evolution:
        raise NotFoundException("Evolución")
    return evolution


async def get_evolution(db: AsyncSession, evolution_id: UUID) -> NursingEvolution:
    return await _load_evolution(db, evolution_id)


async def list_evolutions(db: AsyncSession, patient_id: UUID) -> list[NursingEvolution]:
    result = await db.execute(
        select(NursingEvolution)
        .where(NursingEvolution.patient_id == patient_id)
        .order_by(NursingEvolution.evolution_date.desc(), NursingEvolution.created_at.desc())
    )
    return list(result.scalars().all())


async def create_evolution(db: AsyncSession, data: EvolutionCreate) -> NursingEvolution:
    patient = await _get_patient(db, data.patient_id)
    values = data.model_dump(exclude={"records"})
    values["patient_name"] = values["patient_name"] or patient.name

    evolution = NursingEvolution(**values)
    evolution.records = [NursingEvolutionRecord(**r.model_dump()) for r in data.records]
    db.add(evolution)
    await db.flush()
    return await _load_evolution(db, evolution.id)


async def update_evolution(
    db: AsyncSession, evolution_id: UUID, data: EvolutionUpdate
) -> NursingEvolution:
    evolution = await _load_evolution(db, evolution_id)
    _apply(evolution, data.model_dump(exclude_unset=True))
    await db.flush()
    return await _load_evolution(db, evolution.id)


async def delete_evolution(db: AsyncSession, evolution_id: UUID) -> None:
    evolution = await _load_evolution(db, evolution_id)
    await db.delete(evolution)
    await db.flush()


async def add_evolution_record(
    db: AsyncSession, evolution_id: UUID, data: EvolutionRecordCreate
) -> NursingEvolutionRecord:
    await _load_evolution(db, evolution_id)
    record = NursingEvolutionRecord(evolution_id=evolution_id, **data.model_dump())
    db.add(record)
    return await _save(db, record)


async def update_evolution_record(
    db: AsyncSession, record_id: UUID, data: EvolutionRecordUpdate
) -> NursingEvolutionRecord:
    record = await _get(db, NursingEvolutionRecord, record_id, "Registro de evolución")
    _apply(record, data.model_dump(exclude_unset=True))
    return await _save(db, record)


async def delete_evolution_record(db: AsyncSession, record_id: UUID) -> None:
    record = await _get(db, NursingEvolutionRecord, record_id, "Registro de evolución")
    await db.delete(record)
    await db.flush()


# ── Valoración inicial ───────────────────────────────

async def get_latest_assessment(
    db: AsyncSession, patient_id: UUID
) -> NursingInitialAssessment | None:
    result = await db.execute(
        select(NursingInitialAssessment)
        .where(NursingInitialAssessment.patient_id == patient_id)
        .order_by(
            NursingInitialAssessment.assessment_date.desc(),
            NursingInitialAssessment.created_at.desc(),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_assessments(
    db: AsyncSession, patient_id: UUID | None = None
) -> list[NursingInitialAssessment]:
    query = select(NursingInitialAssessment)
    if patient_id:
        query = query.where(NursingInitialAssessment.patient_id == patient_id)
    result = await db.execute(query.order_by(NursingInitialAssessment.assessment_date.desc()))
    return list(result.scalars().all())


async def create_assessment(
    db: AsyncSession, data: InitialAssessmentCreate
) -> NursingInitialAssessment:
    patient = await _get_patient(db, data.patient_id)
    assessment = NursingInitialAssessment(
        **data.model_dump(), patient_name=patient.name
    )
    db.add(assessment)
    return await _save(db, assessment)


async def update_assessment(
    db: AsyncSession, assessment_id: UUID, data: InitialAssessmentUpdate
) -> NursingInitialAssessment:
    assessment = await _get(db, NursingInitialAssessment, assessment_id, "Valoración")
    _apply(assessment, data.model_dump(exclude_unset=True))
    return await _save(db, assessment)


async def delete_assessment(db: AsyncSession, assessment_id: UUID) -> None:
    assessment = await _get(db, NursingInitialAssessment, assessment_id, "Valoración")
    await db.delete(assessment)
    await db.flush()


# ── Control de eliminación ───────────────────────────

async def get_elimination(db: AsyncSession, record_id: UUID) -> EliminationRecord:
    return await _get(db, EliminationRecord, record_id, "Registro de eliminación")


async def list_eliminations(
    db: AsyncSession, patient_id: UUID, limit: int = ELIMINATION_BY_PATIENT_LIMIT
) -> list[EliminationRecord]:
    result = await db.execute(
        select(EliminationRecord)
        .where(EliminationRecord.patient_id == patient_id)
        .order_by(EliminationRecord.record_date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_elimination_by_date(
    db: AsyncSession, patient_id: UUID, day: date
) -> EliminationRecord | None:
    result = await db.execute(
        select(EliminationRecord)
        .where(EliminationRecord.patient_id == patient_id, EliminationRecord.record_date == day)
        .order_by(EliminationRecord.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_elimination(db: AsyncSession, data: EliminationCreate) -> EliminationRecord:
    patient = await _get_patient(db, data.patient_id)
    values = data.model_dump()
    values["patient_name"] = values["patient_name"] or patient.name
    record = EliminationRecord(**values)
    db.add(record)
    return await _save(db, record)


async def update_elimination(
    db: AsyncSession, record_id: UUID, data: EliminationUpdate
) -> EliminationRecord:
    record = await get_elimination(db, record_id)
    _apply(record, data.model_dump(exclude_unset=True))
    return await _save(db, record)


async def delete_elimination(db: AsyncSession, record_id: UUID) -> None:
    record = await get_elimination(db, record_id)
    await db.delete(record)
    await db.flush()


# ── Historial de enfermería ──────────────────────────

async def list_history(db: AsyncSession, patient_id: UUID) -> list[NursingHistoryEntry]:
    result = await db.execute(
        select(NursingHistoryEntry)
        .where(NursingHistoryEntry.patient_id == patient_id)
        .order_by(NursingHistoryEntry.entry_date.desc(), NursingHistoryEntry.created_at.desc())
    )
    return list(result.scalars().all())


async def create_history_entry(
    db: AsyncSession, data: NursingHistoryCreate
) -> NursingHistoryEntry:
    await _get_patient(db, data.patient_id)
    entry = NursingHistoryEntry(**data.model_dump())
    db.add(entry)
    return await _save(db, entry)


async def update_history_entry(
    db: AsyncSession, entry_id: UUID, data: NursingHistoryUpdate
) -> NursingHistoryEntry:
    entry = await _get(db, NursingHistoryEntry, entry_id, "Entrada de historial")
    _apply(entry, data.model_dump(exclude_unset=True))
    return await _save(db, entry)


async def delete_history_entry(db: AsyncSession, entry_id: UUID) -> None:
    entry = await _get(db, NursingHistoryEntry, entry_id, "Entrada de historial")
    await db.delete(entry)
    await db.flush()
