"""
Servicio del historial clínico y de exámenes del paciente.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import NotFoundException
from hah_erp.models.history import ExamHistoryEntry, PatientHistoryEntry
from hah_erp.models.patient import Patient
from hah_erp.schemas.history import (
    ExamHistoryCreate,
    ExamHistoryUpdate,
    PatientHistoryCreate,
    PatientHistoryUpdate,
)

_REQUIRED = {"entry_date", "entry_type", "title", "exam_date", "exam_type", "exam_name", "status"}


async def _check_patient(db: AsyncSession, patient_id: UUID) -> None:
    if not await db.get(Patient, patient_id):
        raise NotFoundException("Paciente")


async def _update(db: AsyncSession, entity, update_data: dict):
    for key, value in update_data.items():
        if value is None and key in _REQUIRED:
            continue
        setattr(entity, key, value)
    await db.flush()
    await db.refresh(entity)
    return entity


# ── Historial clínico ────────────────────────────────

async def get_patient_entry(db: AsyncSession, entry_id: UUID) -> PatientHistoryEntry:
    entry = await db.get(PatientHistoryEntry, entry_id)
    if not entry:
        raise NotFoundException("Entrada de historial")
    return entry


async def list_patient_history(db: AsyncSession, patient_id: UUID) -> list[PatientHistoryEntry]:
    result = await db.execute(
        select(PatientHistoryEntry)
        .where(PatientHistoryEntry.patient_id == patient_id)
        .order_by(PatientHistoryEntry.entry_date.desc(), PatientHistoryEntry.created_at.desc())
    )
    return list(result.scalars().all())


async def create_patient_entry(
    db: AsyncSession, data: PatientHistoryCreate
) -> PatientHistoryEntry:
    await _check_patient(db, data.patient_id)
    entry = PatientHistoryEntry(**data.model_dump())
    db.add(entry)
    await db.flush()
    await db.refresh(entry)
    return entry


async def update_patient_entry(
    db: AsyncSession, entry_id: UUID, data: PatientHistoryUpdate
) -> PatientHistoryEntry:
    entry = await get_patient_entry(db, entry_id)
    return await _update(db, entry, data.model_dump(exclude_unset=True))


async def delete_patient_entry(db: AsyncSession, entry_id: UUID) -> None:
    entry = await get_patient_entry(db, entry_id)
    await db.delete(entry)
    await db.flush()


# ── Historial de exámenes ────────────────────────────

async def get_exam_entry(db: AsyncSession, entry_id: UUID) -> ExamHistoryEntry:
    entry = await db.get(ExamHistoryEntry, entry_id)
    if not entry:
        raise NotFoundException("Examen")
    return entry


async def list_exam_history(db: AsyncSession, patient_id: UUID) -> list[ExamHistoryEntry]:
    result = await db.execute(
        select(ExamHistoryEntry)
        .where(ExamHistoryEntry.patient_id == patient_id)
        .order_by(ExamHistoryEntry.exam_date.desc(), ExamHistoryEntry.created_at.desc())
    )
    return list(result.scalars().all())


async def create_exam_entry(db: AsyncSession, data: ExamHistoryCreate) -> ExamHistoryEntry:
    await _check_patient(db, data.patient_id)
    entry = ExamHistoryEntry(**data.model_dump())
    db.add(entry)
    await db.flush()
    await db.refresh(entry)
    return entry


async def update_exam_entry(
    db: AsyncSession, entry_id: UUID, data: ExamHistoryUpdate
) -> ExamHistoryEntry:
    entry = await get_exam_entry(db, entry_id)
    return await _update(db, entry, data.model_dump(exclude_unset=True))


async def delete_exam_entry(db: AsyncSession, entry_id: UUID) -> None:
    entry = await get_exam_entry(db, entry_id)
    await db.delete(entry)
    await db.flush()
