"""
Endpoints del historial clínico y de exámenes del paciente.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.history import (
    ExamHistoryCreate,
    ExamHistoryResponse,
    ExamHistoryUpdate,
    PatientHistoryCreate,
    PatientHistoryResponse,
    PatientHistoryUpdate,
)
from hah_erp.services import history_service

router = APIRouter()


@router.get("/patient", response_model=list[PatientHistoryResponse])
async def list_patient_history(
    patient_id: UUID = Query(...),
    user: User = Depends(require_permission("clinical_history", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Entradas del paciente, más recientes primero."""
    return await history_service.list_patient_history(db, patient_id)


@router.post("/patient", response_model=PatientHistoryResponse, status_code=201)
async def create_patient_entry(
    data: PatientHistoryCreate,
    user: User = Depends(require_permission("clinical_history", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await history_service.create_patient_entry(db, data)


@router.put("/patient/{entry_id}", response_model=PatientHistoryResponse)
async def update_patient_entry(
    entry_id: UUID,
    data: PatientHistoryUpdate,
    user: User = Depends(require_permission("clinical_history", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await history_service.update_patient_entry(db, entry_id, data)


@router.delete("/patient/{entry_id}", status_code=204)
async def delete_patient_entry(
    entry_id: UUID,
    user: User = Depends(require_permission("clinical_history", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await history_service.delete_patient_entry(db, entry_id)


@router.get("/exams", response_model=list[ExamHistoryResponse])
async def list_exam_history(
    patient_id: UUID = Query(...),
    user: User = Depends(require_permission("clinical_history", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await history_service.list_exam_history(db, patient_id)


@router.post("/exams", response_model=ExamHistoryResponse, status_code=201)
async def create_exam_entry(
    data: ExamHistoryCreate,
    user: User = Depends(require_permission("clinical_history", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await history_service.create_exam_entry(db, data)


@router.put("/exams/{entry_id}", response_model=ExamHistoryResponse)
async def update_exam_entry(
    entry_id: UUID,
    data: ExamHistoryUpdate,
    user: User = Depends(require_permission("clinical_history", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await history_service.update_exam_entry(db, entry_id, data)


@router.delete("/exams/{entry_id}", status_code=204)
async def delete_exam_entry(
    entry_id: UUID,
    user: User = Depends(require_permission("clinical_history", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await history_service.delete_exam_entry(db, entry_id)
