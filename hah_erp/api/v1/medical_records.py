"""
Endpoints de registros de citas médicas (ingreso / costo por cita).
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.medical_record import (
    MedicalRecordCreate,
    MedicalRecordListResponse,
    MedicalRecordResponse,
    MedicalRecordUpdate,
)
from hah_erp.services import medical_record_service

router = APIRouter()


@router.get("", response_model=MedicalRecordListResponse)
async def list_records(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(10, ge=1, le=100, description="Tamaño de página"),
    date_from: date | None = Query(None, description="Fecha inicio"),
    date_to: date | None = Query(None, description="Fecha fin"),
    search: str | None = Query(None, description="Paciente, médico o tipo de cita"),
    user: User = Depends(require_permission("medical_record", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Registros por fecha descendente."""
    return await medical_record_service.list_records(
        db, page=page, size=size, date_from=date_from, date_to=date_to, search=search
    )


@router.get("/by-appointment/{appointment_id}", response_model=MedicalRecordResponse | None)
async def get_by_appointment(
    appointment_id: UUID,
    user: User = Depends(require_permission("medical_record", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Registro de la cita, o null si aún no tiene."""
    return await medical_record_service.get_by_appointment(db, appointment_id)


@router.post(
    "/from-appointment/{appointment_id}", response_model=MedicalRecordResponse, status_code=201
)
async def create_from_appointment(
    appointment_id: UUID,
    user: User = Depends(require_permission("medical_record", "create")),
    db: AsyncSession = Depends(get_db),
):
    """Crea el registro de una cita de medicina; si ya existe lo devuelve."""
    return await medical_record_service.create_from_appointment_id(db, appointment_id)


@router.get("/{record_id}", response_model=MedicalRecordResponse)
async def get_record(
    record_id: UUID,
    user: User = Depends(require_permission("medical_record", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await medical_record_service.get_record(db, record_id)


@router.post("", response_model=MedicalRecordResponse, status_code=201)
async def create_record(
    data: MedicalRecordCreate,
    user: User = Depends(require_permission("medical_record", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await medical_record_service.create_record(db, data)


@router.put("/{record_id}", response_model=MedicalRecordResponse)
async def update_record(
    record_id: UUID,
    data: MedicalRecordUpdate,
    user: User = Depends(require_permission("medical_record", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await medical_record_service.update_record(db, record_id, data)


@router.delete("/{record_id}", status_code=204)
async def delete_record(
    record_id: UUID,
    user: User = Depends(require_permission("medical_record", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await medical_record_service.delete_record(db, record_id)
