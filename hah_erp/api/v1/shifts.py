"""
Endpoints de turnos eventuales de cuidado.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.care_shift import (
    CareShiftCreate,
    CareShiftListResponse,
    CareShiftResponse,
    CareShiftUpdate,
)
from hah_erp.services import shift_service

router = APIRouter()


@router.get("", response_model=CareShiftListResponse)
async def list_shifts(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    date_from: date | None = Query(None, description="Fecha inicio"),
    date_to: date | None = Query(None, description="Fecha fin"),
    patient_id: UUID | None = Query(None),
    district: str | None = Query(None, description="Contiene"),
    nurse: str | None = Query(None, description="Contiene"),
    user: User = Depends(require_permission("care_shift", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Turnos por fecha descendente y hora de inicio ascendente."""
    return await shift_service.list_shifts(
        db,
        page=page,
        size=size,
        date_from=date_from,
        date_to=date_to,
        patient_id=patient_id,
        district=district,
        nurse=nurse,
    )


@router.get("/{shift_id}", response_model=CareShiftResponse)
async def get_shift(
    shift_id: UUID,
    user: User = Depends(require_permission("care_shift", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await shift_service.get_shift(db, shift_id)


@router.post("", response_model=CareShiftResponse, status_code=201)
async def create_shift(
    data: CareShiftCreate,
    user: User = Depends(require_permission("care_shift", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await shift_service.create_shift(db, data)


@router.put("/{shift_id}", response_model=CareShiftResponse)
async def update_shift(
    shift_id: UUID,
    data: CareShiftUpdate,
    user: User = Depends(require_permission("care_shift", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await shift_service.update_shift(db, shift_id, data)


@router.delete("/{shift_id}", status_code=204)
async def delete_shift(
    shift_id: UUID,
    user: User = Depends(require_permission("care_shift", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await shift_service.delete_shift(db, shift_id)
