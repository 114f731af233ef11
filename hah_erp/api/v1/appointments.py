"""
Endpoints de citas: agendas de medicina y de procedimientos.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.appointment import AppointmentStatus, AppointmentVariant
from hah_erp.models.user import User
from hah_erp.schemas.appointment import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentUpdate,
)
from hah_erp.services import appointment_service

router = APIRouter()


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    variant: AppointmentVariant = Query(AppointmentVariant.MEDICINA, description="Agenda"),
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    date_from: date | None = Query(None, description="Fecha inicio"),
    date_to: date | None = Query(None, description="Fecha fin"),
    status: AppointmentStatus | None = Query(None, description="Filtrar por estado"),
    search: str | None = Query(None, description="Paciente o doctor"),
    user: User = Depends(require_permission("appointment", "read")),
    db: AsyncSession = Depends(get_db),
):
    """
    Lista las citas de una agenda.
    Ordenadas por fecha y hora, las más recientes primero.
    """
    return await appointment_service.list_appointments(
        db,
        variant=variant,
        page=page,
        size=size,
        date_from=date_from,
        date_to=date_to,
        status=status,
        search=search,
    )


@router.get("/today", response_model=list[AppointmentResponse])
async def today_appointments(
    user: User = Depends(require_permission("appointment", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Citas de hoy (hora de Lima) de ambas agendas, ordenadas por hora."""
    return await appointment_service.list_today(db)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: UUID,
    user: User = Depends(require_permission("appointment", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await appointment_service.get_appointment(db, appointment_id)


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    user: User = Depends(require_permission("appointment", "create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Agenda una cita.
    Si se envía `patient_id`, los datos del paciente faltantes se completan
    desde su ficha; la hora acepta "8:00 AM" y se guarda como "08:00".
    """
    return await appointment_service.create_appointment(db, data)


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    user: User = Depends(require_permission("appointment", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await appointment_service.update_appointment(db, appointment_id, data)


@router.delete("/{appointment_id}", status_code=204)
async def delete_appointment(
    appointment_id: UUID,
    user: User = Depends(require_permission("appointment", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await appointment_service.delete_appointment(db, appointment_id)
