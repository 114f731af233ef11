"""
Endpoints del personal: CRUD, contrataciones recientes, estadísticas y exportación.
"""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.staff import (
    StaffActivityItem,
    StaffCreate,
    StaffListResponse,
    StaffResponse,
    StaffStats,
    StaffUpdate,
)
from hah_erp.services import export_service, staff_activity_service, staff_service

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.get("", response_model=StaffListResponse)
async def list_staff(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(10, ge=1, le=100, description="Tamaño de página"),
    search: str | None = Query(None, description="Nombre, email, cargo o departamento"),
    status: str | None = Query(None),
    gender: str | None = Query(None, pattern=r"^[MF]$"),
    department: str | None = Query(None),
    position: str | None = Query(None),
    sort_by: Literal["name", "created_at", "hire_date", "position", "department"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    user: User = Depends(require_permission("staff", "read")),
    db: AsyncSession = Depends(get_db),
):
    """
    Lista el personal con filtros.
    Departamento y cargo también coinciden con sus nombres heredados
    (ej: "Enfermería" también encuentra "Enfermeria" y "Nursing").
    """
    return await staff_service.list_staff(
        db,
        page=page,
        size=size,
        search=search,
        status=status,
        gender=gender,
        department=department,
        position=position,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/stats", response_model=StaffStats)
async def staff_stats(
    user: User = Depends(require_permission("staff", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await staff_service.get_stats(db)


@router.get("/hired/month", response_model=list[StaffResponse])
async def hired_this_month(
    user: User = Depends(require_permission("staff", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Personal contratado en el mes en curso (hora de Lima)."""
    return await staff_service.list_hired_this_month(db)


@router.get("/hired/year", response_model=list[StaffResponse])
async def hired_this_year(
    user: User = Depends(require_permission("staff", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await staff_service.list_hired_this_year(db)


@router.get("/export")
async def export_staff(
    format: Literal["csv", "json"] = Query("csv"),
    user: User = Depends(require_permission("staff", "export")),
    db: AsyncSession = Depends(get_db),
):
    exported = await staff_service.export_staff(db, format)
    if format == "json":
        return exported
    return Response(
        content=exported.encode("utf-8-sig"),
        media_type=export_service.CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="personal.csv"'},
    )


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(
    staff_id: UUID,
    user: User = Depends(require_permission("staff", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await staff_service.get_staff(db, staff_id)


@router.get("/{staff_id}/activity", response_model=list[StaffActivityItem])
async def staff_activity(
    staff_id: UUID,
    user: User = Depends(require_permission("staff", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Últimas 30 actividades del empleado: citas, turnos y registros de enfermería."""
    return await staff_activity_service.get_staff_activity(db, staff_id)


@router.post("", response_model=StaffResponse, status_code=201)
async def create_staff(
    data: StaffCreate,
    request: Request,
    user: User = Depends(require_permission("staff", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await staff_service.create_staff(
        db, user, data, ip_address=_get_client_ip(request)
    )


@router.put("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: UUID,
    data: StaffUpdate,
    request: Request,
    user: User = Depends(require_permission("staff", "update")),
    db: AsyncSession = Depends(get_db),
):
    """Actualiza solo los campos enviados."""
    return await staff_service.update_staff(
        db, staff_id, user, data, ip_address=_get_client_ip(request)
    )


@router.delete("/{staff_id}", status_code=204)
async def delete_staff(
    staff_id: UUID,
    request: Request,
    user: User = Depends(require_permission("staff", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await staff_service.delete_staff(
        db, staff_id, user, ip_address=_get_client_ip(request)
    )
