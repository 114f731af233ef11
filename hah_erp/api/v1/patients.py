"""
Endpoints CRUD de pacientes, estadísticas y exportación.
"""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.patient import (
    PatientCreate,
    PatientListResponse,
    PatientResponse,
    PatientStats,
    PatientSummary,
    PatientUpdate,
)
from hah_erp.services import export_service, patient_service

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.get("", response_model=PatientListResponse)
async def list_patients(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    search: str | None = Query(None, description="Nombre, email, teléfono o DNI"),
    status: str | None = Query(None, description="Activo o Inactivo"),
    gender: str | None = Query(None, pattern=r"^[MF]$"),
    blood_type: str | None = Query(None),
    district: str | None = Query(None, description="Contiene"),
    sort_by: Literal["name", "created_at", "last_visit", "age"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    user: User = Depends(require_permission("patient", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Lista pacientes con paginación, búsqueda y filtros."""
    return await patient_service.list_patients(
        db,
        page=page,
        size=size,
        search=search,
        status=status,
        gender=gender,
        blood_type=blood_type,
        district=district,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/stats", response_model=PatientStats)
async def patient_stats(
    user: User = Depends(require_permission("patient", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await patient_service.get_stats(db)


@router.get("/search", response_model=list[PatientSummary])
async def quick_search(
    q: str = Query(..., min_length=1, description="Nombre, DNI o teléfono"),
    user: User = Depends(require_permission("patient", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Búsqueda rápida para selectores (máximo 10 resultados)."""
    return await patient_service.quick_search(db, q)


@router.get("/districts", response_model=list[str])
async def list_districts(
    user: User = Depends(require_permission("patient", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await patient_service.list_districts(db)


@router.get("/export")
async def export_patients(
    format: Literal["csv", "json"] = Query("csv"),
    user: User = Depends(require_permission("patient", "export")),
    db: AsyncSession = Depends(get_db),
):
    """Exporta todos los pacientes en CSV (encabezados en español) o JSON."""
    exported = await patient_service.export_patients(db, format)
    if format == "json":
        return exported
    return Response(
        content=exported.encode("utf-8-sig"),
        media_type=export_service.CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="pacientes.csv"'},
    )


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: UUID,
    user: User = Depends(require_permission("patient", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Obtiene el detalle de un paciente por ID."""
    return await patient_service.get_patient(db, patient_id)


@router.post("", response_model=PatientResponse, status_code=201)
async def create_patient(
    data: PatientCreate,
    request: Request,
    user: User = Depends(require_permission("patient", "create")),
    db: AsyncSession = Depends(get_db),
):
    """Crea un paciente. El DNI, si se envía, debe ser único."""
    return await patient_service.create_patient(
        db, user, data, ip_address=_get_client_ip(request)
    )


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: UUID,
    data: PatientUpdate,
    request: Request,
    user: User = Depends(require_permission("patient", "update")),
    db: AsyncSession = Depends(get_db),
):
    """
    Actualiza un paciente existente.
    Solo se actualizan los campos enviados.
    """
    return await patient_service.update_patient(
        db, patient_id, user, data, ip_address=_get_client_ip(request)
    )


@router.delete("/{patient_id}", status_code=204)
async def delete_patient(
    patient_id: UUID,
    request: Request,
    user: User = Depends(require_permission("patient", "delete")),
    db: AsyncSession = Depends(get_db),
):
    """
    Elimina un paciente.
    Falla con 409 si aún tiene contratos u órdenes de laboratorio.
    """
    await patient_service.delete_patient(
        db, patient_id, user, ip_address=_get_client_ip(request)
    )
