"""
Endpoints del catálogo de procedimientos y de los registros de procedimientos
(pagos por servicio realizado).
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.procedure import (
    CostPreviewRequest,
    CostPreviewResponse,
    PaymentMethodOption,
    PaymentStatus,
    ProcedureCatalogCreate,
    ProcedureCatalogResponse,
    ProcedureCatalogUpdate,
    ProcedureRecordCreate,
    ProcedureRecordListResponse,
    ProcedureRecordResponse,
    ProcedureRecordUpdate,
    ProcedureReport,
    RecordTotals,
)
from hah_erp.services import billing, procedure_service, report_service

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


# ── Catálogo ─────────────────────────────────────────


@router.get("/catalog", response_model=list[ProcedureCatalogResponse])
async def list_procedures(
    active_only: bool = Query(True, description="Solo procedimientos activos"),
    user: User = Depends(require_permission("procedure_catalog", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Lista el catálogo ordenado por nombre."""
    return await procedure_service.list_procedures(db, active_only=active_only)


@router.get("/catalog/search", response_model=list[ProcedureCatalogResponse])
async def search_procedures(
    q: str = Query(..., min_length=1, description="Parte del nombre"),
    user: User = Depends(require_permission("procedure_catalog", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await procedure_service.find_by_name(db, q)


@router.post("/catalog/preview", response_model=CostPreviewResponse)
async def preview_costs(
    data: CostPreviewRequest,
    user: User = Depends(require_permission("procedure_catalog", "read")),
):
    """
    Calcula costo total y utilidad sin guardar:

        costo = honorarios + movilidad + Σ(cantidad × costo unitario)
        utilidad = precio base − costo
    """
    return procedure_service.preview_costs(data)


@router.get("/catalog/{procedure_id}", response_model=ProcedureCatalogResponse)
async def get_procedure(
    procedure_id: UUID,
    user: User = Depends(require_permission("procedure_catalog", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await procedure_service.get_procedure(db, procedure_id)


@router.post("/catalog", response_model=ProcedureCatalogResponse, status_code=201)
async def create_procedure(
    data: ProcedureCatalogCreate,
    user: User = Depends(require_permission("procedure_catalog", "create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Crea un procedimiento con sus materiales.
    Los materiales nuevos se registran también en el inventario.
    """
    return await procedure_service.create_procedure(db, data)


@router.put("/catalog/{procedure_id}", response_model=ProcedureCatalogResponse)
async def update_procedure(
    procedure_id: UUID,
    data: ProcedureCatalogUpdate,
    user: User = Depends(require_permission("procedure_catalog", "update")),
    db: AsyncSession = Depends(get_db),
):
    """
    Actualización parcial. Si se envía `materials` reemplaza la lista completa
    (una lista vacía la limpia); si se omite se conservan los actuales.
    """
    return await procedure_service.update_procedure(db, procedure_id, data)


@router.delete("/catalog/{procedure_id}", status_code=204)
async def delete_procedure(
    procedure_id: UUID,
    user: User = Depends(require_permission("procedure_catalog", "delete")),
    db: AsyncSession = Depends(get_db),
):
    """Desactiva el procedimiento (soft delete)."""
    await procedure_service.delete_procedure(db, procedure_id)


# ── Registros ────────────────────────────────────────


@router.get("/records", response_model=ProcedureRecordListResponse)
async def list_records(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    date_from: date | None = Query(None, description="Fecha inicio"),
    date_to: date | None = Query(None, description="Fecha fin"),
    search: str | None = Query(None, description="Paciente, procedimiento, distrito u operación"),
    payment_status: PaymentStatus | None = Query(None, description="pendiente o cancelado"),
    user: User = Depends(require_permission("procedure_record", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await procedure_service.list_records(
        db,
        page=page,
        size=size,
        date_from=date_from,
        date_to=date_to,
        search=search,
        payment_status=payment_status,
    )


@router.get("/records/payment-methods", response_model=list[PaymentMethodOption])
async def payment_methods(
    user: User = Depends(require_permission("procedure_record", "read")),
):
    return billing.PAYMENT_METHOD_OPTIONS


@router.get("/records/report/totals", response_model=RecordTotals)
async def record_totals(
    date_from: date = Query(..., description="Fecha inicio"),
    date_to: date = Query(..., description="Fecha fin"),
    user: User = Depends(require_permission("procedure_record", "read")),
    db: AsyncSession = Depends(get_db),
):
    report_service.check_range(date_from, date_to)
    return await procedure_service.report_totals(db, date_from, date_to)


@router.get("/records/report", response_model=ProcedureReport)
async def record_report(
    date_from: date = Query(..., description="Fecha inicio"),
    date_to: date = Query(..., description="Fecha fin"),
    user: User = Depends(require_permission("procedure_record", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Filas con ingreso, costo y utilidad por registro, más los totales del rango."""
    report_service.check_range(date_from, date_to)
    return await procedure_service.build_report(db, date_from, date_to)


@router.get("/records/{record_id}", response_model=ProcedureRecordResponse)
async def get_record(
    record_id: UUID,
    user: User = Depends(require_permission("procedure_record", "read")),
    db: AsyncSession = Depends(get_db),
):
    record = await procedure_service.get_record(db, record_id)
    return (await procedure_service.serialize_records(db, [record]))[0]


@router.post("/records", response_model=ProcedureRecordResponse, status_code=201)
async def create_record(
    data: ProcedureRecordCreate,
    request: Request,
    user: User = Depends(require_permission("procedure_record", "create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Registra un procedimiento realizado.
    El pago puede enviarse por columnas o como `payment` (método y monto);
    la utilidad se recalcula siempre.
    """
    record = await procedure_service.create_record(
        db, user, data, ip_address=_get_client_ip(request)
    )
    return procedure_service.serialize_record(record)


@router.put("/records/{record_id}", response_model=ProcedureRecordResponse)
async def update_record(
    record_id: UUID,
    data: ProcedureRecordUpdate,
    request: Request,
    user: User = Depends(require_permission("procedure_record", "update")),
    db: AsyncSession = Depends(get_db),
):
    record = await procedure_service.update_record(
        db, record_id, user, data, ip_address=_get_client_ip(request)
    )
    return procedure_service.serialize_record(record)


@router.delete("/records/{record_id}", status_code=204)
async def delete_record(
    record_id: UUID,
    request: Request,
    user: User = Depends(require_permission("procedure_record", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await procedure_service.delete_record(
        db, record_id, user, ip_address=_get_client_ip(request)
    )
