"""
Endpoints de contratos de servicio con pacientes.
"""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.contract import ContractStatus
from hah_erp.models.user import User
from hah_erp.schemas.contract import (
    ContractStats,
    PatientContractCreate,
    PatientContractListResponse,
    PatientContractResponse,
    PatientContractUpdate,
)
from hah_erp.services import contract_service, export_service

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.get("", response_model=PatientContractListResponse)
async def list_contracts(
    page: int = Query(1, ge=1, description="Número de página"),
    size: int = Query(20, ge=1, le=100, description="Tamaño de página"),
    search: str | None = Query(None, description="N° de contrato o familiar responsable"),
    status: ContractStatus | None = Query(None),
    service_type: str | None = Query(None),
    patient_id: UUID | None = Query(None),
    sort_by: Literal[
        "contract_number", "contract_date", "start_date", "monthly_amount", "created_at"
    ] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    user: User = Depends(require_permission("contract", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await contract_service.list_contracts(
        db,
        page=page,
        size=size,
        search=search,
        status=status,
        service_type=service_type,
        patient_id=patient_id,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/stats", response_model=ContractStats)
async def contract_stats(
    user: User = Depends(require_permission("contract", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await contract_service.get_stats(db)


@router.get("/export")
async def export_contracts(
    format: Literal["csv", "json"] = Query("csv"),
    user: User = Depends(require_permission("contract", "export")),
    db: AsyncSession = Depends(get_db),
):
    exported = await contract_service.export_contracts(db, format)
    if format == "json":
        return exported
    return Response(
        content=exported.encode("utf-8-sig"),
        media_type=export_service.CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="contratos.csv"'},
    )


@router.get("/patient/{patient_id}", response_model=list[PatientContractResponse])
async def contracts_by_patient(
    patient_id: UUID,
    user: User = Depends(require_permission("contract", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await contract_service.list_by_patient(db, patient_id)


@router.get("/{contract_id}", response_model=PatientContractResponse)
async def get_contract(
    contract_id: UUID,
    user: User = Depends(require_permission("contract", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await contract_service.get_contract(db, contract_id)


@router.post("", response_model=PatientContractResponse, status_code=201)
async def create_contract(
    data: PatientContractCreate,
    request: Request,
    user: User = Depends(require_permission("contract", "create")),
    db: AsyncSession = Depends(get_db),
):
    """Crea un contrato; el número CON-<año>-<NNNN> se genera automáticamente."""
    return await contract_service.create_contract(
        db, user, data, ip_address=_get_client_ip(request)
    )


@router.put("/{contract_id}", response_model=PatientContractResponse)
async def update_contract(
    contract_id: UUID,
    data: PatientContractUpdate,
    request: Request,
    user: User = Depends(require_permission("contract", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await contract_service.update_contract(
        db, contract_id, user, data, ip_address=_get_client_ip(request)
    )


@router.delete("/{contract_id}", status_code=204)
async def delete_contract(
    contract_id: UUID,
    request: Request,
    user: User = Depends(require_permission("contract", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await contract_service.delete_contract(
        db, contract_id, user, ip_address=_get_client_ip(request)
    )
