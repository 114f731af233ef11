"""
Endpoints de cuidados en casa: planes, contratos por paciente y periodos
quincenales de facturación.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.home_care import (
    BillingPreviewRequest,
    BillingPreviewResponse,
    HomeCareContractCreate,
    HomeCareContractResponse,
    HomeCareContractSummary,
    HomeCareContractUpdate,
    HomeCarePeriodCreate,
    HomeCarePeriodResponse,
    HomeCarePeriodUpdate,
    HomeCarePlanCreate,
    HomeCarePlanResponse,
    HomeCarePlanUpdate,
)
from hah_erp.services import home_care_service

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


# ── Planes ───────────────────────────────────────────


@router.get("/plans", response_model=list[HomeCarePlanResponse])
async def list_plans(
    include_inactive: bool = Query(False),
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Planes ordenados por monto mensual."""
    return await home_care_service.list_plans(db, include_inactive=include_inactive)


@router.post("/plans", response_model=HomeCarePlanResponse, status_code=201)
async def create_plan(
    data: HomeCarePlanCreate,
    user: User = Depends(require_permission("home_care", "create")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.create_plan(db, data)


@router.put("/plans/{plan_id}", response_model=HomeCarePlanResponse)
async def update_plan(
    plan_id: UUID,
    data: HomeCarePlanUpdate,
    user: User = Depends(require_permission("home_care", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.update_plan(db, plan_id, data)


# ── Contratos ────────────────────────────────────────


@router.get("/contracts", response_model=list[HomeCareContractResponse])
async def list_contracts(
    is_active: bool | None = Query(None, description="Filtrar por estado"),
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Contratos con resumen del paciente, inicio más reciente primero."""
    return await home_care_service.list_contracts(db, is_active=is_active)


@router.get("/contracts/patient/{patient_id}", response_model=HomeCareContractResponse)
async def get_contract_by_patient(
    patient_id: UUID,
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.get_contract_by_patient(db, patient_id)


@router.get("/contracts/{contract_id}", response_model=HomeCareContractResponse)
async def get_contract(
    contract_id: UUID,
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.get_contract(db, contract_id)


@router.post("/contracts", response_model=HomeCareContractResponse, status_code=201)
async def create_contract(
    data: HomeCareContractCreate,
    request: Request,
    user: User = Depends(require_permission("home_care", "create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Crea el contrato de cuidados del paciente (uno por paciente).
    Si se envía `plan_id` se copian el nombre y el monto mensual del plan.
    """
    return await home_care_service.create_contract(
        db, user, data, ip_address=_get_client_ip(request)
    )


@router.put("/contracts/{contract_id}", response_model=HomeCareContractResponse)
async def update_contract(
    contract_id: UUID,
    data: HomeCareContractUpdate,
    request: Request,
    user: User = Depends(require_permission("home_care", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.update_contract(
        db, contract_id, user, data, ip_address=_get_client_ip(request)
    )


@router.post("/contracts/{contract_id}/deactivate", response_model=HomeCareContractResponse)
async def deactivate_contract(
    contract_id: UUID,
    request: Request,
    user: User = Depends(require_permission("home_care", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.deactivate_contract(
        db, contract_id, user, ip_address=_get_client_ip(request)
    )


@router.get("/contracts/{contract_id}/summary", response_model=HomeCareContractSummary)
async def contract_summary(
    contract_id: UUID,
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Total facturado, pagado (periodos con fecha de pago) y pendiente."""
    return await home_care_service.contract_summary(db, contract_id)


# ── Periodos ─────────────────────────────────────────


@router.get("/contracts/{contract_id}/periods", response_model=list[HomeCarePeriodResponse])
async def list_periods(
    contract_id: UUID,
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.list_periods(db, contract_id)


@router.post(
    "/contracts/{contract_id}/periods",
    response_model=HomeCarePeriodResponse,
    status_code=201,
)
async def create_period(
    contract_id: UUID,
    data: HomeCarePeriodCreate,
    user: User = Depends(require_permission("home_care", "create")),
    db: AsyncSession = Depends(get_db),
):
    """
    Registra una quincena. El monto se calcula en el servidor:

        quincena = mensual / 2 (o 2500 si no hay monto)
        total = quincena + feriados × por día − horas de pausa × por hora
    """
    return await home_care_service.create_period(db, contract_id, data)


@router.post("/periods/preview", response_model=BillingPreviewResponse)
async def preview_billing(
    data: BillingPreviewRequest,
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Calcula el monto de una quincena sin guardar."""
    return await home_care_service.preview_billing(db, data)


@router.get("/periods/{period_id}", response_model=HomeCarePeriodResponse)
async def get_period(
    period_id: UUID,
    user: User = Depends(require_permission("home_care", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.get_period(db, period_id)


@router.put("/periods/{period_id}", response_model=HomeCarePeriodResponse)
async def update_period(
    period_id: UUID,
    data: HomeCarePeriodUpdate,
    user: User = Depends(require_permission("home_care", "update")),
    db: AsyncSession = Depends(get_db),
):
    return await home_care_service.update_period(db, period_id, data)


@router.delete("/periods/{period_id}", status_code=204)
async def delete_period(
    period_id: UUID,
    user: User = Depends(require_permission("home_care", "delete")),
    db: AsyncSession = Depends(get_db),
):
    await home_care_service.delete_period(db, period_id)
