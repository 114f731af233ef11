"""
Endpoints del portal de pacientes.

El staff crea el acceso (usuario = DNI) y el paciente, con su token de
portal, consulta sus órdenes de laboratorio y descarga los resultados.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import get_current_portal_user, require_permission
from hah_erp.config import get_settings
from hah_erp.database import get_db
from hah_erp.models.portal_user import PortalUser
from hah_erp.models.user import User
from hah_erp.schemas.lab import SignedUrlResponse
from hah_erp.schemas.portal import (
    PortalAccountResponse,
    PortalLoginRequest,
    PortalLoginResponse,
    PortalOrderResponse,
    PortalPatientProfile,
)
from hah_erp.services import portal_service

settings = get_settings()

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


# ── Staff ────────────────────────────────────────────


@router.post("/accounts/{patient_id}", response_model=PortalAccountResponse)
async def ensure_account(
    patient_id: UUID,
    request: Request,
    user: User = Depends(require_permission("portal", "manage")),
    db: AsyncSession = Depends(get_db),
):
    """
    Crea el acceso al portal del paciente.
    Si ya existe responde `already_exists=true` sin contraseña.
    """
    return await portal_service.ensure_account(
        db, patient_id, user, ip_address=_get_client_ip(request)
    )


# ── Paciente ─────────────────────────────────────────


@router.post("/login", response_model=PortalLoginResponse)
async def portal_login(
    data: PortalLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Login del paciente con DNI y contraseña."""
    return await portal_service.login(db, data)


@router.get("/me", response_model=PortalPatientProfile)
async def portal_me(
    portal_user: PortalUser = Depends(get_current_portal_user),
):
    return portal_service.profile(portal_user)


@router.get("/orders", response_model=list[PortalOrderResponse])
async def my_orders(
    portal_user: PortalUser = Depends(get_current_portal_user),
    db: AsyncSession = Depends(get_db),
):
    return await portal_service.my_orders(db, portal_user)


@router.get("/orders/{order_id}", response_model=PortalOrderResponse)
async def my_order(
    order_id: UUID,
    portal_user: PortalUser = Depends(get_current_portal_user),
    db: AsyncSession = Depends(get_db),
):
    return await portal_service.order_detail(db, portal_user, order_id)


@router.get("/orders/{order_id}/result-url", response_model=SignedUrlResponse)
async def my_result_url(
    order_id: UUID,
    portal_user: PortalUser = Depends(get_current_portal_user),
    db: AsyncSession = Depends(get_db),
):
    """URL temporal del PDF; las órdenes de otros pacientes responden 404."""
    url = await portal_service.result_url(db, portal_user, order_id)
    return SignedUrlResponse(url=url, expires_in=settings.STORAGE_SIGNED_URL_EXPIRES)
