"""
Endpoints de autenticación del staff: login, refresh, perfil y contraseña.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import get_current_user
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    TokenResponse,
)
from hah_erp.schemas.common import MessageResponse
from hah_erp.schemas.user import UserResponse
from hah_erp.services import auth_service

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    """Obtiene la IP del cliente desde los headers o la conexión."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Autentica un usuario con email y contraseña.
    Retorna los datos del usuario y el par de tokens.
    """
    return await auth_service.login(db, data, ip_address=_get_client_ip(request))


@router.post("/refresh", response_model=TokenResponse)
async def refresh_tokens(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    """Refresca un par de tokens usando el refresh token."""
    return await auth_service.refresh_tokens(db, data.refresh_token)


@router.get("/me", response_model=UserResponse)
async def get_me(
    user: User = Depends(get_current_user),
):
    """Retorna los datos del usuario autenticado."""
    return user


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cambia la contraseña del usuario autenticado."""
    await auth_service.change_password(
        db, user, data, ip_address=_get_client_ip(request)
    )
    return MessageResponse(message="Contraseña actualizada correctamente")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cierra la sesión. Los tokens expiran por sí solos."""
    await auth_service.logout(db, user, ip_address=_get_client_ip(request))
    return MessageResponse(message="Sesión cerrada")
