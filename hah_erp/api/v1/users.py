"""
Endpoints de administración de usuarios del staff (solo administradores).
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User, UserRole
from hah_erp.schemas.user import UserCreate, UserListResponse, UserResponse, UserUpdate
from hah_erp.services import user_service

router = APIRouter()


def _get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    role: UserRole | None = Query(None, description="Filtrar por rol"),
    is_active: bool | None = Query(None, description="Filtrar por estado"),
    user: User = Depends(require_permission("user", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Lista los usuarios del sistema."""
    return await user_service.list_users(
        db, page=page, size=size, role=role, is_active=is_active
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    user: User = Depends(require_permission("user", "read")),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    request: Request,
    user: User = Depends(require_permission("user", "create")),
    db: AsyncSession = Depends(get_db),
):
    """Crea un usuario. El email debe ser único."""
    return await user_service.create_user(
        db, user, data, ip_address=_get_client_ip(request)
    )


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    request: Request,
    user: User = Depends(require_permission("user", "update")),
    db: AsyncSession = Depends(get_db),
):
    """Actualiza rol, estado, nombres o contraseña de un usuario."""
    return await user_service.update_user(
        db, user, user_id, data, ip_address=_get_client_ip(request)
    )
