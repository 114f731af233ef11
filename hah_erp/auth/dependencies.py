"""
Dependencies de FastAPI para autenticación del staff y del portal de pacientes.
"""

from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.jwt import TokenType, decode_token
from hah_erp.auth.rbac import has_permission
from hah_erp.core.exceptions import CredentialsException, ForbiddenException
from hah_erp.database import get_db
from hah_erp.models.portal_user import PortalUser
from hah_erp.models.user import User, UserRole

# ── Security scheme ──────────────────────────────────
security = HTTPBearer()


# ── Token payload tipado ─────────────────────────────
class TokenPayload:
    """Datos extraídos del token JWT decodificado."""

    def __init__(self, payload: dict):
        self.subject: UUID = UUID(payload["sub"])
        self.role: str = payload.get("role", "")
        self.token_type: str = payload.get("type", TokenType.ACCESS)
        patient_id = payload.get("patient_id")
        self.patient_id: UUID | None = UUID(patient_id) if patient_id else None


def _decode(credentials: HTTPAuthorizationCredentials) -> TokenPayload:
    try:
        payload = decode_token(credentials.credentials)
        return TokenPayload(payload)
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise CredentialsException("Token inválido o expirado")


# ── Obtener usuario actual ───────────────────────────
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency que:
    1. Decodifica el JWT del header Authorization
    2. Verifica que sea un access token del staff
    3. Carga el usuario activo de la DB
    """
    token_data = _decode(credentials)

    if token_data.token_type != TokenType.ACCESS:
        raise CredentialsException("Tipo de token inválido")

    result = await db.execute(
        select(User).where(
            User.id == token_data.subject,
            User.is_active.is_(True),
        )
    )
    user = result.scalar_one_or_none()

    if user is None:
        raise CredentialsException("Usuario no encontrado o inactivo")

    return user


# ── Factory de dependency con roles ──────────────────
def require_role(*allowed_roles: UserRole):
    """
    Factory que crea un dependency que verifica el rol del usuario.

    Uso:
        @router.delete("/{id}")
        async def delete(user: User = Depends(require_role(UserRole.ADMIN))):
            ...
    """

    async def _check_role(
        user: User = Depends(get_current_user),
    ) -> User:
        if user.role not in allowed_roles:
            raise ForbiddenException(
                f"Se requiere uno de los roles: {', '.join(r.value for r in allowed_roles)}"
            )
        return user

    return _check_role


def require_permission(resource: str, action: str):
    """Dependency que valida la matriz de permisos de `auth/rbac.py`."""

    async def _check_permission(
        user: User = Depends(get_current_user),
    ) -> User:
        if not has_permission(user.role, resource, action):
            raise ForbiddenException(
                f"El rol {user.role.value} no puede realizar '{action}' sobre '{resource}'"
            )
        return user

    return _check_permission


# ── Portal de pacientes ──────────────────────────────
async def get_current_portal_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> PortalUser:
    """Dependency del portal: solo acepta tokens de tipo `portal`."""
    token_data = _decode(credentials)

    if token_data.token_type != TokenType.PORTAL:
        raise CredentialsException("Tipo de token inválido")

    result = await db.execute(
        select(PortalUser).where(
            PortalUser.id == token_data.subject,
            PortalUser.is_active.is_(True),
        )
    )
    portal_user = result.scalar_one_or_none()

    if portal_user is None or portal_user.patient_id != token_data.patient_id:
        raise CredentialsException("Acceso al portal no válido")

    return portal_user
