"""
Servicio de autenticación del staff: login, refresh, cambio de contraseña.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.jwt import (
    TokenType,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from hah_erp.core.exceptions import CredentialsException, ValidationException
from hah_erp.core.security import hash_password, verify_password
from hah_erp.models.user import User
from hah_erp.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    TokenData,
    TokenResponse,
    UserLoginData,
)
from hah_erp.services.audit_service import log_action

logger = logging.getLogger(__name__)


def _issue_tokens(user: User) -> TokenData:
    return TokenData(
        access_token=create_access_token(user.id, user.role.value),
        refresh_token=create_refresh_token(user.id),
    )


async def login(
    db: AsyncSession,
    data: LoginRequest,
    ip_address: str | None = None,
) -> LoginResponse:
    """Autentica un usuario del staff con email y contraseña."""
    result = await db.execute(
        select(User).where(User.email == data.email, User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()

    if not user:
        logger.warning("Login fallido: usuario no encontrado para email=%s", data.email)
        raise CredentialsException("Email o contraseña incorrectos")

    if not verify_password(data.password, user.hashed_password):
        logger.warning(
            "Login fallido: contraseña incorrecta para user_id=%s email=%s",
            user.id, user.email,
        )
        raise CredentialsException("Email o contraseña incorrectos")

    user.last_login = datetime.now(timezone.utc)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="user",
        entity_id=str(user.id),
        action="login",
        ip_address=ip_address,
    )

    return LoginResponse(
        user=UserLoginData(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            role=user.role,
        ),
        tokens=_issue_tokens(user),
    )


async def logout(
    db: AsyncSession,
    user: User,
    ip_address: str | None = None,
) -> None:
    """Los tokens son stateless: solo se deja constancia en el audit log."""
    await log_action(
        db,
        user_id=user.id,
        entity="user",
        entity_id=str(user.id),
        action="logout",
        ip_address=ip_address,
    )


async def refresh_tokens(db: AsyncSession, refresh_token_str: str) -> TokenResponse:
    """Refresca un par de tokens usando el refresh token."""
    try:
        payload = decode_token(refresh_token_str)
    except jwt.InvalidTokenError:
        raise CredentialsException("Refresh token inválido o expirado")

    if payload.get("type") != TokenType.REFRESH:
        raise CredentialsException("Token no es un refresh token")

    result = await db.execute(
        select(User).where(User.id == UUID(payload["sub"]), User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()
    if not user:
        raise CredentialsException("Usuario no encontrado o inactivo")

    tokens = _issue_tokens(user)
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


async def change_password(
    db: AsyncSession,
    user: User,
    data: ChangePasswordRequest,
    ip_address: str | None = None,
) -> None:
    """Cambia la contraseña del usuario autenticado."""
    if data.new_password != data.confirm_password:
        raise ValidationException("Las contraseñas no coinciden")

    if not verify_password(data.current_password, user.hashed_password):
        raise CredentialsException("La contraseña actual es incorrecta")

    user.hashed_password = hash_password(data.new_password)
    await db.flush()

    await log_action(
        db,
        user_id=user.id,
        entity="user",
        entity_id=str(user.id),
        action="change_password",
        ip_address=ip_address,
    )
