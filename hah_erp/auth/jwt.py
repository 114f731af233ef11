"""
Gestión de JWT.
RS256 con claves asimétricas en producción; HS256 con secreto compartido
cuando así se configure (entornos de desarrollo y tests).
Access tokens (15 min) + Refresh tokens (7 días) + tokens del portal
de pacientes y de descarga de archivos.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from hah_erp.config import get_settings

settings = get_settings()


class TokenType:
    ACCESS = "access"
    REFRESH = "refresh"
    PORTAL = "portal"
    DOWNLOAD = "download"


def _encode(payload: dict) -> str:
    return jwt.encode(
        payload,
        settings.jwt_private_key,
        algorithm=settings.JWT_ALGORITHM,
    )


def create_access_token(
    user_id: UUID,
    role: str,
    extra_claims: dict | None = None,
) -> str:
    """Crea un access token JWT (corta duración)."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": TokenType.ACCESS,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    if extra_claims:
        payload.update(extra_claims)
    return _encode(payload)


def create_refresh_token(user_id: UUID) -> str:
    """Crea un refresh token JWT (larga duración)."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": TokenType.REFRESH,
        "iat": now,
        "exp": now + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
    }
    return _encode(payload)


def create_portal_token(portal_user_id: UUID, patient_id: UUID) -> str:
    """Token del portal: identifica al paciente, no a un usuario del staff."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(portal_user_id),
        "patient_id": str(patient_id),
        "type": TokenType.PORTAL,
        "iat": now,
        "exp": now + timedelta(minutes=settings.PORTAL_TOKEN_EXPIRE_MINUTES),
    }
    return _encode(payload)


def create_download_token(bucket: str, path: str, expires_in: int) -> str:
    """Token firmado para descargar un archivo del storage local."""
    now = datetime.now(timezone.utc)
    payload = {
        "bucket": bucket,
        "path": path,
        "type": TokenType.DOWNLOAD,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return _encode(payload)


def decode_token(token: str) -> dict:
    """
    Decodifica y verifica un token JWT.
    Lanza jwt.InvalidTokenError si el token es inválido o expirado.
    """
    return jwt.decode(
        token,
        settings.jwt_public_key,
        algorithms=[settings.JWT_ALGORITHM],
    )


def decode_token_safe(token: str) -> dict | None:
    """Decodifica un token JWT sin lanzar excepciones."""
    try:
        return decode_token(token)
    except jwt.InvalidTokenError:
        return None
