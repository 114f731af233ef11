"""
Schemas de autenticación: login, tokens y cambio de contraseña.
"""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from hah_erp.models.user import UserRole


# ── Login ────────────────────────────────────────────
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenData(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserLoginData(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: UserRole


class LoginResponse(BaseModel):
    user: UserLoginData
    tokens: TokenData


# ── Refresh Token ────────────────────────────────────
class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


# ── Cambio de contraseña ─────────────────────────────
class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)
    confirm_password: str
