"""
Utilidades de seguridad: hashing de contraseñas y generación de claves
para el portal de pacientes.
"""

import secrets

from passlib.context import CryptContext

# ── Hashing de contraseñas ───────────────────────────
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Sin 0, o, 1, l ni i
PORTAL_PASSWORD_ALPHABET = "abcdefghjkmnpqrstuvwxyz23456789"
PORTAL_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    """Genera hash bcrypt de una contraseña."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica una contraseña contra su hash bcrypt."""
    return pwd_context.verify(plain_password, hashed_password)


def generate_portal_password(length: int = PORTAL_PASSWORD_LENGTH) -> str:
    """Genera una contraseña aleatoria legible para el portal de pacientes."""
    return "".join(
        secrets.choice(PORTAL_PASSWORD_ALPHABET) for _ in range(length)
    )
