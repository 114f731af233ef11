"""
Crea el primer usuario administrador.

    python scripts/create_admin.py admin@empresa.pe "Nombre" "Apellido"

La contraseña se pide por consola.
"""

import asyncio
import getpass
import sys

from sqlalchemy import select

from hah_erp.core.security import hash_password
from hah_erp.database import async_session_factory, engine
from hah_erp.models.user import User, UserRole


async def create_admin(email: str, first_name: str, last_name: str, password: str) -> None:
    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            print(f"Ya existe un usuario con el email {email}")
            return

        db.add(
            User(
                email=email,
                hashed_password=hash_password(password),
                role=UserRole.ADMIN,
                first_name=first_name,
                last_name=last_name,
            )
        )
        await db.commit()
    await engine.dispose()
    print(f"Administrador {email} creado.")


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)
    password = getpass.getpass("Contraseña (mínimo 8 caracteres): ")
    if len(password) < 8:
        print("La contraseña debe tener al menos 8 caracteres")
        sys.exit(1)
    asyncio.run(create_admin(sys.argv[1], sys.argv[2], sys.argv[3], password))
