"""
Fixtures compartidas para Pytest.
Configura base de datos de test (SQLite async), almacenamiento local
temporal y clientes HTTP autenticados.
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from uuid import uuid4

# La configuración se lee al importar hah_erp: definir el entorno antes
_TMP_DIR = Path(tempfile.mkdtemp(prefix="hah_erp_tests_"))
os.environ.update(
    {
        "APP_ENV": "test",
        "DEBUG": "false",
        "JWT_ALGORITHM": "HS256",
        "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256-signing",
        "STORAGE_BACKEND": "local",
        "STORAGE_LOCAL_DIR": str(_TMP_DIR / "storage"),
        "PUBLIC_BASE_URL": "http://test",
    }
)

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from hah_erp.auth.jwt import create_access_token  # noqa: E402
from hah_erp.core.security import hash_password  # noqa: E402
from hah_erp.database import Base, get_db  # noqa: E402
from hah_erp.main import app  # noqa: E402
from hah_erp.models.patient import Patient  # noqa: E402
from hah_erp.models.user import User, UserRole  # noqa: E402

TEST_DATABASE_URL = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)

ADMIN_PASSWORD = "TestPass123"


@pytest_asyncio.fixture(autouse=True)
async def setup_database():
    """Crea y destruye las tablas para cada test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provee una sesión de DB de test."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP de test que usa la DB de test."""

    async def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, email: str, role: UserRole) -> User:
    user = User(
        id=uuid4(),
        email=email,
        hashed_password=hash_password(ADMIN_PASSWORD),
        role=role,
        first_name="Test",
        last_name=role.value.title(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Usuario administrador de test."""
    return await _create_user(db_session, "admin@test.com", UserRole.ADMIN)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    return _headers(test_user)


@pytest_asyncio.fixture
async def nurse_headers(db_session: AsyncSession) -> dict[str, str]:
    nurse = await _create_user(db_session, "nurse@test.com", UserRole.NURSE)
    return _headers(nurse)


@pytest_asyncio.fixture
async def test_patient(db_session: AsyncSession) -> Patient:
    patient = Patient(
        id=uuid4(),
        name="María Quispe",
        dni="45678912",
        email="maria@test.com",
        phone="987654321",
        age=72,
        gender="F",
        district="Miraflores",
    )
    db_session.add(patient)
    await db_session.commit()
    await db_session.refresh(patient)
    return patient
