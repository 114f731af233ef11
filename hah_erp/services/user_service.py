"""
Servicio de usuarios del staff (administración de cuentas).
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.exceptions import ConflictException, NotFoundException
from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.core.security import hash_password
from hah_erp.models.user import User, UserRole
from hah_erp.schemas.user import UserCreate, UserUpdate
from hah_erp.services.audit_service import log_action


async def list_users(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    role: UserRole | None = None,
    is_active: bool | None = None,
) -> dict:
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if is_active is not None:
        query = query.where(User.is_active.is_(is_active))

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(User.last_name, User.first_name)
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)


async def get_user(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundException("Usuario")
    return user


async def create_user(
    db: AsyncSession,
    admin: User,
    data: UserCreate,
    ip_address: str | None = None,
) -> User:
    existing = await db.execute(select(User).where(User.email == data.email))
    if existing.scalar_one_or_none():
        raise ConflictException("Ya existe un usuario con ese email")

    user = User(
        email=data.email,
        hashed_password=hash_password(data.password),
        role=data.role,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    await log_action(
        db,
        user_id=admin.id,
        entity="user",
        entity_id=str(user.id),
        action="create",
        new_data={"email": user.email, "role": user.role},
        ip_address=ip_address,
    )
    return user


async def update_user(
    db: AsyncSession,
    admin: User,
    user_id: UUID,
    data: UserUpdate,
    ip_address: str | None = None,
) -> User:
    user = await get_user(db, user_id)

    update_data = data.model_dump(exclude_unset=True)
    password = update_data.pop("password", None)
    for key, value in update_data.items():
        setattr(user, key, value)
    if password:
        user.hashed_password = hash_password(password)

    await db.flush()
    await db.refresh(user)

    await log_action(
        db,
        user_id=admin.id,
        entity="user",
        entity_id=str(user.id),
        action="update",
        new_data={**update_data, "password_changed": bool(password)},
        ip_address=ip_address,
    )
    return user
