"""
Servicio de Audit Log — registra las operaciones sensibles.
INSERT-only, nunca se modifica ni elimina.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.core.pagination import count_rows, page_offset, page_payload
from hah_erp.models.audit_log import AuditLog


def _sanitize_value(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return _sanitize_for_json(value)
    if isinstance(value, list):
        return [_sanitize_value(item) for item in value]
    return value


def _sanitize_for_json(data: dict | None) -> dict | None:
    """Convierte tipos no serializables (date, UUID, Decimal, Enum) a JSON."""
    if data is None:
        return None
    return {key: _sanitize_value(value) for key, value in data.items()}


async def log_action(
    db: AsyncSession,
    *,
    user_id: UUID | None,
    entity: str,
    entity_id: str,
    action: str,
    old_data: dict | None = None,
    new_data: dict | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> AuditLog:
    """Inserta un registro de auditoría inmutable."""
    entry = AuditLog(
        user_id=user_id,
        entity=entity,
        entity_id=str(entity_id),
        action=action,
        old_data=_sanitize_for_json(old_data),
        new_data=_sanitize_for_json(new_data),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(entry)
    await db.flush()
    return entry


async def get_audit_logs(
    db: AsyncSession,
    *,
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    entity: str | None = None,
    search: str | None = None,
) -> dict:
    """Consulta paginada del audit log, más recientes primero."""
    query = select(AuditLog)

    if action:
        query = query.where(AuditLog.action == action)
    if entity:
        query = query.where(AuditLog.entity == entity)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            AuditLog.entity.ilike(pattern)
            | AuditLog.entity_id.ilike(pattern)
            | AuditLog.action.ilike(pattern)
        )

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(AuditLog.created_at.desc())
        .offset(page_offset(page, size))
        .limit(size)
    )
    return page_payload(list(result.scalars().all()), total, page, size)
