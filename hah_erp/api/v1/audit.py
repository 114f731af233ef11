"""
Consulta del audit log (solo administradores).
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hah_erp.auth.dependencies import require_permission
from hah_erp.database import get_db
from hah_erp.models.user import User
from hah_erp.schemas.audit import AuditLogListResponse
from hah_erp.services import audit_service

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    entity: str | None = Query(None, description="patient, lab_order, user, ..."),
    action: str | None = Query(None, description="create, update, delete, login, ..."),
    search: str | None = Query(None),
    user: User = Depends(require_permission("audit_log", "read")),
    db: AsyncSession = Depends(get_db),
):
    """Entradas del audit log, más recientes primero."""
    return await audit_service.get_audit_logs(
        db, page=page, size=size, action=action, entity=entity, search=search
    )
