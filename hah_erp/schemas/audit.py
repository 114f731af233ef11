"""
Schemas del audit log.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from hah_erp.schemas.common import PageMeta


class AuditLogResponse(BaseModel):
    id: UUID
    user_id: UUID | None = None
    entity: str
    entity_id: str
    action: str
    old_data: dict | None = None
    new_data: dict | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditLogListResponse(PageMeta):
    items: list[AuditLogResponse]
