"""Request/response schemas for the permission audit log API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditLogEntryResponse(BaseModel):
    """Single permission audit entry (read)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    entity_type: str
    entity_id: str
    action: str
    permission_code: str | None = None
    role_id: str | None = None
    performed_by: str | None = None
    metadata: dict[str, Any] = {}
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Newest-first audit entries and the limit that was applied."""

    items: list[AuditLogEntryResponse]
    limit: int
