"""DTOs for the permission audit trail.

Filters are a closed set of variants; repositories translate each variant into
one query with exhaustive handling.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.shared.enums import AuditAction, AuditEntityType


@dataclass(frozen=True)
class AuditEntryCreate:
    """Input for appending one audit row. Append-only; no update."""

    entity_type: AuditEntityType
    entity_id: str
    action: AuditAction
    permission_code: str | None
    performed_by: str | None
    role_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class AuditEntryResult:
    """Single audit row (read-model for list)."""

    id: str
    entity_type: str
    entity_id: str
    action: str
    permission_code: str | None
    performed_by: str | None
    role_id: str | None
    metadata: dict[str, Any]
    ip_address: str | None
    user_agent: str | None
    request_id: str | None
    created_at: datetime


@dataclass(frozen=True)
class AllEntries:
    """No filter: every entity type and id."""


@dataclass(frozen=True)
class ByEntityType:
    entity_type: AuditEntityType


@dataclass(frozen=True)
class ByEntityId:
    entity_id: str


@dataclass(frozen=True)
class ByEntity:
    """Both entity type and id (e.g. the history of one role)."""

    entity_type: AuditEntityType
    entity_id: str


AuditFilter = AllEntries | ByEntityType | ByEntityId | ByEntity


def build_audit_filter(
    entity_type: AuditEntityType | None = None, entity_id: str | None = None
) -> AuditFilter:
    """Build the filter variant for the given optional criteria."""
    if entity_type is not None and entity_id:
        return ByEntity(entity_type=entity_type, entity_id=entity_id)
    if entity_type is not None:
        return ByEntityType(entity_type=entity_type)
    if entity_id:
        return ByEntityId(entity_id=entity_id)
    return AllEntries()
