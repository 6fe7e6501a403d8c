"""Permission audit log repository. Append-only; implements IPermissionAuditLogRepository."""

from __future__ import annotations

from typing import assert_never

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import (
    AllEntries,
    AuditEntryCreate,
    AuditEntryResult,
    AuditFilter,
    ByEntity,
    ByEntityId,
    ByEntityType,
)
from app.infrastructure.persistence.models.permission_audit_log import (
    PermissionAuditLog,
)
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid


def _orm_to_result(row: PermissionAuditLog) -> AuditEntryResult:
    """Map ORM to application DTO."""
    return AuditEntryResult(
        id=row.id,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        action=row.action,
        permission_code=row.permission_code,
        performed_by=row.performed_by,
        role_id=row.role_id,
        metadata=dict(row.audit_metadata or {}),
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        request_id=row.request_id,
        created_at=row.created_at,
    )


def apply_audit_filter(
    stmt: Select[tuple[PermissionAuditLog]], audit_filter: AuditFilter
) -> Select[tuple[PermissionAuditLog]]:
    """Translate a filter variant into WHERE criteria (exhaustive over AuditFilter)."""
    if isinstance(audit_filter, AllEntries):
        return stmt
    if isinstance(audit_filter, ByEntityType):
        return stmt.where(PermissionAuditLog.entity_type == audit_filter.entity_type.value)
    if isinstance(audit_filter, ByEntityId):
        return stmt.where(PermissionAuditLog.entity_id == audit_filter.entity_id)
    if isinstance(audit_filter, ByEntity):
        return stmt.where(
            PermissionAuditLog.entity_type == audit_filter.entity_type.value,
            PermissionAuditLog.entity_id == audit_filter.entity_id,
        )
    assert_never(audit_filter)


class PermissionAuditLogRepository:
    """Append-only audit repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_entry(self, entry: AuditEntryCreate) -> AuditEntryResult:
        """Append one audit row; return created record.

        created_at is taken from the application clock rather than now(), which
        is fixed for the whole transaction and would tie rows written together.
        """
        row = PermissionAuditLog(
            id=generate_cuid(),
            entity_type=entry.entity_type.value,
            entity_id=entry.entity_id,
            action=entry.action.value,
            permission_code=entry.permission_code,
            role_id=entry.role_id,
            performed_by=entry.performed_by,
            audit_metadata=dict(entry.metadata),
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            request_id=entry.request_id,
            created_at=utc_now(),
        )
        self.db.add(row)
        await self.db.flush()
        return _orm_to_result(row)

    async def list_entries(
        self, audit_filter: AuditFilter, limit: int
    ) -> list[AuditEntryResult]:
        """List rows matching the filter (newest first)."""
        stmt = apply_audit_filter(select(PermissionAuditLog), audit_filter)
        stmt = stmt.order_by(
            PermissionAuditLog.created_at.desc(), PermissionAuditLog.id.desc()
        ).limit(limit)
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()]
