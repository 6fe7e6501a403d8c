"""Permission audit logger: one append-only row per RBAC mutation.

The row is written through the caller's session, so it commits or rolls back
together with the mutation it documents. Failures are never swallowed: an
audit write that fails makes the whole mutation fail.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit_log import (
    AuditEntryCreate,
    AuditEntryResult,
    AuditFilter,
)
from app.application.interfaces.repositories import IPermissionAuditLogRepository
from app.core.config import get_settings
from app.domain.exceptions import StorageException
from app.infrastructure.persistence.repositories.permission_audit_log_repo import (
    PermissionAuditLogRepository,
)
from app.shared.context import get_request_context
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class PermissionAuditLogger:
    """Records RBAC mutations and serves newest-first audit queries (IAuditLogger)."""

    def __init__(
        self,
        db: AsyncSession,
        repo: IPermissionAuditLogRepository | None = None,
        *,
        default_limit: int | None = None,
        max_limit: int | None = None,
    ) -> None:
        if default_limit is None or max_limit is None:
            settings = get_settings()
            if default_limit is None:
                default_limit = settings.audit_log_default_limit
            if max_limit is None:
                max_limit = settings.audit_log_max_limit
        self._db = db
        self._repo = repo or PermissionAuditLogRepository(db)
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def record(
        self,
        entity_type: AuditEntityType,
        entity_id: str,
        action: AuditAction,
        permission_code: str | None,
        performed_by: str | None,
        metadata: dict[str, Any] | None = None,
        role_id: str | None = None,
    ) -> AuditEntryResult:
        """Append one row inside the caller's transaction.

        Request id, client IP and user agent come from the request context.

        Raises:
            StorageException: If the session is not inside a transaction.
        """
        if not self._db.in_transaction():
            logger.error(
                "Audit write outside a transaction: action=%s entity=%s:%s",
                action.value,
                entity_type.value,
                entity_id,
            )
            raise StorageException("audit write outside transaction")
        ctx = get_request_context()
        entry = AuditEntryCreate(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            permission_code=permission_code,
            performed_by=performed_by,
            role_id=role_id,
            metadata=metadata or {},
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
            request_id=ctx.request_id,
        )
        return await self._repo.create_entry(entry)

    def clamp_limit(self, limit: int | None) -> int:
        """Return limit bounded to [1, max_limit]; None means the default."""
        if limit is None:
            return self._default_limit
        return max(1, min(limit, self._max_limit))

    async def list(
        self, audit_filter: AuditFilter, limit: int | None = None
    ) -> list[AuditEntryResult]:
        """Return rows matching the filter, newest first."""
        return await self._repo.list_entries(audit_filter, self.clamp_limit(limit))
