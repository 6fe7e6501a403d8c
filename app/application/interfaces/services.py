"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import AuditAction, AuditEntityType

if TYPE_CHECKING:
    from app.application.dtos.audit_log import AuditEntryResult, AuditFilter


# Audit logger interface
class IAuditLogger(Protocol):
    """Protocol for recording RBAC mutations inside the caller's transaction."""

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
        """Append one audit row. Raises StorageException outside a transaction."""

    async def list(
        self, audit_filter: AuditFilter, limit: int | None = None
    ) -> list[AuditEntryResult]:
        """Return rows matching the filter, newest first."""


# Permission resolver interface
class IPermissionResolver(Protocol):
    """Protocol for read-time authorization decisions (used by AuthorizationService)."""

    async def has_permission(self, user_id: str, code: str) -> bool:
        """Return whether the user currently holds the permission code."""

    async def has_any_permission(self, user_id: str, codes: list[str]) -> bool:
        """Return True on the first code the user holds; False for an empty list."""

    async def has_all_permissions(self, user_id: str, codes: list[str]) -> bool:
        """Return False on the first code the user lacks; True for an empty list."""

    async def get_effective_permissions(self, user_id: str) -> set[str]:
        """Return the resolved set of permission codes for the user."""
