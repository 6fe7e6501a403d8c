"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from app.application.dtos.audit_log import (
        AuditEntryCreate,
        AuditEntryResult,
        AuditFilter,
    )
    from app.application.dtos.permission import (
        PermissionCreate,
        PermissionResult,
        PermissionUpdate,
        PermissionUsage,
    )
    from app.application.dtos.permission_override import (
        OverrideResult,
        OverrideUpdate,
    )
    from app.application.dtos.role import RoleResult
    from app.application.dtos.role_permission import RoleBindingResult
    from app.application.dtos.user import UserResult


# Permission catalog
class IPermissionRepository(Protocol):
    """Protocol for the permission catalog store (DIP)."""

    async def get_by_id(self, permission_id: str) -> PermissionResult | None:
        """Return permission by id."""

    async def get_by_code(self, code: str) -> PermissionResult | None:
        """Return permission by its unique code."""

    async def lock_for_update(self, permission_id: str) -> PermissionResult | None:
        """Return the permission row-locked for the current transaction, or None."""

    async def lock_for_share(self, permission_ids: list[str]) -> list[PermissionResult]:
        """Return the existing permissions share-locked against deletion."""

    async def list_all(self, category: str | None = None) -> list[PermissionResult]:
        """Return permissions ordered by (category, code), optionally one category."""

    async def create_permission(self, data: PermissionCreate) -> PermissionResult:
        """Insert a permission. Raises DuplicatePermissionCodeException."""

    async def update_permission(
        self, permission_id: str, data: PermissionUpdate
    ) -> PermissionResult | None:
        """Update name/description/category. Returns None if not found."""

    async def delete_permission(self, permission_id: str) -> bool:
        """Delete permission. Returns True if a row was removed.

        Raises PermissionInUseException if a binding or override still references it.
        """

    async def get_usage(self, permission_id: str) -> PermissionUsage:
        """Count role bindings and user overrides referencing the permission."""


# Role store
class IRoleRepository(Protocol):
    """Protocol for role definitions (DIP)."""

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        """Return role by id."""

    async def get_by_name(self, name: str) -> RoleResult | None:
        """Return role by its unique name."""

    async def lock_for_update(self, role_id: str) -> RoleResult | None:
        """Return role by id holding a row lock until the transaction ends."""

    async def list_all(self, active_only: bool = False) -> list[RoleResult]:
        """Return roles ordered by name."""

    async def create_role(
        self,
        name: str,
        description: str | None,
        is_system: bool = False,
        created_by: str | None = None,
    ) -> RoleResult:
        """Insert a role. Raises DuplicateRoleNameException."""

    async def update_role(
        self,
        role_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
        updated_by: str | None = None,
    ) -> RoleResult | None:
        """Update the given fields. Returns None if not found."""

    async def delete_role(self, role_id: str) -> bool:
        """Delete role and (by cascade) its bindings. Returns True if removed."""


# Role bindings
class IRolePermissionRepository(Protocol):
    """Protocol for role-permission bindings (DIP)."""

    async def get_bindings(self, role_id: str) -> list[RoleBindingResult]:
        """Return bindings joined with permission metadata, ordered by (category, code)."""

    async def get_permission_ids(self, role_id: str) -> set[str]:
        """Return ids of permissions bound to the role."""

    async def role_name_has_permission(self, role_name: str, permission_id: str) -> bool:
        """Return True if the role called role_name is bound to permission_id."""

    async def get_codes_for_role_name(self, role_name: str) -> set[str]:
        """Return codes bound to the role called role_name (empty if no such role)."""

    async def add(self, role_id: str, permission_id: str, granted_by: str | None) -> None:
        """Insert one binding. Raises DuplicateAssignmentException."""

    async def add_many(
        self, role_id: str, permission_ids: list[str], granted_by: str | None
    ) -> None:
        """Insert bindings in one statement. Raises DuplicateAssignmentException."""

    async def remove(self, role_id: str, permission_id: str) -> bool:
        """Delete one binding. Returns True if a row was removed."""

    async def replace_all(
        self, role_id: str, permission_ids: list[str], granted_by: str | None
    ) -> tuple[list[str], list[str]]:
        """Atomically replace the role's bindings. Returns (added_ids, removed_ids)."""


# Overrides
class IPermissionOverrideRepository(Protocol):
    """Protocol for per-user permission overrides (DIP)."""

    async def get_by_id(self, override_id: str) -> OverrideResult | None:
        """Return override by id (is_expired left False; callers annotate)."""

    async def list_for_pair(self, user_id: str, permission_id: str) -> list[OverrideResult]:
        """Return overrides for (user, permission), newest first."""

    async def list_for_user(self, user_id: str) -> list[OverrideResult]:
        """Return every override of the user, newest first, including expired ones."""

    async def create_override(
        self,
        user_id: str,
        permission_id: str,
        granted: bool,
        reason: str | None,
        expires_at: datetime | None,
        granted_by: str | None,
    ) -> OverrideResult:
        """Insert one override."""

    async def update_override(
        self, override_id: str, data: OverrideUpdate
    ) -> OverrideResult | None:
        """Update granted/reason/expiry. Returns None if not found."""

    async def delete_for_pair(self, user_id: str, permission_id: str) -> int:
        """Delete every override for (user, permission). Returns rows removed."""

    async def delete_for_user(self, user_id: str) -> int:
        """Delete every override of the user. Returns rows removed."""


# Audit trail
class IPermissionAuditLogRepository(Protocol):
    """Protocol for the append-only permission audit table (DIP)."""

    async def create_entry(self, entry: AuditEntryCreate) -> AuditEntryResult:
        """Append one row."""

    async def list_entries(
        self, audit_filter: AuditFilter, limit: int
    ) -> list[AuditEntryResult]:
        """Return rows matching the filter, newest first."""


# Identity collaborator
class IUserRepository(Protocol):
    """Protocol for the user-identity store the engine reads from (DIP)."""

    async def get_by_id(self, user_id: str) -> UserResult | None:
        """Return user by id."""

    async def get_role_name(self, user_id: str) -> str | None:
        """Return the user's current role name, or None if unknown or unassigned."""

    async def count_users_with_role(self, role_name: str) -> int:
        """Return how many users currently hold role_name."""
