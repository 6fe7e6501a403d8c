"""Shared enumerations for the RBAC service.

Cross-cutting enums used by application and infrastructure (audit trail
entity scopes and actions). Domain error kinds live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AuditEntityType(_ValuesMixin, str, Enum):
    """Entity a permission audit row is scoped to."""

    ROLE = "role"
    USER = "user"
    PERMISSION = "permission"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types for RBAC mutations (one row per successful mutation)."""

    PERMISSION_CREATED = "permission_created"
    PERMISSION_UPDATED = "permission_updated"
    PERMISSION_DELETED = "permission_deleted"
    ROLE_CREATED = "role_created"
    ROLE_UPDATED = "role_updated"
    ROLE_ACTIVATED = "role_activated"
    ROLE_DEACTIVATED = "role_deactivated"
    ROLE_DELETED = "role_deleted"
    ROLE_PERMISSION_ADDED = "role_permission_added"
    ROLE_PERMISSIONS_ADDED = "role_permissions_added"
    ROLE_PERMISSION_REMOVED = "role_permission_removed"
    ROLE_PERMISSIONS_SET = "role_permissions_set"
    PERMISSION_GRANTED = "permission_granted"
    PERMISSION_REVOKED = "permission_revoked"
    PERMISSION_OVERRIDE_UPDATED = "permission_override_updated"
    PERMISSION_OVERRIDE_REMOVED = "permission_override_removed"
    PERMISSION_OVERRIDES_CLEARED = "permission_overrides_cleared"


class CheckMode(_ValuesMixin, str, Enum):
    """How a multi-code permission check combines results."""

    ANY = "any"
    ALL = "all"
