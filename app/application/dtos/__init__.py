"""Application DTOs (no ORM dependency)."""

from app.application.dtos.audit_log import (
    AllEntries,
    AuditEntryCreate,
    AuditEntryResult,
    AuditFilter,
    ByEntity,
    ByEntityId,
    ByEntityType,
    build_audit_filter,
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
    UserPermissionsView,
)
from app.application.dtos.role import RoleResult
from app.application.dtos.role_permission import (
    RoleBindingResult,
    RoleWithBindings,
    SetBindingsResult,
)
from app.application.dtos.user import UserResult

__all__ = [
    "AllEntries",
    "AuditEntryCreate",
    "AuditEntryResult",
    "AuditFilter",
    "ByEntity",
    "ByEntityId",
    "ByEntityType",
    "OverrideResult",
    "OverrideUpdate",
    "PermissionCreate",
    "PermissionResult",
    "PermissionUpdate",
    "PermissionUsage",
    "RoleBindingResult",
    "RoleResult",
    "RoleWithBindings",
    "SetBindingsResult",
    "UserPermissionsView",
    "UserResult",
    "build_audit_filter",
]
