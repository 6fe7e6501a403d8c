"""Pydantic request/response schemas for the API."""

from app.schemas.audit_log import AuditLogEntryResponse, AuditLogListResponse
from app.schemas.health import HealthResponse
from app.schemas.permission import (
    PermissionCreateRequest,
    PermissionListResponse,
    PermissionResponse,
    PermissionUpdateRequest,
)
from app.schemas.role import (
    RoleBindingResponse,
    RoleCreateRequest,
    RoleDetailResponse,
    RolePermissionAssign,
    RolePermissionsAssignedResponse,
    RolePermissionsReplace,
    RolePermissionsReplacedResponse,
    RoleResponse,
    RoleUpdate,
)
from app.schemas.user_permission import (
    OverrideCreateRequest,
    OverrideResponse,
    OverridesRemovedResponse,
    OverrideUpdateRequest,
    PermissionCheckResponse,
    UserPermissionsResponse,
)

__all__ = [
    "AuditLogEntryResponse",
    "AuditLogListResponse",
    "HealthResponse",
    "OverrideCreateRequest",
    "OverrideResponse",
    "OverrideUpdateRequest",
    "OverridesRemovedResponse",
    "PermissionCheckResponse",
    "PermissionCreateRequest",
    "PermissionListResponse",
    "PermissionResponse",
    "PermissionUpdateRequest",
    "RoleBindingResponse",
    "RoleCreateRequest",
    "RoleDetailResponse",
    "RolePermissionAssign",
    "RolePermissionsAssignedResponse",
    "RolePermissionsReplace",
    "RolePermissionsReplacedResponse",
    "RoleResponse",
    "RoleUpdate",
    "UserPermissionsResponse",
]
