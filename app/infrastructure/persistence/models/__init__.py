"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    UserAuditMixin,
)
from app.infrastructure.persistence.models.permission import Permission
from app.infrastructure.persistence.models.permission_audit_log import (
    PermissionAuditLog,
)
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.models.role_permission import RolePermission
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.models.user_permission_override import (
    UserPermissionOverride,
)

__all__ = [
    "CuidMixin",
    "Permission",
    "PermissionAuditLog",
    "Role",
    "RolePermission",
    "TimestampMixin",
    "User",
    "UserAuditMixin",
    "UserPermissionOverride",
]
