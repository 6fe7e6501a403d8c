"""Application layer: interfaces, DTOs and services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, audit logger).
"""

from app.application.interfaces import (
    IAuditLogger,
    IPermissionAuditLogRepository,
    IPermissionOverrideRepository,
    IPermissionRepository,
    IPermissionResolver,
    IRolePermissionRepository,
    IRoleRepository,
    IUserRepository,
)
from app.application.services import (
    AuthorizationService,
    OverrideService,
    PermissionResolver,
    PermissionService,
    RoleBindingService,
    RoleService,
)

__all__ = [
    "AuthorizationService",
    "IAuditLogger",
    "IPermissionAuditLogRepository",
    "IPermissionOverrideRepository",
    "IPermissionRepository",
    "IPermissionResolver",
    "IRolePermissionRepository",
    "IRoleRepository",
    "IUserRepository",
    "OverrideService",
    "PermissionResolver",
    "PermissionService",
    "RoleBindingService",
    "RoleService",
]
