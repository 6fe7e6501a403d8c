"""Application services: catalog, roles, bindings, overrides, resolution, authorization."""

from app.application.services.authorization_service import AuthorizationService
from app.application.services.override_service import OverrideService
from app.application.services.permission_resolver import PermissionResolver
from app.application.services.permission_service import (
    PermissionService,
    group_by_category,
)
from app.application.services.role_binding_service import RoleBindingService
from app.application.services.role_service import RoleService

__all__ = [
    "AuthorizationService",
    "OverrideService",
    "PermissionResolver",
    "PermissionService",
    "RoleBindingService",
    "RoleService",
    "group_by_category",
]
