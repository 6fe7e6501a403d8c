"""Presentation-layer dependency injection (composition root).

Routes depend only on these; services and repositories are built here from
infrastructure implementations.
"""

from app.api.v1.dependencies.db import get_audit_logger, get_audit_reader
from app.api.v1.dependencies.rbac import (
    get_authorization_service,
    get_binding_reader,
    get_binding_service,
    get_override_service,
    get_permission_reader,
    get_permission_resolver,
    get_permission_service,
    get_role_reader,
    get_role_service,
    get_user_permissions_service,
    get_user_repo,
)
from app.api.v1.dependencies.user_rbac import (
    get_current_user,
    require_all_permissions,
    require_any_permission,
    require_permission,
    require_role_or_permission,
    require_self_or_permission,
)

__all__ = [
    "get_audit_logger",
    "get_audit_reader",
    "get_authorization_service",
    "get_binding_reader",
    "get_binding_service",
    "get_current_user",
    "get_override_service",
    "get_permission_reader",
    "get_permission_resolver",
    "get_permission_service",
    "get_role_reader",
    "get_role_service",
    "get_user_permissions_service",
    "get_user_repo",
    "require_all_permissions",
    "require_any_permission",
    "require_permission",
    "require_role_or_permission",
    "require_self_or_permission",
]
