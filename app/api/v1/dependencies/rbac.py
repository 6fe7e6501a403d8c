"""RBAC repositories and services (composition root).

Read dependencies share the request's plain session (get_db); write
dependencies share the transactional session (get_db_transactional), so a
mutation and its audit row commit or roll back together.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services import (
    AuthorizationService,
    OverrideService,
    PermissionResolver,
    PermissionService,
    RoleBindingService,
    RoleService,
)
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    PermissionOverrideRepository,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
)
from app.infrastructure.services import PermissionAuditLogger

from . import db as db_deps


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    """User repository for read operations (current user, role lookups)."""
    return UserRepository(db)


def get_permission_resolver(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PermissionResolver:
    """Resolver over the read session. Decisions are never cached."""
    return PermissionResolver(
        permission_repo=PermissionRepository(db),
        override_repo=PermissionOverrideRepository(db),
        role_permission_repo=RolePermissionRepository(db),
        user_repo=UserRepository(db),
    )


def get_authorization_service(
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
) -> AuthorizationService:
    """Authorization service used by route guards."""
    return AuthorizationService(permission_resolver=resolver)


def get_permission_reader(
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_reader)],
) -> PermissionService:
    """Permission service for list/get."""
    return PermissionService(PermissionRepository(db), audit)


def get_permission_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_logger)],
) -> PermissionService:
    """Permission service for create/update/delete (transactional)."""
    return PermissionService(PermissionRepository(db), audit)


def _role_service(db: AsyncSession, audit: PermissionAuditLogger) -> RoleService:
    return RoleService(
        role_repo=RoleRepository(db),
        permission_repo=PermissionRepository(db),
        role_permission_repo=RolePermissionRepository(db),
        user_repo=UserRepository(db),
        audit_logger=audit,
    )


def get_role_reader(
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_reader)],
) -> RoleService:
    """Role service for list/get/detail."""
    return _role_service(db, audit)


def get_role_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_logger)],
) -> RoleService:
    """Role service for create/update/activate/delete (transactional)."""
    return _role_service(db, audit)


def _binding_service(
    db: AsyncSession, audit: PermissionAuditLogger
) -> RoleBindingService:
    return RoleBindingService(
        role_repo=RoleRepository(db),
        permission_repo=PermissionRepository(db),
        role_permission_repo=RolePermissionRepository(db),
        audit_logger=audit,
    )


def get_binding_reader(
    db: Annotated[AsyncSession, Depends(get_db)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_reader)],
) -> RoleBindingService:
    """Binding service for reads."""
    return _binding_service(db, audit)


def get_binding_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_logger)],
) -> RoleBindingService:
    """Binding service for add/remove/replace (transactional)."""
    return _binding_service(db, audit)


def _override_service(
    db: AsyncSession, audit: PermissionAuditLogger
) -> OverrideService:
    return OverrideService(
        permission_repo=PermissionRepository(db),
        override_repo=PermissionOverrideRepository(db),
        user_repo=UserRepository(db),
        audit_logger=audit,
    )


def get_override_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_logger)],
) -> OverrideService:
    """Override service for add/update/remove/clear (transactional)."""
    return _override_service(db, audit)


def get_user_permissions_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
    audit: Annotated[PermissionAuditLogger, Depends(db_deps.get_audit_reader)],
) -> AuthorizationService:
    """Authorization service wired for the per-user permission view."""
    return AuthorizationService(
        permission_resolver=resolver,
        user_repo=UserRepository(db),
        override_service=_override_service(db, audit),
    )
