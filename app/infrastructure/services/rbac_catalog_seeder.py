"""Default workshop permission catalog and system roles.

Seeding is idempotent: existing permissions and roles are kept, missing ones
are created, and missing bindings of system roles are added. Every change goes
through the regular services, so each one writes its audit row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.permission_service import PermissionService
from app.application.services.role_binding_service import RoleBindingService
from app.application.services.role_service import RoleService
from app.infrastructure.persistence.repositories import (
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
)
from app.infrastructure.services.permission_audit_logger import PermissionAuditLogger
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RoleData(TypedDict):
    """Role configuration for default roles."""

    description: str
    permissions: list[str]


_VERBS = {
    "view": "View",
    "create": "Create",
    "update": "Update",
    "delete": "Delete",
    "manage": "Manage",
}


def _crud(
    category: str, label: str, actions: tuple[str, ...]
) -> list[tuple[str, str, str, str | None]]:
    return [
        (f"{category}.{action}", f"{_VERBS[action]} {label}", category, None)
        for action in actions
    ]


_CRUD = ("view", "create", "update", "delete")

# (code, name, category, description)
SYSTEM_PERMISSIONS: list[tuple[str, str, str, str | None]] = [
    *_crud("customers", "customers", _CRUD),
    *_crud("vehicles", "vehicles", _CRUD),
    *_crud("appointments", "appointments", _CRUD),
    *_crud("jobcards", "job cards", _CRUD),
    *_crud("invoices", "invoices", _CRUD),
    *_crud("rentals", "rentals", _CRUD),
    *_crud("marketing", "marketing campaigns", ("view", "manage")),
    ("reports.view", "View reports", "reports", "View financial and operational reports"),
    ("reports.export", "Export reports", "reports", "Export reports to CSV"),
    *_crud("users", "users", _CRUD),
    (
        "users.permissions.view",
        "View user permissions",
        "users",
        "View effective permissions and overrides of any user",
    ),
    (
        "users.permissions.manage",
        "Manage user permissions",
        "users",
        "Grant or deny permissions for individual users",
    ),
    ("roles.view", "View roles", "roles", "View roles and their permissions"),
    ("roles.manage", "Manage roles", "roles", "Create, edit and delete roles and their bindings"),
    ("permissions.view", "View permissions", "permissions", "View the permission catalog"),
    ("permissions.manage", "Manage permissions", "permissions", "Edit the permission catalog"),
    ("audit.view", "View audit log", "audit", "View the permission audit trail"),
]

ALL_PERMISSION_CODES: list[str] = [p[0] for p in SYSTEM_PERMISSIONS]
_OPERATIONAL_CATEGORIES = frozenset(
    {
        "customers",
        "vehicles",
        "appointments",
        "jobcards",
        "invoices",
        "rentals",
        "marketing",
        "reports",
    }
)

DEFAULT_ROLES: dict[str, RoleData] = {
    "admin": {
        "description": "Full system access with all permissions",
        "permissions": ALL_PERMISSION_CODES,
    },
    "manager": {
        "description": "Runs the workshop: all operational records, reports and role visibility",
        "permissions": [
            code
            for code in ALL_PERMISSION_CODES
            if code.split(".", 1)[0] in _OPERATIONAL_CATEGORIES
        ]
        + ["users.view", "users.permissions.view", "roles.view", "permissions.view", "audit.view"],
    },
    "mechanic": {
        "description": "Works job cards and looks up vehicles",
        "permissions": [
            "jobcards.view",
            "jobcards.update",
            "vehicles.view",
            "appointments.view",
            "customers.view",
        ],
    },
    "receptionist": {
        "description": "Front desk: customers, vehicles, appointments and invoices",
        "permissions": [
            "customers.view",
            "customers.create",
            "customers.update",
            "vehicles.view",
            "vehicles.create",
            "vehicles.update",
            "appointments.view",
            "appointments.create",
            "appointments.update",
            "appointments.delete",
            "jobcards.view",
            "jobcards.create",
            "invoices.view",
            "invoices.create",
            "rentals.view",
            "rentals.create",
        ],
    },
    "customer": {
        "description": "Self-service portal access",
        "permissions": [
            "appointments.view",
            "appointments.create",
            "invoices.view",
            "rentals.view",
        ],
    },
}


@dataclass
class SeedResult:
    """What one seeding run created."""

    permissions_created: list[str] = field(default_factory=list)
    roles_created: list[str] = field(default_factory=list)
    bindings_added: dict[str, int] = field(default_factory=dict)


class RbacCatalogSeeder:
    """Create the default catalog and system roles in the caller's transaction."""

    def __init__(self, db: AsyncSession) -> None:
        permission_repo = PermissionRepository(db)
        role_repo = RoleRepository(db)
        role_permission_repo = RolePermissionRepository(db)
        audit = PermissionAuditLogger(db)
        self._permission_repo = permission_repo
        self._role_repo = role_repo
        self._permissions = PermissionService(permission_repo, audit)
        self._roles = RoleService(
            role_repo, permission_repo, role_permission_repo, UserRepository(db), audit
        )
        self._bindings = RoleBindingService(
            role_repo, permission_repo, role_permission_repo, audit
        )

    async def seed(self, actor_id: str | None = None) -> SeedResult:
        result = SeedResult()
        ids_by_code: dict[str, str] = {}
        for code, name, category, description in SYSTEM_PERMISSIONS:
            perm = await self._permission_repo.get_by_code(code)
            if perm is None:
                perm = await self._permissions.create_permission(
                    code=code,
                    name=name,
                    category=category,
                    description=description,
                    is_system=True,
                    actor_id=actor_id,
                )
                result.permissions_created.append(code)
            ids_by_code[code] = perm.id

        for role_name, data in DEFAULT_ROLES.items():
            wanted = [ids_by_code[c] for c in data["permissions"]]
            role = await self._role_repo.get_by_name(role_name)
            if role is None:
                await self._roles.create_role(
                    name=role_name,
                    description=data["description"],
                    permission_ids=wanted,
                    actor_id=actor_id,
                    is_system=True,
                )
                result.roles_created.append(role_name)
                result.bindings_added[role_name] = len(wanted)
                continue
            added = await self._bindings.bulk_add(
                role.id, wanted, granted_by=actor_id, idempotent=True
            )
            if added:
                result.bindings_added[role_name] = len(added)

        logger.info(
            "RBAC catalog seeded: permissions=%d roles=%d",
            len(result.permissions_created),
            len(result.roles_created),
        )
        return result
