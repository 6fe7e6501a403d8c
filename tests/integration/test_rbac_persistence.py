"""Integration tests for RBAC repositories and services against Postgres.

Each test runs inside the db_session transaction and is rolled back.
"""

from datetime import timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from app.application.dtos.audit_log import ByEntity
from app.application.services import (
    OverrideService,
    PermissionResolver,
    PermissionService,
    RoleBindingService,
    RoleService,
)
from app.domain.exceptions import (
    DuplicateAssignmentException,
    DuplicatePermissionCodeException,
    DuplicateRoleNameException,
    PermissionInUseException,
    RoleInUseException,
)
from app.infrastructure.persistence.repositories import (
    PermissionOverrideRepository,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
    UserRepository,
)
from app.infrastructure.services import PermissionAuditLogger, RbacCatalogSeeder
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_cuid

pytestmark = pytest.mark.requires_db


def _unique(prefix: str) -> str:
    return f"{prefix}{generate_cuid()[:10]}"


class _Stack:
    """Repositories and services over one session."""

    def __init__(self, session) -> None:
        self.permissions = PermissionRepository(session)
        self.roles = RoleRepository(session)
        self.bindings = RolePermissionRepository(session)
        self.overrides = PermissionOverrideRepository(session)
        self.users = UserRepository(session)
        self.audit = PermissionAuditLogger(session)
        self.permission_svc = PermissionService(self.permissions, self.audit)
        self.role_svc = RoleService(
            self.roles, self.permissions, self.bindings, self.users, self.audit
        )
        self.binding_svc = RoleBindingService(
            self.roles, self.permissions, self.bindings, self.audit
        )
        self.override_svc = OverrideService(
            self.permissions, self.overrides, self.users, self.audit
        )
        self.resolver = PermissionResolver(
            self.permissions, self.overrides, self.bindings, self.users
        )


@pytest.fixture
def stack(db_session) -> _Stack:
    return _Stack(db_session)


async def _perm(stack: _Stack, category: str = "itest"):
    code = f"{category}.{_unique('p')}"
    return await stack.permission_svc.create_permission(
        code=code, name=code, category=category
    )


async def test_duplicate_permission_code_rejected(stack: _Stack) -> None:
    perm = await _perm(stack)
    with pytest.raises(DuplicatePermissionCodeException):
        await stack.permission_svc.create_permission(
            code=perm.code, name="again", category="itest"
        )
    # Session stays usable after the failed insert.
    assert await stack.permissions.get_by_code(perm.code) == perm


async def test_duplicate_role_name_rejected(stack: _Stack) -> None:
    name = _unique("role")
    await stack.role_svc.create_role(name=name)
    with pytest.raises(DuplicateRoleNameException):
        await stack.role_svc.create_role(name=name)


async def test_role_created_with_permissions_resolves_for_user(stack: _Stack) -> None:
    view = await _perm(stack)
    other = await _perm(stack)
    role = await stack.role_svc.create_role(
        name=_unique("role"), permission_ids=[view.id]
    )
    user = await stack.users.create_user(f"{_unique('u')}@example.com", role=role.name)
    assert await stack.resolver.has_permission(user.id, view.code) is True
    assert await stack.resolver.has_permission(user.id, other.code) is False
    assert await stack.resolver.get_effective_permissions(user.id) == {view.code}


async def test_strict_bulk_add_rejects_existing_binding(stack: _Stack) -> None:
    a = await _perm(stack)
    b = await _perm(stack)
    role = await stack.role_svc.create_role(name=_unique("role"), permission_ids=[a.id])
    with pytest.raises(DuplicateAssignmentException):
        await stack.binding_svc.bulk_add(role.id, [a.id, b.id])
    assert await stack.bindings.get_permission_ids(role.id) == {a.id}
    added = await stack.binding_svc.bulk_add(role.id, [a.id, b.id], idempotent=True)
    assert added == [b.id]


async def test_set_all_reports_diff_and_keeps_stable_bindings(stack: _Stack) -> None:
    a = await _perm(stack)
    b = await _perm(stack)
    c = await _perm(stack)
    role = await stack.role_svc.create_role(
        name=_unique("role"), permission_ids=[a.id, b.id]
    )
    before = {x.permission_id: x.granted_at for x in await stack.bindings.get_bindings(role.id)}
    result = await stack.binding_svc.set_all(role.id, [b.id, c.id, c.id])
    assert result.added_permission_ids == [c.id]
    assert result.removed_permission_ids == [a.id]
    after = {x.permission_id: x.granted_at for x in result.bindings}
    assert set(after) == {b.id, c.id}
    assert after[b.id] == before[b.id]


async def test_delete_role_held_by_user_is_refused(stack: _Stack) -> None:
    perm = await _perm(stack)
    role = await stack.role_svc.create_role(name=_unique("role"), permission_ids=[perm.id])
    await stack.users.create_user(f"{_unique('u')}@example.com", role=role.name)
    before = await stack.bindings.get_bindings(role.id)
    with pytest.raises(RoleInUseException):
        await stack.role_svc.delete_role(role.id)
    assert await stack.roles.get_by_id(role.id) is not None
    assert await stack.bindings.get_bindings(role.id) == before


async def test_referenced_permission_delete_refused_by_foreign_key(stack: _Stack) -> None:
    bound = await _perm(stack)
    overridden = await _perm(stack)
    role = await stack.role_svc.create_role(name=_unique("role"), permission_ids=[bound.id])
    user = await stack.users.create_user(f"{_unique('u')}@example.com", role=role.name)
    await stack.override_svc.add_override(user.id, overridden.code, False)
    with pytest.raises(PermissionInUseException) as exc_info:
        await stack.permissions.delete_permission(bound.id)
    assert exc_info.value.details["role_count"] == 1
    with pytest.raises(PermissionInUseException) as exc_info:
        await stack.permissions.delete_permission(overridden.id)
    assert exc_info.value.details["override_count"] == 1
    assert await stack.permissions.get_by_id(bound.id) == bound
    assert await stack.bindings.get_permission_ids(role.id) == {bound.id}


async def test_deny_override_beats_role_until_expiry(stack: _Stack) -> None:
    perm = await _perm(stack)
    role = await stack.role_svc.create_role(name=_unique("role"), permission_ids=[perm.id])
    user = await stack.users.create_user(f"{_unique('u')}@example.com", role=role.name)
    expires = utc_now() + timedelta(hours=1)
    await stack.override_svc.add_override(
        user.id, perm.code, granted=False, reason="suspended", expires_at=expires
    )
    assert await stack.resolver.has_permission(user.id, perm.code) is False
    later = PermissionResolver(
        stack.permissions,
        stack.overrides,
        stack.bindings,
        stack.users,
        clock=lambda: expires + timedelta(seconds=1),
    )
    assert await later.has_permission(user.id, perm.code) is True


async def test_newest_override_wins(stack: _Stack) -> None:
    perm = await _perm(stack)
    user = await stack.users.create_user(f"{_unique('u')}@example.com")
    await stack.override_svc.add_override(user.id, perm.code, granted=False)
    await stack.override_svc.add_override(user.id, perm.code, granted=True)
    assert await stack.resolver.has_permission(user.id, perm.code) is True
    assert await stack.override_svc.remove_override(user.id, perm.code) == 2
    assert await stack.resolver.has_permission(user.id, perm.code) is False


async def test_mutations_are_audited_newest_first(stack: _Stack) -> None:
    perm = await _perm(stack)
    role = await stack.role_svc.create_role(name=_unique("role"))
    await stack.binding_svc.add(role.id, perm.id)
    await stack.binding_svc.remove(role.id, perm.id)
    entries = await stack.audit.list(ByEntity(AuditEntityType.ROLE, role.id))
    assert [e.action for e in entries] == [
        AuditAction.ROLE_PERMISSION_REMOVED.value,
        AuditAction.ROLE_PERMISSION_ADDED.value,
        AuditAction.ROLE_CREATED.value,
    ]
    assert entries[0].permission_code == perm.code


async def test_audit_rows_cannot_be_updated(stack: _Stack, db_session) -> None:
    role = await stack.role_svc.create_role(name=_unique("role"))
    (entry,) = await stack.audit.list(ByEntity(AuditEntityType.ROLE, role.id))
    with pytest.raises(DBAPIError):
        async with db_session.begin_nested():
            await db_session.execute(
                text("UPDATE permission_audit_log SET action = 'x' WHERE id = :id"),
                {"id": entry.id},
            )


async def test_seeder_is_idempotent(db_session) -> None:
    seeder = RbacCatalogSeeder(db_session)
    await seeder.seed()
    second = await seeder.seed()
    assert second.permissions_created == []
    assert second.roles_created == []
    assert second.bindings_added == {}
