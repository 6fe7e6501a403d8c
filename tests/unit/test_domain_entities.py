"""Tests for the override activity rule and role lifecycle rules."""

from datetime import UTC, datetime, timedelta

import pytest

from app.domain.entities import (
    PermissionOverrideEntity,
    RoleEntity,
    select_effective_override,
)
from app.domain.exceptions import RoleInUseException, ValidationException
from app.domain.value_objects import RoleName

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _ov(oid: str, granted: bool, created: datetime, expires: datetime | None = None):
    return PermissionOverrideEntity(
        id=oid,
        user_id="u1",
        permission_id="p1",
        granted=granted,
        created_at=created,
        expires_at=expires,
    )


def test_override_without_expiry_is_active() -> None:
    assert _ov("o1", True, NOW).is_active_at(NOW + timedelta(days=3650))


def test_override_expiring_now_is_expired() -> None:
    ov = _ov("o1", True, NOW - timedelta(days=1), NOW)
    assert ov.is_expired_at(NOW)
    assert ov.is_active_at(NOW - timedelta(microseconds=1))


def test_select_effective_override_ignores_expired() -> None:
    expired = _ov("o1", False, NOW - timedelta(hours=1), NOW - timedelta(minutes=1))
    assert select_effective_override([expired], NOW) is None


def test_select_effective_override_newest_wins_ties_by_id() -> None:
    a = _ov("o-a", True, NOW - timedelta(hours=1))
    b = _ov("o-b", False, NOW - timedelta(hours=1))
    older = _ov("o-z", True, NOW - timedelta(hours=2))
    assert select_effective_override([older, b, a], NOW) is b


def test_select_effective_override_empty() -> None:
    assert select_effective_override([], NOW) is None


def test_role_requires_id() -> None:
    with pytest.raises(ValidationException):
        RoleEntity(id="", name=RoleName("mechanic"))


def test_system_role_cannot_be_renamed_but_keeps_same_name() -> None:
    role = RoleEntity(id="r0", name=RoleName("admin"), is_system=True)
    role.rename(RoleName("admin"))
    with pytest.raises(ValidationException):
        role.rename(RoleName("root"))


def test_role_in_use_cannot_be_deleted() -> None:
    role = RoleEntity(id="r1", name=RoleName("mechanic"))
    role.ensure_deletable(0)
    with pytest.raises(RoleInUseException):
        role.ensure_deletable(1)


def test_system_role_deletion_depends_only_on_holders() -> None:
    role = RoleEntity(id="r2", name=RoleName("mechanic"), is_system=True)
    role.ensure_deletable(0)
    with pytest.raises(RoleInUseException) as exc_info:
        role.ensure_deletable(3)
    assert exc_info.value.details["user_count"] == 3


def test_held_role_cannot_be_renamed() -> None:
    role = RoleEntity(id="r1", name=RoleName("mechanic"))
    with pytest.raises(RoleInUseException):
        role.rename(RoleName("technician"), user_count=1)
    role.rename(RoleName("technician"), user_count=0)
    assert role.name.value == "technician"


def test_activate_and_deactivate_are_idempotent() -> None:
    role = RoleEntity(id="r1", name=RoleName("mechanic"))
    role.deactivate()
    role.deactivate()
    assert role.is_active is False
    role.activate()
    assert role.is_active is True
