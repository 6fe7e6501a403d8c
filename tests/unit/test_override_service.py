"""Unit tests for OverrideService (validation, audit rows, no-op removals)."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from app.application.dtos.permission import PermissionResult
from app.application.dtos.permission_override import OverrideResult, OverrideUpdate
from app.application.dtos.user import UserResult
from app.application.services.override_service import OverrideService
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.shared.enums import AuditAction, AuditEntityType

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
PERM = PermissionResult(
    id="p-inv", code="invoices.create", name="Create invoices", description=None, category="invoices"
)
USER = UserResult(id="u1", email="u1@example.com", role="mechanic", is_active=True)


def _result(**kwargs) -> OverrideResult:
    defaults = dict(
        id="o1",
        user_id="u1",
        permission_id=PERM.id,
        permission_code=PERM.code,
        granted=True,
        reason=None,
        expires_at=None,
        granted_by="admin-1",
        created_at=NOW,
    )
    defaults.update(kwargs)
    return OverrideResult(**defaults)


@pytest.fixture
def repos() -> dict[str, AsyncMock]:
    permission_repo = AsyncMock()
    permission_repo.get_by_code.return_value = PERM
    permission_repo.lock_for_share.return_value = [PERM]
    override_repo = AsyncMock()
    override_repo.create_override.return_value = _result()
    user_repo = AsyncMock()
    user_repo.get_by_id.return_value = USER
    audit = AsyncMock()
    return {
        "permission_repo": permission_repo,
        "override_repo": override_repo,
        "user_repo": user_repo,
        "audit_logger": audit,
    }


@pytest.fixture
def service(repos: dict[str, AsyncMock]) -> OverrideService:
    return OverrideService(**repos, clock=lambda: NOW)


async def test_add_grant_writes_granted_audit_row(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    await service.add_override("u1", "invoices.create", True, reason="cover", granted_by="admin-1")
    repos["override_repo"].create_override.assert_awaited_once()
    args = repos["audit_logger"].record.await_args.args
    assert args[0] == AuditEntityType.USER
    assert args[1] == "u1"
    assert args[2] == AuditAction.PERMISSION_GRANTED
    assert args[3] == "invoices.create"
    assert args[4] == "admin-1"


async def test_add_deny_writes_revoked_audit_row(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["override_repo"].create_override.return_value = _result(granted=False)
    await service.add_override("u1", "invoices.create", False, granted_by="admin-1")
    assert repos["audit_logger"].record.await_args.args[2] == AuditAction.PERMISSION_REVOKED


@pytest.mark.parametrize("expires_at", [NOW, NOW - timedelta(seconds=1)])
async def test_add_rejects_expiry_not_in_future(
    service: OverrideService, repos: dict[str, AsyncMock], expires_at: datetime
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await service.add_override("u1", "invoices.create", True, expires_at=expires_at)
    assert exc_info.value.details == {"field": "expires_at"}
    repos["override_repo"].create_override.assert_not_awaited()
    repos["audit_logger"].record.assert_not_awaited()


async def test_add_treats_naive_expiry_as_utc(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    naive = (NOW + timedelta(hours=2)).replace(tzinfo=None)
    await service.add_override("u1", "invoices.create", True, expires_at=naive)
    kwargs = repos["override_repo"].create_override.await_args.kwargs
    assert kwargs["expires_at"] == NOW + timedelta(hours=2)
    assert kwargs["expires_at"].tzinfo is not None


async def test_add_unknown_permission_raises_not_found(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["permission_repo"].get_by_code.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.add_override("u1", "nope.code", True)
    repos["audit_logger"].record.assert_not_awaited()


async def test_add_permission_deleted_before_lock_raises_not_found(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["permission_repo"].lock_for_share.return_value = []
    with pytest.raises(ResourceNotFoundException):
        await service.add_override("u1", "invoices.create", True)
    repos["override_repo"].create_override.assert_not_awaited()


async def test_add_unknown_user_raises_not_found(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["user_repo"].get_by_id.return_value = None
    with pytest.raises(ResourceNotFoundException) as exc_info:
        await service.add_override("ghost", "invoices.create", True)
    assert exc_info.value.details["resource_type"] == "user"


async def test_add_rejects_overlong_reason(service: OverrideService) -> None:
    with pytest.raises(ValidationException):
        await service.add_override("u1", "invoices.create", True, reason="x" * 501)


async def test_remove_without_overrides_is_noop_without_audit(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["override_repo"].delete_for_pair.return_value = 0
    assert await service.remove_override("u1", "invoices.create", "admin-1") == 0
    repos["audit_logger"].record.assert_not_awaited()


async def test_remove_unknown_code_is_noop(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["permission_repo"].get_by_code.return_value = None
    assert await service.remove_override("u1", "nope.code", "admin-1") == 0
    repos["override_repo"].delete_for_pair.assert_not_awaited()
    repos["audit_logger"].record.assert_not_awaited()


async def test_remove_existing_writes_one_audit_row(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["override_repo"].delete_for_pair.return_value = 2
    assert await service.remove_override("u1", "invoices.create", "admin-1") == 2
    repos["audit_logger"].record.assert_awaited_once()
    assert (
        repos["audit_logger"].record.await_args.args[2]
        == AuditAction.PERMISSION_OVERRIDE_REMOVED
    )


async def test_clear_for_user_writes_single_row(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["override_repo"].delete_for_user.return_value = 3
    assert await service.clear_for_user("u1", "admin-1") == 3
    repos["audit_logger"].record.assert_awaited_once()
    assert repos["audit_logger"].record.await_args.kwargs["metadata"] == {"removed_count": 3}


async def test_update_other_users_override_is_not_found(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["override_repo"].get_by_id.return_value = _result(user_id="someone-else")
    with pytest.raises(ResourceNotFoundException):
        await service.update_override("o1", OverrideUpdate(granted=False), user_id="u1")
    repos["override_repo"].update_override.assert_not_awaited()


async def test_update_records_changes(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["override_repo"].get_by_id.return_value = _result()
    repos["override_repo"].update_override.return_value = _result(granted=False)
    updated = await service.update_override(
        "o1", OverrideUpdate(granted=False), actor_id="admin-1", user_id="u1"
    )
    assert updated.granted is False
    metadata = repos["audit_logger"].record.await_args.kwargs["metadata"]
    assert metadata["changes"] == {"granted": {"old": True, "new": False}}


async def test_list_for_user_annotates_expiry(
    service: OverrideService, repos: dict[str, AsyncMock]
) -> None:
    repos["override_repo"].list_for_user.return_value = [
        _result(id="o1", expires_at=NOW - timedelta(minutes=1)),
        _result(id="o2", expires_at=NOW + timedelta(minutes=1)),
        _result(id="o3", expires_at=None),
    ]
    listed = await service.list_for_user("u1")
    assert [o.is_expired for o in listed] == [True, False, False]
