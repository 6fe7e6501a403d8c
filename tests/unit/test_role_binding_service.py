"""Unit tests for RoleBindingService (strict/idempotent bulk add, set_all, no-op removal)."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.permission import PermissionResult
from app.application.dtos.role import RoleResult
from app.application.dtos.role_permission import RoleBindingResult
from app.application.services.role_binding_service import RoleBindingService
from app.domain.exceptions import DuplicateAssignmentException, ResourceNotFoundException
from app.shared.enums import AuditAction


def _perm(pid: str, code: str) -> PermissionResult:
    return PermissionResult(
        id=pid, code=code, name=code, description=None, category=code.split(".")[0]
    )


PERMS = {
    "p1": _perm("p1", "jobcards.view"),
    "p2": _perm("p2", "jobcards.update"),
    "p3": _perm("p3", "vehicles.view"),
}
ROLE = RoleResult(id="r1", name="mechanic", description=None, is_active=True)


def _binding(pid: str) -> RoleBindingResult:
    p = PERMS[pid]
    return RoleBindingResult(
        role_id="r1",
        permission_id=pid,
        code=p.code,
        name=p.name,
        category=p.category,
        description=None,
        granted_by=None,
        granted_at=None,
    )


@pytest.fixture
def repos() -> dict[str, AsyncMock]:
    role_repo = AsyncMock()
    role_repo.lock_for_update.return_value = ROLE
    role_repo.get_by_id.return_value = ROLE
    permission_repo = AsyncMock()
    permission_repo.get_by_id.side_effect = lambda pid: PERMS.get(pid)
    permission_repo.lock_for_share.side_effect = lambda ids: [PERMS[i] for i in ids if i in PERMS]
    bindings = AsyncMock()
    bindings.get_permission_ids.return_value = {"p1"}
    bindings.get_bindings.return_value = [_binding("p1")]
    return {
        "role_repo": role_repo,
        "permission_repo": permission_repo,
        "role_permission_repo": bindings,
        "audit_logger": AsyncMock(),
    }


@pytest.fixture
def service(repos: dict[str, AsyncMock]) -> RoleBindingService:
    return RoleBindingService(**repos)


async def test_add_binds_and_audits(service: RoleBindingService, repos) -> None:
    await service.add("r1", "p2", granted_by="admin-1")
    repos["role_permission_repo"].add.assert_awaited_once_with("r1", "p2", "admin-1")
    args = repos["audit_logger"].record.await_args.args
    assert args[2] == AuditAction.ROLE_PERMISSION_ADDED
    assert args[3] == "jobcards.update"
    repos["permission_repo"].lock_for_share.assert_awaited_once_with(["p2"])


async def test_add_permission_gone_raises_not_found(
    service: RoleBindingService, repos
) -> None:
    with pytest.raises(ResourceNotFoundException) as exc_info:
        await service.add("r1", "deleted")
    assert exc_info.value.details["resource_type"] == "permission"
    repos["role_permission_repo"].add.assert_not_awaited()


async def test_add_existing_pair_raises_duplicate(service: RoleBindingService, repos) -> None:
    with pytest.raises(DuplicateAssignmentException):
        await service.add("r1", "p1")
    repos["role_permission_repo"].add.assert_not_awaited()
    repos["audit_logger"].record.assert_not_awaited()


async def test_add_unknown_role_raises_not_found(service: RoleBindingService, repos) -> None:
    repos["role_repo"].lock_for_update.return_value = None
    with pytest.raises(ResourceNotFoundException):
        await service.add("missing", "p2")


async def test_bulk_add_strict_rejects_existing_pairs(
    service: RoleBindingService, repos
) -> None:
    with pytest.raises(DuplicateAssignmentException) as exc_info:
        await service.bulk_add("r1", ["p1", "p2"])
    assert exc_info.value.details["permission_ids"] == ["p1"]
    repos["role_permission_repo"].add_many.assert_not_awaited()


async def test_bulk_add_idempotent_skips_existing_pairs(
    service: RoleBindingService, repos
) -> None:
    added = await service.bulk_add("r1", ["p1", "p2", "p3", "p2"], idempotent=True)
    assert added == ["p2", "p3"]
    repos["role_permission_repo"].add_many.assert_awaited_once_with("r1", ["p2", "p3"], None)
    repos["audit_logger"].record.assert_awaited_once()


async def test_bulk_add_idempotent_nothing_new_writes_no_row(
    service: RoleBindingService, repos
) -> None:
    assert await service.bulk_add("r1", ["p1"], idempotent=True) == []
    repos["audit_logger"].record.assert_not_awaited()


async def test_bulk_add_unknown_permission_raises_before_insert(
    service: RoleBindingService, repos
) -> None:
    with pytest.raises(ResourceNotFoundException):
        await service.bulk_add("r1", ["p2", "nope"])
    repos["role_permission_repo"].add_many.assert_not_awaited()


async def test_remove_absent_binding_is_noop(service: RoleBindingService, repos) -> None:
    repos["role_permission_repo"].remove.return_value = False
    assert await service.remove("r1", "p2") is False
    repos["audit_logger"].record.assert_not_awaited()


async def test_remove_existing_binding_audits(service: RoleBindingService, repos) -> None:
    repos["role_permission_repo"].remove.return_value = True
    assert await service.remove("r1", "p1", actor_id="admin-1") is True
    assert (
        repos["audit_logger"].record.await_args.args[2]
        == AuditAction.ROLE_PERMISSION_REMOVED
    )


async def test_set_all_dedupes_and_records_diff(service: RoleBindingService, repos) -> None:
    repos["role_permission_repo"].replace_all.return_value = (["p2", "p3"], ["p1"])
    result = await service.set_all("r1", ["p2", "p3", "p2"], granted_by="admin-1")
    repos["role_permission_repo"].replace_all.assert_awaited_once_with(
        "r1", ["p2", "p3"], "admin-1"
    )
    metadata = repos["audit_logger"].record.await_args.kwargs["metadata"]
    assert metadata["added"] == ["jobcards.update", "vehicles.view"]
    assert metadata["removed"] == ["jobcards.view"]
    assert result.added_permission_ids == ["p2", "p3"]
    assert result.removed_permission_ids == ["p1"]


async def test_set_all_unknown_permission_changes_nothing(
    service: RoleBindingService, repos
) -> None:
    with pytest.raises(ResourceNotFoundException) as exc_info:
        await service.set_all("r1", ["p2", "ghost"])
    assert exc_info.value.details["resource_id"] == "ghost"
    repos["role_permission_repo"].replace_all.assert_not_awaited()
    repos["audit_logger"].record.assert_not_awaited()


async def test_set_all_empty_list_clears_bindings(service: RoleBindingService, repos) -> None:
    repos["role_permission_repo"].replace_all.return_value = ([], ["p1"])
    result = await service.set_all("r1", [])
    assert result.removed_permission_ids == ["p1"]
    assert repos["audit_logger"].record.await_args.args[2] == AuditAction.ROLE_PERMISSIONS_SET
