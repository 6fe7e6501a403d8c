"""Unit tests for PermissionAuditLogger (transaction requirement, context stamping, limits)."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.audit_log import AllEntries
from app.domain.exceptions import StorageException
from app.infrastructure.services.permission_audit_logger import PermissionAuditLogger
from app.shared.context import clear_request_context, set_request_context
from app.shared.enums import AuditAction, AuditEntityType


def _db(in_transaction: bool) -> MagicMock:
    db = MagicMock()
    db.in_transaction.return_value = in_transaction
    return db


async def test_record_outside_transaction_raises_storage_exception() -> None:
    repo = AsyncMock()
    logger = PermissionAuditLogger(_db(False), repo, default_limit=50, max_limit=500)
    with pytest.raises(StorageException):
        await logger.record(
            AuditEntityType.ROLE, "r1", AuditAction.ROLE_CREATED, None, "admin-1"
        )
    repo.create_entry.assert_not_awaited()


async def test_record_stamps_request_context() -> None:
    repo = AsyncMock()
    logger = PermissionAuditLogger(_db(True), repo, default_limit=50, max_limit=500)
    set_request_context(request_id="req-1", ip_address="10.0.0.9", user_agent="pytest")
    try:
        await logger.record(
            AuditEntityType.USER,
            "u1",
            AuditAction.PERMISSION_GRANTED,
            "invoices.create",
            "admin-1",
            metadata={"reason": "cover"},
        )
    finally:
        clear_request_context()
    entry = repo.create_entry.await_args.args[0]
    assert entry.entity_type == AuditEntityType.USER
    assert entry.permission_code == "invoices.create"
    assert entry.metadata == {"reason": "cover"}
    assert (entry.request_id, entry.ip_address, entry.user_agent) == (
        "req-1",
        "10.0.0.9",
        "pytest",
    )


async def test_record_propagates_repository_errors() -> None:
    repo = AsyncMock()
    repo.create_entry.side_effect = StorageException("insert failed")
    logger = PermissionAuditLogger(_db(True), repo, default_limit=50, max_limit=500)
    with pytest.raises(StorageException):
        await logger.record(
            AuditEntityType.ROLE, "r1", AuditAction.ROLE_DELETED, None, None
        )


@pytest.mark.parametrize(
    ("requested", "applied"), [(None, 50), (10, 10), (0, 1), (-5, 1), (10_000, 500)]
)
def test_clamp_limit(requested: int | None, applied: int) -> None:
    logger = PermissionAuditLogger(_db(True), AsyncMock(), default_limit=50, max_limit=500)
    assert logger.clamp_limit(requested) == applied


async def test_list_passes_clamped_limit() -> None:
    repo = AsyncMock()
    repo.list_entries.return_value = []
    logger = PermissionAuditLogger(_db(False), repo, default_limit=50, max_limit=500)
    assert await logger.list(AllEntries(), 9999) == []
    repo.list_entries.assert_awaited_once_with(AllEntries(), 500)
