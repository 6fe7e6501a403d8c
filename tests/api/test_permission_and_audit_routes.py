"""Route tests for /permissions and /audit-log."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

from httpx import AsyncClient

from app.api.v1.dependencies import (
    get_audit_reader,
    get_permission_reader,
    get_permission_service,
)
from app.application.dtos.audit_log import AuditEntryResult, ByEntity, ByEntityType
from app.application.dtos.permission import PermissionResult
from app.domain.exceptions import DuplicatePermissionCodeException
from app.shared.enums import AuditEntityType


def _perm(code: str) -> PermissionResult:
    return PermissionResult(
        id=f"id-{code}", code=code, name=code, description=None, category=code.split(".")[0]
    )


def _entry() -> AuditEntryResult:
    return AuditEntryResult(
        id="a1",
        entity_type="role",
        entity_id="r1",
        action="role_created",
        permission_code=None,
        performed_by="admin-1",
        role_id="r1",
        metadata={"name": "mechanic"},
        ip_address=None,
        user_agent=None,
        request_id="req-1",
        created_at=datetime(2026, 3, 1, tzinfo=UTC),
    )


async def test_list_permissions_includes_grouping(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    svc = AsyncMock()
    svc.list_permissions.return_value = [
        _perm("invoices.create"),
        _perm("invoices.view"),
        _perm("jobcards.view"),
    ]
    override(get_permission_reader, svc)
    response = await client.get("/api/v1/permissions")
    assert response.status_code == 200
    data = response.json()
    assert [p["code"] for p in data["items"]] == [
        "invoices.create",
        "invoices.view",
        "jobcards.view",
    ]
    assert sorted(data["by_category"]) == ["invoices", "jobcards"]
    assert len(data["by_category"]["invoices"]) == 2


async def test_create_duplicate_permission_returns_409(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    svc = AsyncMock()
    svc.create_permission.side_effect = DuplicatePermissionCodeException("invoices.create")
    override(get_permission_service, svc)
    response = await client.post(
        "/api/v1/permissions",
        json={"code": "invoices.create", "name": "Create invoices", "category": "invoices"},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "DUPLICATE_CODE"


async def test_audit_log_filters_and_clamps(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    audit = AsyncMock()
    audit.clamp_limit = lambda limit: min(limit or 50, 500)
    audit.list.return_value = [_entry()]
    override(get_audit_reader, audit)
    response = await client.get(
        "/api/v1/audit-log", params={"entity_type": "role", "limit": 9999}
    )
    assert response.status_code == 200
    assert response.json()["limit"] == 500
    assert response.json()["items"][0]["metadata"] == {"name": "mechanic"}
    audit.list.assert_awaited_once_with(ByEntityType(AuditEntityType.ROLE), 500)


async def test_role_history_view(client: AsyncClient, as_user, admin, override) -> None:
    as_user(admin)
    audit = AsyncMock()
    audit.clamp_limit = lambda limit: limit or 50
    audit.list.return_value = []
    override(get_audit_reader, audit)
    response = await client.get("/api/v1/audit-log/roles/r1")
    assert response.status_code == 200
    audit.list.assert_awaited_once_with(ByEntity(AuditEntityType.ROLE, "r1"), 50)


async def test_unknown_entity_type_is_422(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    override(get_audit_reader, AsyncMock())
    response = await client.get("/api/v1/audit-log", params={"entity_type": "vehicle"})
    assert response.status_code == 422
