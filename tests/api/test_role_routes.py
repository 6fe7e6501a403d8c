"""Route tests for /roles (guards, status codes, body mapping)."""

from unittest.mock import AsyncMock

from httpx import AsyncClient

from app.api.v1.dependencies import (
    get_binding_service,
    get_role_reader,
    get_role_service,
)
from app.application.dtos.role import RoleResult
from app.application.dtos.role_permission import RoleWithBindings, SetBindingsResult
from app.domain.exceptions import DuplicateRoleNameException, RoleInUseException

ROLE = RoleResult(id="r1", name="mechanic", description="Workshop floor", is_active=True)


async def test_admin_lists_roles_without_permission_lookup(
    client: AsyncClient, as_user, admin, override, resolver: AsyncMock
) -> None:
    as_user(admin)
    role_svc = AsyncMock()
    role_svc.list_roles.return_value = [ROLE]
    override(get_role_reader, role_svc)
    response = await client.get("/api/v1/roles", params={"active_only": "true"})
    assert response.status_code == 200
    assert response.json()[0]["name"] == "mechanic"
    role_svc.list_roles.assert_awaited_once_with(active_only=True)
    resolver.has_permission.assert_not_awaited()


async def test_non_admin_without_permission_gets_403(
    client: AsyncClient, as_user, mechanic, override, resolver: AsyncMock
) -> None:
    as_user(mechanic)
    override(get_role_reader, AsyncMock())
    response = await client.get("/api/v1/roles")
    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "PERMISSION_DENIED"
    assert body["details"] == {"requiredPermission": "roles.view", "requiredRoles": ["admin"]}
    resolver.has_permission.assert_awaited_once_with("mech-1", "roles.view")


async def test_non_admin_with_permission_is_allowed(
    client: AsyncClient, as_user, mechanic, override, resolver: AsyncMock
) -> None:
    as_user(mechanic)
    resolver.has_permission.return_value = True
    role_svc = AsyncMock()
    role_svc.get_role_detail.return_value = RoleWithBindings(role=ROLE, bindings=[])
    override(get_role_reader, role_svc)
    response = await client.get("/api/v1/roles/r1")
    assert response.status_code == 200
    body = response.json()
    assert body["role"]["id"] == "r1"
    assert body["role"]["is_system"] is False
    assert body["permissions"] == []


async def test_create_role_returns_201_and_passes_actor(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    role_svc = AsyncMock()
    role_svc.create_role.return_value = ROLE
    override(get_role_service, role_svc)
    response = await client.post(
        "/api/v1/roles", json={"name": "mechanic", "permission_ids": ["p1"]}
    )
    assert response.status_code == 201
    role_svc.create_role.assert_awaited_once_with(
        name="mechanic", description=None, permission_ids=["p1"], actor_id="admin-1"
    )


async def test_create_duplicate_role_returns_409(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    role_svc = AsyncMock()
    role_svc.create_role.side_effect = DuplicateRoleNameException("mechanic")
    override(get_role_service, role_svc)
    response = await client.post("/api/v1/roles", json={"name": "mechanic"})
    assert response.status_code == 409
    assert response.json()["error"] == "DUPLICATE_NAME"


async def test_delete_role_in_use_returns_409(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    role_svc = AsyncMock()
    role_svc.delete_role.side_effect = RoleInUseException("mechanic", 4)
    override(get_role_service, role_svc)
    response = await client.delete("/api/v1/roles/r1")
    assert response.status_code == 409
    assert response.json()["details"]["user_count"] == 4


async def test_rename_held_role_returns_409(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    role_svc = AsyncMock()
    role_svc.update_role.side_effect = RoleInUseException("mechanic", 2)
    override(get_role_service, role_svc)
    response = await client.patch("/api/v1/roles/r1", json={"name": "technician"})
    assert response.status_code == 409
    assert response.json()["details"]["user_count"] == 2
    role_svc.set_active.assert_not_awaited()


async def test_patch_is_active_only_toggles(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    role_svc = AsyncMock()
    role_svc.set_active.return_value = ROLE
    override(get_role_service, role_svc)
    response = await client.patch("/api/v1/roles/r1", json={"is_active": False})
    assert response.status_code == 200
    role_svc.update_role.assert_not_awaited()
    role_svc.set_active.assert_awaited_once_with("r1", False, actor_id="admin-1")


async def test_bulk_assign_passes_idempotent_flag(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    binding_svc = AsyncMock()
    binding_svc.bulk_add.return_value = ["p2"]
    override(get_binding_service, binding_svc)
    response = await client.post(
        "/api/v1/roles/r1/permissions",
        json={"permission_ids": ["p1", "p2"], "idempotent": True},
    )
    assert response.status_code == 201
    assert response.json() == {"role_id": "r1", "added_permission_ids": ["p2"]}
    binding_svc.bulk_add.assert_awaited_once_with(
        "r1", ["p1", "p2"], granted_by="admin-1", idempotent=True
    )


async def test_assign_requires_exactly_one_target(
    client: AsyncClient, as_user, admin, override
) -> None:
    as_user(admin)
    override(get_binding_service, AsyncMock())
    response = await client.post(
        "/api/v1/roles/r1/permissions",
        json={"permission_id": "p1", "permission_ids": ["p2"]},
    )
    assert response.status_code == 422


async def test_replace_permissions(client: AsyncClient, as_user, admin, override) -> None:
    as_user(admin)
    binding_svc = AsyncMock()
    binding_svc.set_all.return_value = SetBindingsResult(
        role_id="r1", added_permission_ids=["p2"], removed_permission_ids=["p1"], bindings=[]
    )
    override(get_binding_service, binding_svc)
    response = await client.put(
        "/api/v1/roles/r1/permissions", json={"permission_ids": ["p2"]}
    )
    assert response.status_code == 200
    assert response.json()["removed_permission_ids"] == ["p1"]
