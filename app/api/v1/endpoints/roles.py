"""Roles API: list, get, create, update, delete, and role-permission bindings."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    get_binding_reader,
    get_binding_service,
    get_role_reader,
    get_role_service,
    require_role_or_permission,
)
from app.application.dtos.user import UserResult
from app.application.services import RoleBindingService, RoleService
from app.core.limiter import limit_writes
from app.schemas.role import (
    RoleBindingResponse,
    RoleCreateRequest,
    RoleDetailResponse,
    RolePermissionAssign,
    RolePermissionsAssignedResponse,
    RolePermissionsReplace,
    RolePermissionsReplacedResponse,
    RoleResponse,
    RoleUpdate,
)

router = APIRouter()

_can_view = require_role_or_permission("roles.view")
_can_manage = require_role_or_permission("roles.manage")


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    _: Annotated[UserResult, Depends(_can_view)],
    role_svc: Annotated[RoleService, Depends(get_role_reader)],
    active_only: bool = False,
):
    """List roles ordered by name; active_only hides deactivated roles."""
    return await role_svc.list_roles(active_only=active_only)


@router.post("", response_model=RoleResponse, status_code=201)
@limit_writes
async def create_role(
    request: Request,
    body: RoleCreateRequest,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    role_svc: Annotated[RoleService, Depends(get_role_service)],
):
    """Create a role. Optionally bind permissions by id in the same transaction."""
    return await role_svc.create_role(
        name=body.name,
        description=body.description,
        permission_ids=body.permission_ids,
        actor_id=current_user.id,
    )


@router.get("/{role_id}", response_model=RoleDetailResponse)
async def get_role(
    role_id: str,
    _: Annotated[UserResult, Depends(_can_view)],
    role_svc: Annotated[RoleService, Depends(get_role_reader)],
):
    """Get role by id with its permission bindings."""
    detail = await role_svc.get_role_detail(role_id)
    return RoleDetailResponse(
        role=RoleResponse.model_validate(detail.role),
        permissions=[RoleBindingResponse.model_validate(b) for b in detail.bindings],
    )


@router.patch("/{role_id}", response_model=RoleResponse)
@limit_writes
async def update_role(
    request: Request,
    role_id: str,
    body: RoleUpdate,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    role_svc: Annotated[RoleService, Depends(get_role_service)],
):
    """Update name/description and/or toggle is_active (partial)."""
    role = None
    if body.name is not None or body.description is not None:
        role = await role_svc.update_role(
            role_id,
            name=body.name,
            description=body.description,
            actor_id=current_user.id,
        )
    if body.is_active is not None:
        role = await role_svc.set_active(
            role_id, body.is_active, actor_id=current_user.id
        )
    if role is None:
        role = await role_svc.get_role(role_id)
    return role


@router.delete("/{role_id}", status_code=204)
@limit_writes
async def delete_role(
    request: Request,
    role_id: str,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    role_svc: Annotated[RoleService, Depends(get_role_service)],
):
    """Delete a role that no user holds; its bindings go with it."""
    await role_svc.delete_role(role_id, actor_id=current_user.id)


@router.get("/{role_id}/permissions", response_model=list[RoleBindingResponse])
async def list_role_permissions(
    role_id: str,
    _: Annotated[UserResult, Depends(_can_view)],
    binding_svc: Annotated[RoleBindingService, Depends(get_binding_reader)],
):
    """List the permissions bound to a role, ordered by (category, code)."""
    return await binding_svc.get_bindings(role_id)


@router.post(
    "/{role_id}/permissions",
    response_model=RolePermissionsAssignedResponse,
    status_code=201,
)
@limit_writes
async def assign_permissions_to_role(
    request: Request,
    role_id: str,
    body: RolePermissionAssign,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    binding_svc: Annotated[RoleBindingService, Depends(get_binding_service)],
):
    """Bind one permission (permission_id) or several (permission_ids)."""
    if body.permission_id is not None:
        await binding_svc.add(role_id, body.permission_id, granted_by=current_user.id)
        added = [body.permission_id]
    else:
        added = await binding_svc.bulk_add(
            role_id,
            body.permission_ids or [],
            granted_by=current_user.id,
            idempotent=body.idempotent,
        )
    return RolePermissionsAssignedResponse(role_id=role_id, added_permission_ids=added)


@router.put("/{role_id}/permissions", response_model=RolePermissionsReplacedResponse)
@limit_writes
async def replace_role_permissions(
    request: Request,
    role_id: str,
    body: RolePermissionsReplace,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    binding_svc: Annotated[RoleBindingService, Depends(get_binding_service)],
):
    """Replace the role's bindings with exactly permission_ids (atomic)."""
    return await binding_svc.set_all(
        role_id, body.permission_ids, granted_by=current_user.id
    )


@router.delete("/{role_id}/permissions/{permission_id}", status_code=204)
@limit_writes
async def remove_permission_from_role(
    request: Request,
    role_id: str,
    permission_id: str,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    binding_svc: Annotated[RoleBindingService, Depends(get_binding_service)],
):
    """Unbind a permission. Removing an absent binding is a no-op."""
    await binding_svc.remove(role_id, permission_id, actor_id=current_user.id)
