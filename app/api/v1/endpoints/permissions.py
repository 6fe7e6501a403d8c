"""Permissions API: the global permission catalog (list, get, create, update, delete)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    get_permission_reader,
    get_permission_service,
    require_role_or_permission,
)
from app.application.dtos.permission import PermissionUpdate
from app.application.dtos.user import UserResult
from app.application.services import PermissionService, group_by_category
from app.core.limiter import limit_writes
from app.schemas.permission import (
    PermissionCreateRequest,
    PermissionListResponse,
    PermissionResponse,
    PermissionUpdateRequest,
)

router = APIRouter()

_can_view = require_role_or_permission("permissions.view")
_can_manage = require_role_or_permission("permissions.manage")


@router.get("", response_model=PermissionListResponse)
async def list_permissions(
    _: Annotated[UserResult, Depends(_can_view)],
    permission_svc: Annotated[PermissionService, Depends(get_permission_reader)],
    category: str | None = None,
):
    """List permissions ordered by (category, code), also grouped by category."""
    perms = await permission_svc.list_permissions(category)
    items = [PermissionResponse.model_validate(p) for p in perms]
    return PermissionListResponse(
        items=items,
        by_category={
            cat: [PermissionResponse.model_validate(p) for p in group]
            for cat, group in group_by_category(perms).items()
        },
    )


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: str,
    _: Annotated[UserResult, Depends(_can_view)],
    permission_svc: Annotated[PermissionService, Depends(get_permission_reader)],
):
    """Get permission by id."""
    return await permission_svc.get_by_id(permission_id)


@router.post("", response_model=PermissionResponse, status_code=201)
@limit_writes
async def create_permission(
    request: Request,
    body: PermissionCreateRequest,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    permission_svc: Annotated[PermissionService, Depends(get_permission_service)],
):
    """Create a catalog entry. Code must be dot-separated lowercase segments."""
    return await permission_svc.create_permission(
        code=body.code,
        name=body.name,
        category=body.category,
        description=body.description,
        actor_id=current_user.id,
    )


@router.patch("/{permission_id}", response_model=PermissionResponse)
@limit_writes
async def update_permission(
    request: Request,
    permission_id: str,
    body: PermissionUpdateRequest,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    permission_svc: Annotated[PermissionService, Depends(get_permission_service)],
):
    """Update name, description or category. The code cannot change."""
    return await permission_svc.update_permission(
        permission_id,
        PermissionUpdate(
            name=body.name, description=body.description, category=body.category
        ),
        actor_id=current_user.id,
    )


@router.delete("/{permission_id}", status_code=204)
@limit_writes
async def delete_permission(
    request: Request,
    permission_id: str,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    permission_svc: Annotated[PermissionService, Depends(get_permission_service)],
):
    """Delete a non-system permission that no role or override references."""
    await permission_svc.delete_permission(permission_id, actor_id=current_user.id)
