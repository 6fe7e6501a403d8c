"""User permissions API: effective view, checks, and per-user overrides."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.v1.dependencies import (
    get_authorization_service,
    get_override_service,
    get_user_permissions_service,
    require_role_or_permission,
    require_self_or_permission,
)
from app.application.dtos.permission_override import OverrideUpdate
from app.application.dtos.user import UserResult
from app.application.services import AuthorizationService, OverrideService
from app.core.limiter import limit_writes
from app.schemas.user_permission import (
    OverrideCreateRequest,
    OverrideResponse,
    OverridesRemovedResponse,
    OverrideUpdateRequest,
    PermissionCheckResponse,
    UserPermissionsResponse,
)
from app.shared.enums import CheckMode

router = APIRouter()

_can_view = require_self_or_permission("users.permissions.view")
_can_manage = require_role_or_permission("users.permissions.manage")


def _split_codes(raw: list[str]) -> list[str]:
    """Accept both ?codes=a&codes=b and ?codes=a,b."""
    return [c.strip() for item in raw for c in item.split(",") if c.strip()]


@router.get("/{user_id}/permissions", response_model=UserPermissionsResponse)
async def get_user_permissions(
    user_id: str,
    _: Annotated[UserResult, Depends(_can_view)],
    auth_svc: Annotated[AuthorizationService, Depends(get_user_permissions_service)],
):
    """Return the user's role, resolved permission codes and all overrides."""
    return await auth_svc.get_user_permissions_view(user_id)


@router.get("/{user_id}/permissions/check", response_model=PermissionCheckResponse)
async def check_user_permissions(
    user_id: str,
    _: Annotated[UserResult, Depends(_can_view)],
    auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    codes: Annotated[list[str], Query()] = [],
    mode: CheckMode = CheckMode.ANY,
):
    """Evaluate codes for the user: any (at least one) or all (every one).

    An empty list is false for any and true for all.
    """
    wanted = _split_codes(codes)
    allowed = await auth_svc.check(user_id, wanted, mode)
    return PermissionCheckResponse(
        user_id=user_id, codes=wanted, mode=mode, allowed=allowed
    )


@router.post(
    "/{user_id}/permissions", response_model=OverrideResponse, status_code=201
)
@limit_writes
async def add_user_override(
    request: Request,
    user_id: str,
    body: OverrideCreateRequest,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    override_svc: Annotated[OverrideService, Depends(get_override_service)],
):
    """Grant (granted=true) or deny (granted=false) a permission for one user."""
    return await override_svc.add_override(
        user_id,
        body.permission_code,
        granted=body.granted,
        reason=body.reason,
        expires_at=body.expires_at,
        granted_by=current_user.id,
    )


@router.patch(
    "/{user_id}/permission-overrides/{override_id}", response_model=OverrideResponse
)
@limit_writes
async def update_user_override(
    request: Request,
    user_id: str,
    override_id: str,
    body: OverrideUpdateRequest,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    override_svc: Annotated[OverrideService, Depends(get_override_service)],
):
    """Change granted, reason or expiry of one of the user's overrides."""
    return await override_svc.update_override(
        override_id,
        OverrideUpdate(
            granted=body.granted,
            reason=body.reason,
            expires_at=body.expires_at,
            clear_expiry=body.clear_expiry,
        ),
        actor_id=current_user.id,
        user_id=user_id,
    )


@router.delete(
    "/{user_id}/permissions/{code}", response_model=OverridesRemovedResponse
)
@limit_writes
async def remove_user_override(
    request: Request,
    user_id: str,
    code: str,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    override_svc: Annotated[OverrideService, Depends(get_override_service)],
):
    """Remove every override of (user, code). Removing none is not an error."""
    removed = await override_svc.remove_override(user_id, code, actor_id=current_user.id)
    return OverridesRemovedResponse(removed=removed)


@router.delete("/{user_id}/permissions", response_model=OverridesRemovedResponse)
@limit_writes
async def clear_user_overrides(
    request: Request,
    user_id: str,
    current_user: Annotated[UserResult, Depends(_can_manage)],
    override_svc: Annotated[OverrideService, Depends(get_override_service)],
):
    """Remove all of the user's overrides."""
    removed = await override_svc.clear_for_user(user_id, actor_id=current_user.id)
    return OverridesRemovedResponse(removed=removed)
