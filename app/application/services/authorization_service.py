"""Authorization service: turn resolver decisions into allow/deny for callers.

Denials raise AuthorizationException carrying only what was required
(requiredPermission, requiredPermissions or requiredRoles).
"""

from __future__ import annotations

from app.application.dtos.permission_override import UserPermissionsView
from app.application.interfaces.repositories import IUserRepository
from app.application.interfaces.services import IPermissionResolver
from app.application.services.override_service import OverrideService
from app.domain.exceptions import AuthorizationException, ResourceNotFoundException
from app.shared.enums import CheckMode
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class AuthorizationService:
    """Centralized permission checking on top of IPermissionResolver (no caching)."""

    def __init__(
        self,
        permission_resolver: IPermissionResolver,
        user_repo: IUserRepository | None = None,
        override_service: OverrideService | None = None,
    ) -> None:
        self.permission_resolver = permission_resolver
        self.user_repo = user_repo
        self.override_service = override_service

    async def check(self, user_id: str, codes: list[str], mode: CheckMode) -> bool:
        """Evaluate codes with any/all semantics."""
        if mode == CheckMode.ALL:
            return await self.permission_resolver.has_all_permissions(user_id, codes)
        return await self.permission_resolver.has_any_permission(user_id, codes)

    async def require_permission(self, user_id: str, code: str) -> None:
        """Raise AuthorizationException if user lacks code."""
        if not await self.permission_resolver.has_permission(user_id, code):
            logger.info("Permission denied: user=%s required=%s", user_id, code)
            raise AuthorizationException(required_permission=code)

    async def require_any_permission(self, user_id: str, codes: list[str]) -> None:
        """Raise AuthorizationException unless user holds at least one of codes."""
        if not await self.permission_resolver.has_any_permission(user_id, codes):
            logger.info("Permission denied: user=%s required any of %s", user_id, codes)
            raise AuthorizationException(required_permissions=list(codes))

    async def require_all_permissions(self, user_id: str, codes: list[str]) -> None:
        """Raise AuthorizationException unless user holds every code."""
        if not await self.permission_resolver.has_all_permissions(user_id, codes):
            logger.info("Permission denied: user=%s required all of %s", user_id, codes)
            raise AuthorizationException(required_permissions=list(codes))

    async def require_role_or_permission(
        self,
        user_id: str,
        user_role: str | None,
        roles: list[str],
        code: str,
    ) -> None:
        """Allow when user_role is one of roles, else when the user holds code."""
        if user_role is not None and user_role in roles:
            return
        if await self.permission_resolver.has_permission(user_id, code):
            return
        logger.info(
            "Permission denied: user=%s required roles %s or %s", user_id, roles, code
        )
        raise AuthorizationException(required_permission=code, required_roles=list(roles))

    async def get_user_permissions_view(self, user_id: str) -> UserPermissionsView:
        """Return role, resolved codes and annotated overrides for one user.

        Raises:
            ResourceNotFoundException: If the user does not exist.
        """
        if self.user_repo is None or self.override_service is None:
            raise RuntimeError("user_repo and override_service are required for this view")
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise ResourceNotFoundException("user", user_id)
        effective = await self.permission_resolver.get_effective_permissions(user_id)
        overrides = await self.override_service.list_for_user(user_id)
        return UserPermissionsView(
            user_id=user_id,
            role=user.role,
            effective_permissions=sorted(effective),
            overrides=overrides,
        )
