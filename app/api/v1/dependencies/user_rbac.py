"""Current user and permission guards (composition root).

Guards resolve the caller from the bearer token on every request and ask
AuthorizationService for a decision; nothing is cached across requests.
Each guard returns the current user so routes can use it as the actor.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.dtos.user import UserResult
from app.application.services import AuthorizationService
from app.core.config import get_settings
from app.domain.exceptions import AuthenticationException
from app.infrastructure.persistence.repositories import UserRepository
from app.infrastructure.security.jwt import TokenClaims, verify_token
from app.shared.telemetry.logging import get_logger

from .rbac import get_authorization_service, get_user_repo

logger = get_logger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> TokenClaims:
    """Verify the bearer token; raise 401 if missing or invalid. No DB access."""
    if not credentials:
        raise AuthenticationException("Not authenticated")
    try:
        return verify_token(credentials.credentials)
    except ValueError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise AuthenticationException("Invalid or expired token") from e


async def get_current_user(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> UserResult:
    """Return the token's user; raise 401 if unknown or inactive.

    The role is read from the user table on every request, so role changes
    apply without re-issuing tokens.
    """
    user = await user_repo.get_by_id(claims.user_id)
    if not user or not user.is_active:
        raise AuthenticationException("Not authenticated")
    return user


def _admin_roles() -> list[str]:
    return [get_settings().admin_role_name]


def require_permission(code: str):
    """Dependency factory: require JWT auth and that the user holds code."""

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        await auth_svc.require_permission(current_user.id, code)
        return current_user

    return _require


def require_any_permission(*codes: str):
    """Dependency factory: require at least one of codes."""

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        await auth_svc.require_any_permission(current_user.id, list(codes))
        return current_user

    return _require


def require_all_permissions(*codes: str):
    """Dependency factory: require every one of codes."""

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        await auth_svc.require_all_permissions(current_user.id, list(codes))
        return current_user

    return _require


def require_role_or_permission(code: str, roles: list[str] | None = None):
    """Dependency factory: pass holders of roles (default: the admin role) or of code."""

    async def _require(
        current_user: Annotated[UserResult, Depends(get_current_user)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        await auth_svc.require_role_or_permission(
            current_user.id,
            current_user.role,
            roles if roles is not None else _admin_roles(),
            code,
        )
        return current_user

    return _require


def require_self_or_permission(code: str):
    """Dependency factory for /users/{user_id}/... reads.

    The caller may always read their own permissions; anyone else needs the
    admin role or code.
    """

    async def _require(
        user_id: str,
        current_user: Annotated[UserResult, Depends(get_current_user)],
        auth_svc: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UserResult:
        if current_user.id != user_id:
            await auth_svc.require_role_or_permission(
                current_user.id, current_user.role, _admin_roles(), code
            )
        return current_user

    return _require
