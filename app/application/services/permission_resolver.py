"""Permission resolver: read-time authorization decisions.

Composes the catalog, override store, role bindings and the identity
collaborator. Stateless across calls and never cached, so a revocation takes
effect on the very next check. Unknown users and unknown codes fail closed
(False / empty set) rather than raising.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from datetime import datetime

from app.application.interfaces.repositories import (
    IPermissionOverrideRepository,
    IPermissionRepository,
    IRolePermissionRepository,
    IUserRepository,
)
from app.domain.entities.permission_override import (
    PermissionOverrideEntity,
    select_effective_override,
)
from app.shared.utils.datetime import ensure_utc, utc_now


class PermissionResolver:
    """Resolve whether a user holds permission codes.

    Precedence: an active override (grant or deny) always wins; otherwise the
    answer is membership of the permission in the user's role bindings. An
    override is active when it has no expiry or expires strictly after now.
    Inactive roles still contribute their bindings.
    """

    def __init__(
        self,
        permission_repo: IPermissionRepository,
        override_repo: IPermissionOverrideRepository,
        role_permission_repo: IRolePermissionRepository,
        user_repo: IUserRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._permission_repo = permission_repo
        self._override_repo = override_repo
        self._role_permission_repo = role_permission_repo
        self._user_repo = user_repo
        self._clock = clock

    def _now(self) -> datetime:
        return ensure_utc(self._clock())

    async def has_permission(self, user_id: str, code: str) -> bool:
        return await self._check(user_id, code, self._now())

    async def _check(self, user_id: str, code: str, now: datetime) -> bool:
        perm = await self._permission_repo.get_by_code(code)
        if perm is None:
            return False
        overrides = await self._override_repo.list_for_pair(user_id, perm.id)
        effective = select_effective_override([o.to_entity() for o in overrides], now)
        if effective is not None:
            return effective.granted
        role_name = await self._user_repo.get_role_name(user_id)
        if not role_name:
            return False
        return await self._role_permission_repo.role_name_has_permission(
            role_name, perm.id
        )

    async def has_any_permission(self, user_id: str, codes: list[str]) -> bool:
        """True on the first code the user holds; False for an empty list."""
        now = self._now()
        for code in codes:
            if await self._check(user_id, code, now):
                return True
        return False

    async def has_all_permissions(self, user_id: str, codes: list[str]) -> bool:
        """False on the first code the user lacks; True for an empty list (vacuous truth)."""
        now = self._now()
        for code in codes:
            if not await self._check(user_id, code, now):
                return False
        return True

    async def get_effective_permissions(self, user_id: str) -> set[str]:
        """Return role-bound codes plus active grants minus active denies."""
        now = self._now()
        role_name = await self._user_repo.get_role_name(user_id)
        codes: set[str] = set()
        if role_name:
            codes = set(await self._role_permission_repo.get_codes_for_role_name(role_name))
        by_code: dict[str, list[PermissionOverrideEntity]] = defaultdict(list)
        for override in await self._override_repo.list_for_user(user_id):
            by_code[override.permission_code].append(override.to_entity())
        for code, overrides in by_code.items():
            effective = select_effective_override(overrides, now)
            if effective is None:
                continue
            if effective.granted:
                codes.add(code)
            else:
                codes.discard(code)
        return codes
