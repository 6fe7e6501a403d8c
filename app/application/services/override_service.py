"""Override service: per-user grant/deny exceptions with optional expiry.

Overrides are stored append-only per (user, permission); when several are
active, the most recently created one decides (see PermissionResolver).
Listing never filters by expiry; it annotates each row with is_expired.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from app.application.dtos.permission_override import OverrideResult, OverrideUpdate
from app.application.interfaces.repositories import (
    IPermissionOverrideRepository,
    IPermissionRepository,
    IUserRepository,
)
from app.application.interfaces.services import IAuditLogger
from app.domain.exceptions import ResourceNotFoundException, ValidationException
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)

REASON_MAX_LENGTH = 500


class OverrideService:
    """Create, update, remove and list user permission overrides."""

    def __init__(
        self,
        permission_repo: IPermissionRepository,
        override_repo: IPermissionOverrideRepository,
        user_repo: IUserRepository,
        audit_logger: IAuditLogger,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._permission_repo = permission_repo
        self._overrides = override_repo
        self._user_repo = user_repo
        self._audit = audit_logger
        self._clock = clock

    def _check_future(self, expires_at: datetime | None) -> datetime | None:
        expires_at = ensure_utc(expires_at)
        if expires_at is not None and expires_at <= ensure_utc(self._clock()):
            raise ValidationException(
                "expires_at must be in the future", field="expires_at"
            )
        return expires_at

    @staticmethod
    def _check_reason(reason: str | None) -> str | None:
        if reason is not None and len(reason) > REASON_MAX_LENGTH:
            raise ValidationException(
                f"reason must not exceed {REASON_MAX_LENGTH} characters", field="reason"
            )
        return reason

    def _annotate(self, override: OverrideResult, now: datetime) -> OverrideResult:
        return replace(override, is_expired=override.to_entity().is_expired_at(now))

    async def add_override(
        self,
        user_id: str,
        code: str,
        granted: bool,
        reason: str | None = None,
        expires_at: datetime | None = None,
        granted_by: str | None = None,
    ) -> OverrideResult:
        """Grant (granted=True) or deny (granted=False) one permission for one user.

        Raises:
            ValidationException: If expires_at is not strictly in the future.
            ResourceNotFoundException: If the user or permission code does not exist.
        """
        expires_at = self._check_future(expires_at)
        reason = self._check_reason(reason)
        if not await self._user_repo.get_by_id(user_id):
            raise ResourceNotFoundException("user", user_id)
        perm = await self._permission_repo.get_by_code(code)
        if not perm or not await self._permission_repo.lock_for_share([perm.id]):
            raise ResourceNotFoundException("permission", code)
        created = await self._overrides.create_override(
            user_id=user_id,
            permission_id=perm.id,
            granted=granted,
            reason=reason,
            expires_at=expires_at,
            granted_by=granted_by,
        )
        await self._audit.record(
            AuditEntityType.USER,
            user_id,
            AuditAction.PERMISSION_GRANTED if granted else AuditAction.PERMISSION_REVOKED,
            perm.code,
            granted_by,
            metadata={
                "override_id": created.id,
                "reason": reason,
                "expires_at": expires_at.isoformat() if expires_at else None,
            },
        )
        logger.info(
            "Override added: user=%s code=%s granted=%s actor=%s",
            user_id,
            perm.code,
            granted,
            granted_by,
        )
        return created

    async def update_override(
        self,
        override_id: str,
        data: OverrideUpdate,
        actor_id: str | None = None,
        user_id: str | None = None,
    ) -> OverrideResult:
        """Change granted, reason or expiry of an existing override.

        When user_id is given the override must belong to that user.

        Raises:
            ResourceNotFoundException: If the override does not exist.
            ValidationException: If a new expires_at is not in the future.
        """
        current = await self._overrides.get_by_id(override_id)
        if not current or (user_id is not None and current.user_id != user_id):
            raise ResourceNotFoundException("permission_override", override_id)
        checked = replace(
            data,
            expires_at=None if data.clear_expiry else self._check_future(data.expires_at),
            reason=self._check_reason(data.reason),
        )
        updated = await self._overrides.update_override(override_id, checked)
        if not updated:
            raise ResourceNotFoundException("permission_override", override_id)
        changes = {
            field: {
                "old": _jsonable(getattr(current, field)),
                "new": _jsonable(getattr(updated, field)),
            }
            for field in ("granted", "reason", "expires_at")
            if getattr(current, field) != getattr(updated, field)
        }
        await self._audit.record(
            AuditEntityType.USER,
            updated.user_id,
            AuditAction.PERMISSION_OVERRIDE_UPDATED,
            updated.permission_code,
            actor_id,
            metadata={"override_id": override_id, "changes": changes},
        )
        return self._annotate(updated, ensure_utc(self._clock()))

    async def remove_override(
        self, user_id: str, code: str, actor_id: str | None = None
    ) -> int:
        """Delete every override of (user, code). No-op (and no audit row) when none exist."""
        perm = await self._permission_repo.get_by_code(code)
        if not perm:
            return 0
        removed = await self._overrides.delete_for_pair(user_id, perm.id)
        if removed:
            await self._audit.record(
                AuditEntityType.USER,
                user_id,
                AuditAction.PERMISSION_OVERRIDE_REMOVED,
                perm.code,
                actor_id,
                metadata={"removed_count": removed},
            )
            logger.info(
                "Override removed: user=%s code=%s actor=%s", user_id, perm.code, actor_id
            )
        return removed

    async def clear_for_user(self, user_id: str, actor_id: str | None = None) -> int:
        """Delete every override of the user, writing one audit row when any existed."""
        removed = await self._overrides.delete_for_user(user_id)
        if removed:
            await self._audit.record(
                AuditEntityType.USER,
                user_id,
                AuditAction.PERMISSION_OVERRIDES_CLEARED,
                None,
                actor_id,
                metadata={"removed_count": removed},
            )
            logger.info(
                "Overrides cleared: user=%s count=%d actor=%s", user_id, removed, actor_id
            )
        return removed

    async def list_for_user(self, user_id: str) -> list[OverrideResult]:
        """Return all overrides of the user, newest first, expired ones included."""
        now = ensure_utc(self._clock())
        return [self._annotate(o, now) for o in await self._overrides.list_for_user(user_id)]


def _jsonable(value: object) -> object:
    return value.isoformat() if isinstance(value, datetime) else value
