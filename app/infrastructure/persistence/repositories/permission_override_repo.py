"""UserPermissionOverride repository. Read methods return OverrideResult (DTO)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.permission_override import OverrideResult, OverrideUpdate
from app.infrastructure.persistence.models.permission import Permission
from app.infrastructure.persistence.models.user_permission_override import (
    UserPermissionOverride,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import utc_now


def _override_to_result(o: UserPermissionOverride, code: str) -> OverrideResult:
    """Map ORM override (plus its permission code) to OverrideResult."""
    return OverrideResult(
        id=o.id,
        user_id=o.user_id,
        permission_id=o.permission_id,
        permission_code=code,
        granted=o.granted,
        reason=o.reason,
        expires_at=o.expires_at,
        granted_by=o.granted_by,
        created_at=o.created_at,
    )


class PermissionOverrideRepository(BaseRepository[UserPermissionOverride]):
    """Per-user overrides. Listing is newest first (created_at, then id)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, UserPermissionOverride)

    def _select_with_code(self) -> Select[tuple[UserPermissionOverride, str]]:
        return (
            select(UserPermissionOverride, Permission.code)
            .join(Permission, Permission.id == UserPermissionOverride.permission_id)
            .order_by(
                UserPermissionOverride.created_at.desc(),
                UserPermissionOverride.id.desc(),
            )
        )

    async def get_by_id(self, override_id: str) -> OverrideResult | None:
        result = await self.db.execute(
            self._select_with_code().where(UserPermissionOverride.id == override_id)
        )
        row = result.first()
        return _override_to_result(row[0], row[1]) if row else None

    async def list_for_pair(self, user_id: str, permission_id: str) -> list[OverrideResult]:
        result = await self.db.execute(
            self._select_with_code().where(
                UserPermissionOverride.user_id == user_id,
                UserPermissionOverride.permission_id == permission_id,
            )
        )
        return [_override_to_result(o, code) for o, code in result.all()]

    async def list_for_user(self, user_id: str) -> list[OverrideResult]:
        result = await self.db.execute(
            self._select_with_code().where(UserPermissionOverride.user_id == user_id)
        )
        return [_override_to_result(o, code) for o, code in result.all()]

    async def create_override(
        self,
        user_id: str,
        permission_id: str,
        granted: bool,
        reason: str | None,
        expires_at: datetime | None,
        granted_by: str | None,
    ) -> OverrideResult:
        override = UserPermissionOverride(
            user_id=user_id,
            permission_id=permission_id,
            granted=granted,
            reason=reason,
            expires_at=expires_at,
            granted_by=granted_by,
            created_at=utc_now(),
        )
        created = await self.create(override)
        code = await self.db.scalar(
            select(Permission.code).where(Permission.id == permission_id)
        )
        return _override_to_result(created, code or "")

    async def update_override(
        self, override_id: str, data: OverrideUpdate
    ) -> OverrideResult | None:
        orm = await self.get_entity_by_id(override_id)
        if not orm:
            return None
        if data.granted is not None:
            orm.granted = data.granted
        if data.reason is not None:
            orm.reason = data.reason
        if data.clear_expiry:
            orm.expires_at = None
        elif data.expires_at is not None:
            orm.expires_at = data.expires_at
        await self.update(orm)
        return await self.get_by_id(override_id)

    async def delete_for_pair(self, user_id: str, permission_id: str) -> int:
        result = await self.db.execute(
            delete(UserPermissionOverride).where(
                UserPermissionOverride.user_id == user_id,
                UserPermissionOverride.permission_id == permission_id,
            )
        )
        return result.rowcount or 0

    async def delete_for_user(self, user_id: str) -> int:
        result = await self.db.execute(
            delete(UserPermissionOverride).where(
                UserPermissionOverride.user_id == user_id
            )
        )
        return result.rowcount or 0
