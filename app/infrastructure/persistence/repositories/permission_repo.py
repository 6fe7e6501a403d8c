"""Permission repository. Read methods return PermissionResult (DTO)."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.permission import (
    PermissionCreate,
    PermissionResult,
    PermissionUpdate,
    PermissionUsage,
)
from app.domain.exceptions import (
    DuplicatePermissionCodeException,
    PermissionInUseException,
)
from app.infrastructure.persistence.models.permission import Permission
from app.infrastructure.persistence.models.role_permission import RolePermission
from app.infrastructure.persistence.models.user_permission_override import (
    UserPermissionOverride,
)
from app.infrastructure.persistence.repositories.base import BaseRepository


def _permission_to_result(p: Permission) -> PermissionResult:
    """Map ORM Permission to application PermissionResult."""
    return PermissionResult(
        id=p.id,
        code=p.code,
        name=p.name,
        description=p.description,
        category=p.category,
        is_system=p.is_system,
        created_at=p.created_at,
    )


class PermissionRepository(BaseRepository[Permission]):
    """Permission catalog store. Listing is ordered by (category, code)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Permission)

    async def get_by_id(self, permission_id: str) -> PermissionResult | None:
        orm = await self.get_entity_by_id(permission_id)
        return _permission_to_result(orm) if orm else None

    async def get_by_code(self, code: str) -> PermissionResult | None:
        result = await self.db.execute(select(Permission).where(Permission.code == code))
        row = result.scalar_one_or_none()
        return _permission_to_result(row) if row else None

    async def lock_for_update(self, permission_id: str) -> PermissionResult | None:
        """Row-lock the permission; concurrent binds wait until this transaction ends."""
        result = await self.db.execute(
            select(Permission).where(Permission.id == permission_id).with_for_update()
        )
        row = result.scalar_one_or_none()
        return _permission_to_result(row) if row else None

    async def lock_for_share(self, permission_ids: list[str]) -> list[PermissionResult]:
        """Share-lock the permissions that exist, blocking a concurrent delete of any."""
        if not permission_ids:
            return []
        result = await self.db.execute(
            select(Permission)
            .where(Permission.id.in_(permission_ids))
            .order_by(Permission.id)
            .with_for_update(read=True)
        )
        return [_permission_to_result(p) for p in result.scalars().all()]

    async def list_all(self, category: str | None = None) -> list[PermissionResult]:
        q = select(Permission)
        if category is not None:
            q = q.where(Permission.category == category)
        result = await self.db.execute(q.order_by(Permission.category, Permission.code))
        return [_permission_to_result(p) for p in result.scalars().all()]

    async def create_permission(self, data: PermissionCreate) -> PermissionResult:
        """Insert a permission; the unique constraint on code backs the service check."""
        perm = Permission(
            code=data.code,
            name=data.name,
            description=data.description,
            category=data.category,
            is_system=data.is_system,
        )
        try:
            async with self.db.begin_nested():
                created = await self.create(perm)
        except IntegrityError:
            raise DuplicatePermissionCodeException(data.code) from None
        return _permission_to_result(created)

    async def update_permission(
        self, permission_id: str, data: PermissionUpdate
    ) -> PermissionResult | None:
        orm = await self.get_entity_by_id(permission_id)
        if not orm:
            return None
        if data.name is not None:
            orm.name = data.name
        if data.description is not None:
            orm.description = data.description
        if data.category is not None:
            orm.category = data.category
        updated = await self.update(orm)
        return _permission_to_result(updated)

    async def delete_permission(self, permission_id: str) -> bool:
        """Delete a permission. RESTRICT foreign keys refuse it while referenced."""
        orm = await self.get_entity_by_id(permission_id)
        if not orm:
            return False
        code = orm.code
        try:
            async with self.db.begin_nested():
                await self.delete(orm)
        except IntegrityError:
            usage = await self.get_usage(permission_id)
            raise PermissionInUseException(
                code, usage.role_count, usage.override_count
            ) from None
        return True

    async def get_usage(self, permission_id: str) -> PermissionUsage:
        role_count = await self.db.scalar(
            select(func.count())
            .select_from(RolePermission)
            .where(RolePermission.permission_id == permission_id)
        )
        override_count = await self.db.scalar(
            select(func.count())
            .select_from(UserPermissionOverride)
            .where(UserPermissionOverride.permission_id == permission_id)
        )
        return PermissionUsage(
            role_count=role_count or 0, override_count=override_count or 0
        )
