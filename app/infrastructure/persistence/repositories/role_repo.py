"""Role repository. Read methods return RoleResult (DTO); entity getters return ORM for writes."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.role import RoleResult
from app.domain.exceptions import DuplicateRoleNameException
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.repositories.base import BaseRepository


def _role_to_result(r: Role) -> RoleResult:
    """Map ORM Role to application RoleResult."""
    return RoleResult(
        id=r.id,
        name=r.name,
        description=r.description,
        is_active=r.is_active,
        is_system=r.is_system,
        created_by=r.created_by,
        updated_by=r.updated_by,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


class RoleRepository(BaseRepository[Role]):
    """Role repository. lock_for_update serializes writers editing the same role."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Role)

    async def get_by_id(self, role_id: str) -> RoleResult | None:
        orm = await self.get_entity_by_id(role_id)
        return _role_to_result(orm) if orm else None

    async def get_by_name(self, name: str) -> RoleResult | None:
        result = await self.db.execute(select(Role).where(Role.name == name))
        row = result.scalar_one_or_none()
        return _role_to_result(row) if row else None

    async def lock_for_update(self, role_id: str) -> RoleResult | None:
        """SELECT ... FOR UPDATE on the role row; held until the transaction ends."""
        result = await self.db.execute(
            select(Role).where(Role.id == role_id).with_for_update()
        )
        row = result.scalar_one_or_none()
        return _role_to_result(row) if row else None

    async def list_all(self, active_only: bool = False) -> list[RoleResult]:
        q = select(Role)
        if active_only:
            q = q.where(Role.is_active.is_(True))
        result = await self.db.execute(q.order_by(Role.name))
        return [_role_to_result(r) for r in result.scalars().all()]

    async def create_role(
        self,
        name: str,
        description: str | None,
        is_system: bool = False,
        created_by: str | None = None,
    ) -> RoleResult:
        """Create a role; return read-model DTO."""
        role = Role(
            name=name,
            description=description,
            is_system=is_system,
            is_active=True,
            created_by=created_by,
            updated_by=created_by,
        )
        try:
            async with self.db.begin_nested():
                created = await self.create(role)
        except IntegrityError:
            raise DuplicateRoleNameException(name) from None
        return _role_to_result(created)

    async def update_role(
        self,
        role_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
        updated_by: str | None = None,
    ) -> RoleResult | None:
        orm = await self.get_entity_by_id(role_id)
        if not orm:
            return None
        if name is not None:
            orm.name = name
        if description is not None:
            orm.description = description
        if is_active is not None:
            orm.is_active = is_active
        orm.updated_by = updated_by
        try:
            async with self.db.begin_nested():
                updated = await self.update(orm)
        except IntegrityError:
            raise DuplicateRoleNameException(name or orm.name) from None
        return _role_to_result(updated)

    async def delete_role(self, role_id: str) -> bool:
        """Delete the role; role_permission rows go with it (ON DELETE CASCADE)."""
        orm = await self.get_entity_by_id(role_id)
        if not orm:
            return False
        await self.delete(orm)
        return True
