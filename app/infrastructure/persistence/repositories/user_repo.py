"""User repository (identity collaborator). Read-only from the engine's point of view."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.user import UserResult
from app.infrastructure.persistence.models.user import User
from app.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(id=u.id, email=u.email, role=u.role, is_active=u.is_active)


class UserRepository(BaseRepository[User]):
    """Lookups the RBAC engine needs: user by id, role name, users holding a role."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_by_id(self, user_id: str) -> UserResult | None:
        orm = await self.get_entity_by_id(user_id)
        return _user_to_result(orm) if orm else None

    async def get_role_name(self, user_id: str) -> str | None:
        return await self.db.scalar(select(User.role).where(User.id == user_id))

    async def count_users_with_role(self, role_name: str) -> int:
        count = await self.db.scalar(
            select(func.count()).select_from(User).where(User.role == role_name)
        )
        return count or 0

    async def create_user(
        self, email: str, role: str | None = None, name: str | None = None
    ) -> UserResult:
        """Insert a user row. Identity is owned elsewhere; used by dev tooling and tests."""
        created = await self.create(User(email=email, role=role, name=name, is_active=True))
        return _user_to_result(created)
