"""RolePermission repository: role-permission bindings (single entity responsibility)."""

from __future__ import annotations

from sqlalchemy import delete, exists, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.role_permission import RoleBindingResult
from app.domain.exceptions import DuplicateAssignmentException
from app.infrastructure.persistence.models.permission import Permission
from app.infrastructure.persistence.models.role import Role
from app.infrastructure.persistence.models.role_permission import RolePermission
from app.shared.utils.generators import generate_cuid


class RolePermissionRepository:
    """Role-permission link table only. Bind, unbind, replace and query bindings.

    Callers hold the role row lock (RoleRepository.lock_for_update) before any
    write, so two writers never interleave on the same role.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_bindings(self, role_id: str) -> list[RoleBindingResult]:
        result = await self.db.execute(
            select(RolePermission, Permission)
            .join(Permission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.category, Permission.code)
        )
        return [
            RoleBindingResult(
                role_id=rp.role_id,
                permission_id=p.id,
                code=p.code,
                name=p.name,
                category=p.category,
                description=p.description,
                granted_by=rp.granted_by,
                granted_at=rp.granted_at,
            )
            for rp, p in result.all()
        ]

    async def get_permission_ids(self, role_id: str) -> set[str]:
        result = await self.db.execute(
            select(RolePermission.permission_id).where(RolePermission.role_id == role_id)
        )
        return set(result.scalars().all())

    async def role_name_has_permission(self, role_name: str, permission_id: str) -> bool:
        stmt = select(
            exists().where(
                RolePermission.role_id == Role.id,
                Role.name == role_name,
                RolePermission.permission_id == permission_id,
            )
        )
        return bool(await self.db.scalar(stmt))

    async def get_codes_for_role_name(self, role_name: str) -> set[str]:
        result = await self.db.execute(
            select(Permission.code)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(Role.name == role_name)
        )
        return set(result.scalars().all())

    async def add(self, role_id: str, permission_id: str, granted_by: str | None) -> None:
        await self.add_many(role_id, [permission_id], granted_by)

    async def add_many(
        self, role_id: str, permission_ids: list[str], granted_by: str | None
    ) -> None:
        """Insert all pairs in one statement; a duplicate fails the whole insert."""
        if not permission_ids:
            return
        try:
            async with self.db.begin_nested():
                await self.db.execute(
                    insert(RolePermission),
                    [
                        {
                            "id": generate_cuid(),
                            "role_id": role_id,
                            "permission_id": pid,
                            "granted_by": granted_by,
                        }
                        for pid in permission_ids
                    ],
                )
        except IntegrityError:
            raise DuplicateAssignmentException(role_id, list(permission_ids)) from None

    async def remove(self, role_id: str, permission_id: str) -> bool:
        result = await self.db.execute(
            delete(RolePermission).where(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
        )
        return result.rowcount > 0

    async def replace_all(
        self, role_id: str, permission_ids: list[str], granted_by: str | None
    ) -> tuple[list[str], list[str]]:
        """Delete the old binding set and insert the new one as a single unit.

        Runs in a SAVEPOINT inside the caller's transaction: either both steps
        apply or neither does. Other sessions see the change only at commit.
        Existing pairs that stay keep their original granted_by/granted_at.

        Returns:
            (added_ids, removed_ids) relative to the previous set.
        """
        wanted = list(dict.fromkeys(permission_ids))
        async with self.db.begin_nested():
            current = await self.get_permission_ids(role_id)
            removed = sorted(current - set(wanted))
            added = [pid for pid in wanted if pid not in current]
            if removed:
                await self.db.execute(
                    delete(RolePermission).where(
                        RolePermission.role_id == role_id,
                        RolePermission.permission_id.in_(removed),
                    )
                )
            if added:
                await self.db.execute(
                    insert(RolePermission),
                    [
                        {
                            "id": generate_cuid(),
                            "role_id": role_id,
                            "permission_id": pid,
                            "granted_by": granted_by,
                        }
                        for pid in added
                    ],
                )
        return added, removed
