"""Role store service: role lifecycle with audit.

Users reference roles by name (user.role), so deletion is guarded by a
count of users holding the role, supplied by the identity collaborator.
"""

from __future__ import annotations

from app.application.dtos.role import RoleResult
from app.application.dtos.role_permission import RoleWithBindings
from app.application.interfaces.repositories import (
    IPermissionRepository,
    IRolePermissionRepository,
    IRoleRepository,
    IUserRepository,
)
from app.application.interfaces.services import IAuditLogger
from app.domain.entities.role import RoleEntity
from app.domain.exceptions import (
    DuplicateRoleNameException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects.core import RoleName
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _role_name(name: str) -> RoleName:
    try:
        return RoleName(name)
    except ValueError as e:
        raise ValidationException(str(e), field="name") from e


def _to_entity(role: RoleResult) -> RoleEntity:
    return RoleEntity(
        id=role.id,
        name=RoleName(role.name),
        is_active=role.is_active,
        is_system=role.is_system,
        description=role.description,
    )


class RoleService:
    """Create, rename, toggle and delete roles in the caller's transaction."""

    def __init__(
        self,
        role_repo: IRoleRepository,
        permission_repo: IPermissionRepository,
        role_permission_repo: IRolePermissionRepository,
        user_repo: IUserRepository,
        audit_logger: IAuditLogger,
    ) -> None:
        self._role_repo = role_repo
        self._permission_repo = permission_repo
        self._role_permission_repo = role_permission_repo
        self._user_repo = user_repo
        self._audit = audit_logger

    async def get_role(self, role_id: str) -> RoleResult:
        role = await self._role_repo.get_by_id(role_id)
        if not role:
            raise ResourceNotFoundException("role", role_id)
        return role

    async def get_role_by_name(self, name: str) -> RoleResult:
        role = await self._role_repo.get_by_name(name)
        if not role:
            raise ResourceNotFoundException("role", name)
        return role

    async def get_role_detail(self, role_id: str) -> RoleWithBindings:
        """Return the role together with its bound permissions."""
        role = await self.get_role(role_id)
        bindings = await self._role_permission_repo.get_bindings(role_id)
        return RoleWithBindings(role=role, bindings=bindings)

    async def list_roles(self, active_only: bool = False) -> list[RoleResult]:
        return await self._role_repo.list_all(active_only=active_only)

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        permission_ids: list[str] | None = None,
        actor_id: str | None = None,
        is_system: bool = False,
    ) -> RoleResult:
        """Create a role, optionally binding initial permissions in the same transaction.

        Raises:
            ValidationException: If the name is blank or too long.
            DuplicateRoleNameException: If the name is taken.
            ResourceNotFoundException: If an initial permission id does not exist.
        """
        role_name = _role_name(name)
        if await self._role_repo.get_by_name(role_name.value):
            raise DuplicateRoleNameException(role_name.value)
        initial_ids = list(dict.fromkeys(permission_ids or []))
        initial_codes: list[str] = []
        if initial_ids:
            found = {
                p.id: p for p in await self._permission_repo.lock_for_share(initial_ids)
            }
            missing = [pid for pid in initial_ids if pid not in found]
            if missing:
                raise ResourceNotFoundException("permission", missing[0])
            initial_codes = [found[pid].code for pid in initial_ids]
        created = await self._role_repo.create_role(
            name=role_name.value,
            description=description,
            is_system=is_system,
            created_by=actor_id,
        )
        if initial_ids:
            await self._role_permission_repo.add_many(created.id, initial_ids, actor_id)
        await self._audit.record(
            AuditEntityType.ROLE,
            created.id,
            AuditAction.ROLE_CREATED,
            None,
            actor_id,
            metadata={"name": created.name, "permission_codes": initial_codes},
            role_id=created.id,
        )
        logger.info(
            "Role created: id=%s name=%s actor=%s", created.id, created.name, actor_id
        )
        return created

    async def update_role(
        self,
        role_id: str,
        name: str | None = None,
        description: str | None = None,
        actor_id: str | None = None,
    ) -> RoleResult:
        """Rename and/or re-describe a role.

        Raises:
            ResourceNotFoundException: If the role does not exist.
            DuplicateRoleNameException: If another role already has the new name.
            ValidationException: If a system role would be renamed.
            RoleInUseException: If a rename is requested while users hold the role
                (users reference roles by name).
        """
        current = await self._role_repo.lock_for_update(role_id)
        if not current:
            raise ResourceNotFoundException("role", role_id)
        new_name: str | None = None
        if name is not None:
            role_name = _role_name(name)
            if role_name.value != current.name:
                user_count = await self._user_repo.count_users_with_role(current.name)
                _to_entity(current).rename(role_name, user_count)
                other = await self._role_repo.get_by_name(role_name.value)
                if other and other.id != role_id:
                    raise DuplicateRoleNameException(role_name.value)
                new_name = role_name.value
        updated = await self._role_repo.update_role(
            role_id, name=new_name, description=description, updated_by=actor_id
        )
        if not updated:
            raise ResourceNotFoundException("role", role_id)
        changes = {
            field: {"old": getattr(current, field), "new": getattr(updated, field)}
            for field in ("name", "description")
            if getattr(current, field) != getattr(updated, field)
        }
        await self._audit.record(
            AuditEntityType.ROLE,
            role_id,
            AuditAction.ROLE_UPDATED,
            None,
            actor_id,
            metadata={"changes": changes},
            role_id=role_id,
        )
        return updated

    async def set_active(
        self, role_id: str, active: bool, actor_id: str | None = None
    ) -> RoleResult:
        """Toggle role visibility. Bindings are untouched; no row is written when unchanged."""
        current = await self._role_repo.lock_for_update(role_id)
        if not current:
            raise ResourceNotFoundException("role", role_id)
        if current.is_active == active:
            return current
        entity = _to_entity(current)
        if active:
            entity.activate()
        else:
            entity.deactivate()
        updated = await self._role_repo.update_role(
            role_id, is_active=entity.is_active, updated_by=actor_id
        )
        if not updated:
            raise ResourceNotFoundException("role", role_id)
        await self._audit.record(
            AuditEntityType.ROLE,
            role_id,
            AuditAction.ROLE_ACTIVATED if active else AuditAction.ROLE_DEACTIVATED,
            None,
            actor_id,
            metadata={"name": updated.name},
            role_id=role_id,
        )
        logger.info(
            "Role %s: id=%s actor=%s",
            "activated" if active else "deactivated",
            role_id,
            actor_id,
        )
        return updated

    async def delete_role(self, role_id: str, actor_id: str | None = None) -> None:
        """Delete a role no user holds. Nothing is mutated on failure.

        Raises:
            ResourceNotFoundException: If the role does not exist.
            RoleInUseException: If any user still holds the role (system roles too).
        """
        role = await self._role_repo.lock_for_update(role_id)
        if not role:
            raise ResourceNotFoundException("role", role_id)
        user_count = await self._user_repo.count_users_with_role(role.name)
        _to_entity(role).ensure_deletable(user_count)
        bindings = await self._role_permission_repo.get_bindings(role_id)
        if not await self._role_repo.delete_role(role_id):
            raise ResourceNotFoundException("role", role_id)
        await self._audit.record(
            AuditEntityType.ROLE,
            role_id,
            AuditAction.ROLE_DELETED,
            None,
            actor_id,
            metadata={"name": role.name, "permission_codes": [b.code for b in bindings]},
            role_id=role_id,
        )
        logger.info("Role deleted: id=%s name=%s actor=%s", role_id, role.name, actor_id)
