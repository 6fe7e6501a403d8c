"""Role binding service: add, remove and replace role-to-permission bindings.

Every mutation first locks the role row, so concurrent administrators editing
the same role are serialized by the database rather than by this process.
"""

from __future__ import annotations

from app.application.dtos.permission import PermissionResult
from app.application.dtos.role_permission import RoleBindingResult, SetBindingsResult
from app.application.interfaces.repositories import (
    IPermissionRepository,
    IRolePermissionRepository,
    IRoleRepository,
)
from app.application.interfaces.services import IAuditLogger
from app.domain.exceptions import (
    DuplicateAssignmentException,
    ResourceNotFoundException,
)
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RoleBindingService:
    """Many-to-many bindings between roles and permissions, audited per call.

    Policy for bulk_add: strict by default (any existing pair fails the whole
    call and nothing is inserted); idempotent=True skips existing pairs.
    """

    def __init__(
        self,
        role_repo: IRoleRepository,
        permission_repo: IPermissionRepository,
        role_permission_repo: IRolePermissionRepository,
        audit_logger: IAuditLogger,
    ) -> None:
        self._role_repo = role_repo
        self._permission_repo = permission_repo
        self._bindings = role_permission_repo
        self._audit = audit_logger

    async def _lock_role(self, role_id: str) -> None:
        if not await self._role_repo.lock_for_update(role_id):
            raise ResourceNotFoundException("role", role_id)

    async def _resolve_permissions(
        self, permission_ids: list[str]
    ) -> dict[str, PermissionResult]:
        """Return id -> permission for all ids, or raise NotFound for the first missing one."""
        found = {
            p.id: p for p in await self._permission_repo.lock_for_share(permission_ids)
        }
        for pid in permission_ids:
            if pid not in found:
                raise ResourceNotFoundException("permission", pid)
        return found

    async def get_bindings(self, role_id: str) -> list[RoleBindingResult]:
        """Return the role's permissions with metadata, ordered by (category, code)."""
        if not await self._role_repo.get_by_id(role_id):
            raise ResourceNotFoundException("role", role_id)
        return await self._bindings.get_bindings(role_id)

    async def add(
        self, role_id: str, permission_id: str, granted_by: str | None = None
    ) -> None:
        """Bind one permission.

        Raises:
            ResourceNotFoundException: If the role or permission does not exist.
            DuplicateAssignmentException: If the pair is already bound.
        """
        await self._lock_role(role_id)
        perm = (await self._resolve_permissions([permission_id]))[permission_id]
        if permission_id in await self._bindings.get_permission_ids(role_id):
            raise DuplicateAssignmentException(role_id, [permission_id])
        await self._bindings.add(role_id, permission_id, granted_by)
        await self._audit.record(
            AuditEntityType.ROLE,
            role_id,
            AuditAction.ROLE_PERMISSION_ADDED,
            perm.code,
            granted_by,
            metadata={"permission_id": permission_id},
            role_id=role_id,
        )
        logger.info(
            "Permission bound: role=%s code=%s actor=%s", role_id, perm.code, granted_by
        )

    async def bulk_add(
        self,
        role_id: str,
        permission_ids: list[str],
        granted_by: str | None = None,
        idempotent: bool = False,
    ) -> list[str]:
        """Bind several permissions at once. Returns the ids actually inserted.

        Raises:
            ResourceNotFoundException: If the role or any permission does not exist.
            DuplicateAssignmentException: If any pair exists and idempotent is False.
        """
        await self._lock_role(role_id)
        wanted = list(dict.fromkeys(permission_ids))
        perms = await self._resolve_permissions(wanted)
        existing = await self._bindings.get_permission_ids(role_id)
        already = [pid for pid in wanted if pid in existing]
        if already and not idempotent:
            raise DuplicateAssignmentException(role_id, already)
        to_add = [pid for pid in wanted if pid not in existing]
        if not to_add:
            return []
        await self._bindings.add_many(role_id, to_add, granted_by)
        await self._audit.record(
            AuditEntityType.ROLE,
            role_id,
            AuditAction.ROLE_PERMISSIONS_ADDED,
            None,
            granted_by,
            metadata={
                "permission_ids": to_add,
                "permission_codes": [perms[pid].code for pid in to_add],
                "skipped_permission_ids": already,
            },
            role_id=role_id,
        )
        logger.info(
            "Permissions bound: role=%s count=%d actor=%s",
            role_id,
            len(to_add),
            granted_by,
        )
        return to_add

    async def remove(
        self, role_id: str, permission_id: str, actor_id: str | None = None
    ) -> bool:
        """Unbind one permission. Removing a missing binding is a no-op (no audit row).

        Raises:
            ResourceNotFoundException: If the role does not exist.
        """
        await self._lock_role(role_id)
        perm = await self._permission_repo.get_by_id(permission_id)
        if not perm:
            return False
        if not await self._bindings.remove(role_id, permission_id):
            return False
        await self._audit.record(
            AuditEntityType.ROLE,
            role_id,
            AuditAction.ROLE_PERMISSION_REMOVED,
            perm.code,
            actor_id,
            metadata={"permission_id": permission_id},
            role_id=role_id,
        )
        logger.info(
            "Permission unbound: role=%s code=%s actor=%s", role_id, perm.code, actor_id
        )
        return True

    async def set_all(
        self,
        role_id: str,
        permission_ids: list[str],
        granted_by: str | None = None,
    ) -> SetBindingsResult:
        """Replace the role's bindings with exactly permission_ids.

        Delete and insert run as one unit inside the caller's transaction; a
        concurrent reader sees either the old set or the new set, never an
        empty or partial one.

        Raises:
            ResourceNotFoundException: If the role or any permission does not exist
                (nothing is changed).
        """
        await self._lock_role(role_id)
        wanted = list(dict.fromkeys(permission_ids))
        perms = await self._resolve_permissions(wanted)
        before = {b.permission_id: b.code for b in await self._bindings.get_bindings(role_id)}
        added, removed = await self._bindings.replace_all(role_id, wanted, granted_by)
        await self._audit.record(
            AuditEntityType.ROLE,
            role_id,
            AuditAction.ROLE_PERMISSIONS_SET,
            None,
            granted_by,
            metadata={
                "permission_ids": wanted,
                "added": sorted(perms[pid].code for pid in added),
                "removed": sorted(before[pid] for pid in removed if pid in before),
            },
            role_id=role_id,
        )
        logger.info(
            "Role permissions replaced: role=%s added=%d removed=%d actor=%s",
            role_id,
            len(added),
            len(removed),
            granted_by,
        )
        return SetBindingsResult(
            role_id=role_id,
            added_permission_ids=added,
            removed_permission_ids=removed,
            bindings=await self._bindings.get_bindings(role_id),
        )
