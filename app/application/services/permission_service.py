"""Permission catalog service: create, update and delete with audit."""

from __future__ import annotations

from collections import defaultdict

from app.application.dtos.permission import (
    PermissionCreate,
    PermissionResult,
    PermissionUpdate,
)
from app.application.interfaces.repositories import IPermissionRepository
from app.application.interfaces.services import IAuditLogger
from app.domain.exceptions import (
    DuplicatePermissionCodeException,
    PermissionInUseException,
    ResourceNotFoundException,
    ValidationException,
)
from app.domain.value_objects.core import CATEGORY_MAX_LENGTH, PermissionCode
from app.shared.enums import AuditAction, AuditEntityType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def group_by_category(
    permissions: list[PermissionResult],
) -> dict[str, list[PermissionResult]]:
    """Group permissions by category, keeping the input order inside each group."""
    grouped: dict[str, list[PermissionResult]] = defaultdict(list)
    for perm in permissions:
        grouped[perm.category].append(perm)
    return dict(grouped)


def _require_text(value: str | None, field: str, max_length: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationException(f"{field} is required", field=field)
    if len(text) > max_length:
        raise ValidationException(
            f"{field} must not exceed {max_length} characters", field=field
        )
    return text


class PermissionService:
    """Authoritative permission catalog. Codes are unique and immutable."""

    def __init__(
        self,
        permission_repo: IPermissionRepository,
        audit_logger: IAuditLogger,
    ) -> None:
        self._repo = permission_repo
        self._audit = audit_logger

    async def get_by_id(self, permission_id: str) -> PermissionResult:
        perm = await self._repo.get_by_id(permission_id)
        if not perm:
            raise ResourceNotFoundException("permission", permission_id)
        return perm

    async def get_by_code(self, code: str) -> PermissionResult:
        perm = await self._repo.get_by_code(code)
        if not perm:
            raise ResourceNotFoundException("permission", code)
        return perm

    async def list_permissions(self, category: str | None = None) -> list[PermissionResult]:
        """Return permissions ordered by (category, code); all when category is None."""
        return await self._repo.list_all(category=category)

    async def create_permission(
        self,
        code: str,
        name: str,
        category: str,
        description: str | None = None,
        is_system: bool = False,
        actor_id: str | None = None,
    ) -> PermissionResult:
        """Create a catalog entry.

        Raises:
            ValidationException: If code, name or category is malformed.
            DuplicatePermissionCodeException: If the code already exists.
        """
        try:
            PermissionCode(code)
        except ValueError as e:
            raise ValidationException(str(e), field="code") from e
        data = PermissionCreate(
            code=code,
            name=_require_text(name, "name", 255),
            category=_require_text(category, "category", CATEGORY_MAX_LENGTH),
            description=description,
            is_system=is_system,
        )
        # Fast path; the unique constraint still catches concurrent creates.
        if await self._repo.get_by_code(code):
            raise DuplicatePermissionCodeException(code)
        created = await self._repo.create_permission(data)
        await self._audit.record(
            AuditEntityType.PERMISSION,
            created.id,
            AuditAction.PERMISSION_CREATED,
            created.code,
            actor_id,
            metadata={"name": created.name, "category": created.category},
        )
        logger.info("Permission created: code=%s actor=%s", created.code, actor_id)
        return created

    async def update_permission(
        self,
        permission_id: str,
        data: PermissionUpdate,
        actor_id: str | None = None,
    ) -> PermissionResult:
        """Update name, description or category. The code never changes."""
        current = await self.get_by_id(permission_id)
        checked = PermissionUpdate(
            name=_require_text(data.name, "name", 255) if data.name is not None else None,
            description=data.description,
            category=(
                _require_text(data.category, "category", CATEGORY_MAX_LENGTH)
                if data.category is not None
                else None
            ),
        )
        updated = await self._repo.update_permission(permission_id, checked)
        if not updated:
            raise ResourceNotFoundException("permission", permission_id)
        changes = {
            field: {"old": getattr(current, field), "new": getattr(updated, field)}
            for field in ("name", "description", "category")
            if getattr(current, field) != getattr(updated, field)
        }
        await self._audit.record(
            AuditEntityType.PERMISSION,
            updated.id,
            AuditAction.PERMISSION_UPDATED,
            updated.code,
            actor_id,
            metadata={"changes": changes},
        )
        return updated

    async def delete_permission(
        self, permission_id: str, actor_id: str | None = None
    ) -> None:
        """Delete a permission nothing references.

        Raises:
            ResourceNotFoundException: If the permission does not exist.
            ValidationException: If it is a system permission.
            PermissionInUseException: If any role binding or override references it.
        """
        perm = await self._repo.lock_for_update(permission_id)
        if not perm:
            raise ResourceNotFoundException("permission", permission_id)
        if perm.is_system:
            raise ValidationException(
                f"System permission '{perm.code}' cannot be deleted", field="is_system"
            )
        usage = await self._repo.get_usage(permission_id)
        if usage.in_use:
            raise PermissionInUseException(
                perm.code, usage.role_count, usage.override_count
            )
        if not await self._repo.delete_permission(permission_id):
            raise ResourceNotFoundException("permission", permission_id)
        await self._audit.record(
            AuditEntityType.PERMISSION,
            perm.id,
            AuditAction.PERMISSION_DELETED,
            perm.code,
            actor_id,
            metadata={"name": perm.name, "category": perm.category},
        )
        logger.info("Permission deleted: code=%s actor=%s", perm.code, actor_id)
