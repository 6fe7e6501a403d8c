"""DTOs for per-user permission overrides (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities.permission_override import PermissionOverrideEntity


@dataclass(frozen=True)
class OverrideResult:
    """Override read-model. is_expired is computed at read time, never stored."""

    id: str
    user_id: str
    permission_id: str
    permission_code: str
    granted: bool
    reason: str | None
    expires_at: datetime | None
    granted_by: str | None
    created_at: datetime
    is_expired: bool = False

    def to_entity(self) -> PermissionOverrideEntity:
        return PermissionOverrideEntity(
            id=self.id,
            user_id=self.user_id,
            permission_id=self.permission_id,
            granted=self.granted,
            created_at=self.created_at,
            expires_at=self.expires_at,
            reason=self.reason,
            created_by=self.granted_by,
        )


@dataclass(frozen=True)
class OverrideUpdate:
    """Mutable override fields. clear_expiry removes an existing expiry."""

    granted: bool | None = None
    reason: str | None = None
    expires_at: datetime | None = None
    clear_expiry: bool = False


@dataclass(frozen=True)
class UserPermissionsView:
    """A user's role, resolved permission set and every override on record."""

    user_id: str
    role: str | None
    effective_permissions: list[str]
    overrides: list[OverrideResult]
