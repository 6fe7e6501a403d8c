"""DTOs for permission catalog use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PermissionResult:
    """Permission read-model (result of get_by_code, get_by_id, create, etc.)."""

    id: str
    code: str
    name: str
    description: str | None
    category: str
    is_system: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class PermissionCreate:
    """Input for creating a catalog entry."""

    code: str
    name: str
    category: str
    description: str | None = None
    is_system: bool = False


@dataclass(frozen=True)
class PermissionUpdate:
    """Mutable permission fields. The code is immutable and is not listed here."""

    name: str | None = None
    description: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class PermissionUsage:
    """How many roles and overrides reference a permission."""

    role_count: int
    override_count: int

    @property
    def in_use(self) -> bool:
        return self.role_count > 0 or self.override_count > 0
