"""DTOs for role use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RoleResult:
    """Role read-model (result of get_by_id, get_by_name, list_all, create, etc.)."""

    id: str
    name: str
    description: str | None
    is_active: bool
    is_system: bool = False
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
