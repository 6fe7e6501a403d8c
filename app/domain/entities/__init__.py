"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.permission_override import (
    PermissionOverrideEntity,
    select_effective_override,
)
from app.domain.entities.role import RoleEntity

__all__ = [
    "PermissionOverrideEntity",
    "RoleEntity",
    "select_effective_override",
]
