"""Domain value objects and shared value types."""

from app.domain.value_objects.core import (
    CATEGORY_MAX_LENGTH,
    PERMISSION_CODE_MAX_LENGTH,
    ROLE_NAME_MAX_LENGTH,
    PermissionCode,
    RoleName,
)

__all__ = [
    "PermissionCode",
    "RoleName",
    "PERMISSION_CODE_MAX_LENGTH",
    "ROLE_NAME_MAX_LENGTH",
    "CATEGORY_MAX_LENGTH",
]
