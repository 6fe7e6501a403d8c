"""Domain value objects for the RBAC engine.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass

# Dotted permission code: lowercase segments of letters, digits and underscores
# (e.g. invoices.create, users.permissions.manage).
_PERMISSION_CODE_RE = re.compile(r"^[a-z0-9_]+(\.[a-z0-9_]+)+$")
PERMISSION_CODE_MAX_LENGTH = 100
ROLE_NAME_MAX_LENGTH = 100
CATEGORY_MAX_LENGTH = 100


@dataclass(frozen=True)
class PermissionCode:
    """Value object for a permission code (SRP: code format validation).

    Codes are 'category.action' style, lowercase, at most 100 characters.
    A code is immutable once created: it names the same capability for the
    lifetime of every role binding and override that references it.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate non-empty, length and dotted format.

        Raises:
            ValueError: If the code is empty, too long or malformed.
        """
        if not self.value:
            raise ValueError("Permission code must be a non-empty string")
        if len(self.value) > PERMISSION_CODE_MAX_LENGTH:
            raise ValueError(
                f"Permission code must not exceed {PERMISSION_CODE_MAX_LENGTH} characters"
            )
        if not _PERMISSION_CODE_RE.match(self.value):
            raise ValueError(
                "Permission code must be lowercase dotted segments "
                "(e.g., 'invoices.create', 'jobcards.view')"
            )

    @property
    def category(self) -> str:
        """Leading segment of the code (e.g. 'invoices' for 'invoices.create')."""
        return self.value.split(".", 1)[0]


@dataclass(frozen=True)
class RoleName:
    """Value object for a role name. Unique across roles; matched against user.role."""

    value: str

    def __post_init__(self) -> None:
        """Strip surrounding whitespace and validate length.

        Raises:
            ValueError: If the name is blank or too long.
        """
        object.__setattr__(self, "value", (self.value or "").strip())
        if not self.value:
            raise ValueError("Role name must be a non-empty string")
        if len(self.value) > ROLE_NAME_MAX_LENGTH:
            raise ValueError(
                f"Role name must not exceed {ROLE_NAME_MAX_LENGTH} characters"
            )
