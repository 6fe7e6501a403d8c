"""Role domain entity.

Represents a named bundle of permissions. Users reference a role by its name
(user.role), so renaming or deleting a role is guarded by business rules.
"""

from dataclasses import dataclass

from app.domain.exceptions import RoleInUseException, ValidationException
from app.domain.value_objects.core import RoleName


@dataclass
class RoleEntity:
    """Domain entity for role (SRP: lifecycle rules separate from persistence).

    Inactive roles keep their bindings and still grant permissions to users
    who hold them; is_active only affects which roles are offered for
    assignment.
    """

    id: str
    name: RoleName
    is_active: bool = True
    is_system: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate role business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Role ID is required", field="id")

    def activate(self) -> None:
        """Set role active. Idempotent."""
        self.is_active = True

    def deactivate(self) -> None:
        """Set role inactive. Idempotent."""
        self.is_active = False

    def rename(self, new_name: RoleName, user_count: int = 0) -> None:
        """Rename the role. System roles and roles any user holds keep their name.

        Args:
            new_name: The requested name.
            user_count: Number of users whose role equals the current name.

        Raises:
            ValidationException: If the role is a system role.
            RoleInUseException: If any user holds the role.
        """
        if new_name.value == self.name.value:
            return
        if self.is_system:
            raise ValidationException("System roles cannot be renamed", field="name")
        if user_count > 0:
            raise RoleInUseException(self.name.value, user_count)
        self.name = new_name

    def ensure_deletable(self, user_count: int) -> None:
        """Check that no user still holds this role.

        Args:
            user_count: Number of users whose role equals this role's name.

        System roles follow the same rule; an unused one may be deleted.

        Raises:
            RoleInUseException: If any user holds the role.
        """
        if user_count > 0:
            raise RoleInUseException(self.name.value, user_count)
