"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    PermissionOverrideEntity,
    RoleEntity,
    select_effective_override,
)
from app.domain.enums import ErrorKind
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DuplicateAssignmentException,
    DuplicatePermissionCodeException,
    DuplicateRoleNameException,
    PermissionInUseException,
    RbacException,
    ResourceNotFoundException,
    RoleInUseException,
    SqlNotConfiguredException,
    StorageException,
    ValidationException,
)
from app.domain.value_objects import PermissionCode, RoleName

__all__ = [
    # Entities
    "PermissionOverrideEntity",
    "RoleEntity",
    "select_effective_override",
    # Enums
    "ErrorKind",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "DuplicateAssignmentException",
    "DuplicatePermissionCodeException",
    "DuplicateRoleNameException",
    "PermissionInUseException",
    "RbacException",
    "ResourceNotFoundException",
    "RoleInUseException",
    "SqlNotConfiguredException",
    "StorageException",
    "ValidationException",
    # Value objects
    "PermissionCode",
    "RoleName",
]
