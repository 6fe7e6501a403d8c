"""Domain exceptions for the RBAC engine.

Defines the closed taxonomy of failures reported by the permission catalog,
role store, binding and override managers and the audit logger. These
exceptions are independent of infrastructure concerns. Presentation layer
maps them to HTTP responses in exception handlers.
"""

from typing import Any

from app.domain.enums import ErrorKind


class RbacException(Exception):
    """Base exception for all RBAC errors.

    All custom exceptions inherit from this class to allow consistent error
    handling and logging. Presentation layer maps these to HTTP responses
    using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code (an ErrorKind value).
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ResourceNotFoundException(RbacException):
    """Raised when a permission, role, user or override does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Kind of entity (e.g. 'role', 'permission', 'user').
            resource_id: The id (or code) that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            ErrorKind.RESOURCE_NOT_FOUND.value,
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicatePermissionCodeException(RbacException):
    """Raised when creating a permission whose code already exists."""

    def __init__(self, code: str) -> None:
        super().__init__(
            f"Permission with code '{code}' already exists",
            ErrorKind.DUPLICATE_CODE.value,
            {"code": code},
        )


class DuplicateRoleNameException(RbacException):
    """Raised when creating or renaming a role to a name already in use."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Role with name '{name}' already exists",
            ErrorKind.DUPLICATE_NAME.value,
            {"name": name},
        )


class DuplicateAssignmentException(RbacException):
    """Raised when binding a permission that is already bound to the role."""

    def __init__(self, role_id: str, permission_ids: list[str]) -> None:
        """Initialize with the role and the already-bound permission ids.

        Args:
            role_id: Role the bindings were requested for.
            permission_ids: Permission ids that are already bound.
        """
        super().__init__(
            "Permission already assigned to role",
            ErrorKind.DUPLICATE_BINDING.value,
            {"role_id": role_id, "permission_ids": permission_ids},
        )


class RoleInUseException(RbacException):
    """Raised when deleting a role that users still hold."""

    def __init__(self, role_name: str, user_count: int) -> None:
        super().__init__(
            f"Role '{role_name}' is in use: {user_count} users assigned",
            ErrorKind.ROLE_IN_USE.value,
            {"role_name": role_name, "user_count": user_count},
        )


class PermissionInUseException(RbacException):
    """Raised when deleting a permission still bound to a role or override."""

    def __init__(self, code: str, role_count: int, override_count: int) -> None:
        super().__init__(
            f"Permission '{code}' is in use by {role_count} roles "
            f"and {override_count} user overrides",
            ErrorKind.PERMISSION_IN_USE.value,
            {
                "code": code,
                "role_count": role_count,
                "override_count": override_count,
            },
        )


class ValidationException(RbacException):
    """Raised when input validation fails (e.g. expiry not in the future)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, ErrorKind.VALIDATION_ERROR.value, details)


class StorageException(RbacException):
    """Raised when a transaction or the database transport fails.

    The enclosing transaction has been rolled back when this surfaces; the
    caller decides whether to retry.
    """

    def __init__(self, cause: BaseException | str) -> None:
        reason = cause if isinstance(cause, str) else type(cause).__name__
        super().__init__(
            "Storage operation failed",
            ErrorKind.STORAGE_ERROR.value,
            {"cause": reason},
        )


class AuthenticationException(RbacException):
    """Raised when the bearer token is missing, invalid or names no active user."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, ErrorKind.AUTHENTICATION_ERROR.value)


class AuthorizationException(RbacException):
    """Raised when the caller lacks the permission or role a route requires.

    Details carry only what the caller needed (requiredPermission,
    requiredPermissions or requiredRoles), never internal decision state.
    """

    def __init__(
        self,
        required_permission: str | None = None,
        required_permissions: list[str] | None = None,
        required_roles: list[str] | None = None,
        message: str = "Forbidden: Insufficient permissions",
    ) -> None:
        details: dict[str, Any] = {}
        if required_permission:
            details["requiredPermission"] = required_permission
        if required_permissions:
            details["requiredPermissions"] = required_permissions
        if required_roles:
            details["requiredRoles"] = required_roles
        super().__init__(message, ErrorKind.PERMISSION_DENIED.value, details)


class SqlNotConfiguredException(RbacException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code=ErrorKind.SERVICE_UNAVAILABLE.value,
        )
