"""Domain enumerations for the RBAC engine.

Enums represent fixed sets of domain values (e.g. the closed set of
error kinds every RBAC failure maps to).
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of machine-readable error codes for RBAC failures.

    Every RbacException carries exactly one of these as error_code; the
    presentation layer maps each kind to an HTTP status.
    """

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    DUPLICATE_CODE = "DUPLICATE_CODE"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    DUPLICATE_BINDING = "DUPLICATE_BINDING"
    ROLE_IN_USE = "ROLE_IN_USE"
    PERMISSION_IN_USE = "PERMISSION_IN_USE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    @classmethod
    def values(cls) -> list[str]:
        """Return all error codes as strings."""
        return [kind.value for kind in cls]
