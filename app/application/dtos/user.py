"""DTOs for the user-identity collaborator (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """Identity read-model: the only user fields the RBAC engine consults."""

    id: str
    email: str
    role: str | None
    is_active: bool
