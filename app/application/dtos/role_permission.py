"""DTOs for role-to-permission bindings (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime

from app.application.dtos.role import RoleResult


@dataclass(frozen=True)
class RoleBindingResult:
    """One binding joined with its permission metadata."""

    role_id: str
    permission_id: str
    code: str
    name: str
    category: str
    description: str | None
    granted_by: str | None
    granted_at: datetime | None


@dataclass(frozen=True)
class RoleWithBindings:
    """Role detail: the role plus every permission bound to it."""

    role: RoleResult
    bindings: list[RoleBindingResult]

    @property
    def permission_codes(self) -> list[str]:
        return [b.code for b in self.bindings]


@dataclass(frozen=True)
class SetBindingsResult:
    """Outcome of a replace-all: ids added and removed relative to the old set."""

    role_id: str
    added_permission_ids: list[str]
    removed_permission_ids: list[str]
    bindings: list[RoleBindingResult]
