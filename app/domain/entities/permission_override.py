"""Per-user permission override entity and the effective-override rule.

An override forces a single permission on (granted) or off (denied) for one
user, optionally until an expiry instant. Overrides are never mutated by the
resolver; it only asks which one is in effect.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from app.shared.utils.datetime import ensure_utc


@dataclass(frozen=True)
class PermissionOverrideEntity:
    """Domain view of a user_permission_override row."""

    id: str
    user_id: str
    permission_id: str
    granted: bool
    created_at: datetime
    expires_at: datetime | None = None
    reason: str | None = None
    created_by: str | None = None

    def is_active_at(self, now: datetime) -> bool:
        """Return True when the override has no expiry or expires strictly after now."""
        if self.expires_at is None:
            return True
        return ensure_utc(self.expires_at) > ensure_utc(now)

    def is_expired_at(self, now: datetime) -> bool:
        return not self.is_active_at(now)


def select_effective_override(
    overrides: Iterable[PermissionOverrideEntity], now: datetime
) -> PermissionOverrideEntity | None:
    """Pick the override that decides a (user, permission) pair at ``now``.

    Among active overrides the most recently created wins; equal timestamps
    fall back to the larger id so the choice is deterministic. Expired
    overrides are ignored, so the caller falls through to the role binding.

    Args:
        overrides: All overrides for one (user, permission) pair, any order.
        now: Evaluation instant (naive values are treated as UTC).

    Returns:
        The effective override, or None when none is active.
    """
    active = [o for o in overrides if o.is_active_at(now)]
    if not active:
        return None
    return max(active, key=lambda o: (ensure_utc(o.created_at), o.id))
