"""Request context management using contextvars.

Provides async-safe storage for request-scoped metadata (request id, client
IP, user agent) so the permission audit logger can stamp every row without
threading the HTTP request through the service layer.

Usage:
    set_request_context(request_id="abc", ip_address="10.0.0.1")
    ctx = get_request_context()
"""

from contextvars import ContextVar
from dataclasses import dataclass

_current_request_id: ContextVar[str | None] = ContextVar(
    "current_request_id", default=None
)
_current_ip_address: ContextVar[str | None] = ContextVar(
    "current_ip_address", default=None
)
_current_user_agent: ContextVar[str | None] = ContextVar(
    "current_user_agent", default=None
)


@dataclass(frozen=True)
class RequestContext:
    """Immutable snapshot of the current request metadata."""

    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


def set_request_context(
    request_id: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Set request metadata for the current async task.

    Call in middleware before the route runs. Values are scoped to the
    current task, so concurrent requests never see each other's metadata.
    """
    _current_request_id.set(request_id)
    _current_ip_address.set(ip_address)
    _current_user_agent.set(user_agent)


def clear_request_context() -> None:
    """Clear the current request metadata."""
    _current_request_id.set(None)
    _current_ip_address.set(None)
    _current_user_agent.set(None)


def get_request_context() -> RequestContext:
    """Return a snapshot of the current request metadata."""
    return RequestContext(
        request_id=_current_request_id.get(),
        ip_address=_current_ip_address.get(),
        user_agent=_current_user_agent.get(),
    )
