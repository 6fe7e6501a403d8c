"""Request context middleware.

Generates or forwards X-Request-ID, echoes it on the response and publishes
request id, client IP and user agent to app.shared.context so permission
audit rows written during the request carry them. Client-provided ids are
sanitized (length + character set) to prevent log injection.
Uses raw ASGI (no BaseHTTPMiddleware) so the contextvars are set in the
same task that runs the route.
"""

import re
import uuid
from typing import Callable

from app.shared.context import clear_request_context, set_request_context

REQUEST_ID_MAX_LENGTH = 64
REQUEST_ID_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(REQUEST_ID_MAX_LENGTH) + r"}$"
)
USER_AGENT_MAX_LENGTH = 512


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def _sanitize_request_id(raw: str | None) -> str:
    """Return raw if valid and safe; otherwise return a new UUID."""
    if not raw or not REQUEST_ID_ALLOWED_PATTERN.match(raw.strip()):
        return str(uuid.uuid4())
    return raw.strip()[:REQUEST_ID_MAX_LENGTH]


def _client_ip(scope: dict) -> str | None:
    """First X-Forwarded-For hop, falling back to the socket peer."""
    forwarded = _get_header(scope, "X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    client = scope.get("client")
    return client[0] if client else None


def RequestContextMiddleware(
    app: Callable, header_name: str = "X-Request-ID"
) -> Callable:
    """Set request id / IP / user agent for the request and echo the id. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = _sanitize_request_id(_get_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id
        user_agent = _get_header(scope, "User-Agent")
        set_request_context(
            request_id=request_id,
            ip_address=_client_ip(scope),
            user_agent=user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else None,
        )

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((header_name.encode(), request_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        finally:
            clear_request_context()

    return asgi_app
