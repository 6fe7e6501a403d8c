"""Shared utilities: request context, enums, logging, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import (
    RequestContext,
    clear_request_context,
    get_request_context,
    set_request_context,
)
from app.shared.enums import AuditAction, AuditEntityType, CheckMode
from app.shared.utils import ensure_utc, generate_cuid, utc_now

__all__ = [
    "RequestContext",
    "set_request_context",
    "clear_request_context",
    "get_request_context",
    "AuditAction",
    "AuditEntityType",
    "CheckMode",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
