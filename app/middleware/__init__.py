"""HTTP middleware: request context (request id, client IP, user agent).

Applied in main app; order matters (first added = outermost).
"""

from app.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
