"""Request context middleware using ContextVar.

Takes the request ID from the X-Request-ID header (or generates one). The
ID is stored in a ContextVar and bound into structlog's context so that
every log line emitted while handling the request (router, service,
repository) carries it without explicit parameter passing.
"""

import uuid
from contextvars import ContextVar

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# ---------------------------------------------------------------------------
# Context variable — thread/task-safe request state
# ---------------------------------------------------------------------------

_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def get_current_request_id() -> str | None:
    """Return the ID of the request being handled, if any."""
    return _current_request_id.get()


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID and expose it to logs and the response.

    Priority:
    1. X-Request-ID header (propagated from an upstream proxy)
    2. Freshly generated uuid4
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        token = _current_request_id.set(request_id)
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
            _current_request_id.reset(token)
