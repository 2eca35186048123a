"""
Book Catalog Backend — Request ID Middleware
============================================

What:  Assigns an ID to each incoming request and returns it in X-Request-ID.
Why:   Ties together the access log line, any service log lines, and the
       `request_id` in error bodies for one request.
How:   Honours a client-supplied X-Request-ID, otherwise generates a short
       one; stores it in a ContextVar and on request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a unique ID to each request for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 hex chars are enough for correlation and stay readable in logs
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
