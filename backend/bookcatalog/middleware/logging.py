"""
Book Catalog Backend — Request Logging Middleware
=================================================

What:  One access log line per HTTP request.
How:   Measures the time spent in the rest of the stack and logs method,
       path, status, duration, request ID and client address on the
       `bookcatalog.access` logger. The same values go into `extra` for
       structured handlers.

What we log vs what we don't:
    Log: method, path, status, duration, client IP, request ID
    Don't log: request bodies or query strings (search terms stay out of logs)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bookcatalog.middleware.request_id import request_id_var

logger = logging.getLogger("bookcatalog.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with a level chosen by status class:
    5xx → ERROR, 4xx → WARNING, everything else → INFO.

    /health is skipped; probes hit it every few seconds.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
