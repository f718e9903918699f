"""
Postboard Backend - Request Logging Middleware
================================================

What:  One access log line per HTTP request.
How:   Measures the time spent downstream and logs method, path, status,
       duration, request ID, user ID and client IP.
When:  After RequestIDMiddleware, so the request ID is already set.

Log levels:
    5xx → ERROR, 4xx → WARNING, everything else → INFO.

Request bodies are never logged; they can carry attachments and user text.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from postboard.middleware.request_id import request_id_var
from postboard.middleware.user_context import user_id_var

logger = logging.getLogger("postboard.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    /health is skipped; probes hit it every few seconds.
    """

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        # request.client is None under some test transports
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")
        user_id = user_id_var.get("") or "-"

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
            "%s %s %d %.1fms [%s] user=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            user_id,
            client_ip,
            extra={
                "request_id": rid,
                "user_id": user_id,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
