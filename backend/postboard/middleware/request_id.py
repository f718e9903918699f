"""
Postboard Backend - Request ID Middleware
===========================================

What:  Gives every request a correlation ID and echoes it in X-Request-ID.
How:   A well-formed client ID (up to 64 word characters, dots or dashes) is
       reused; anything else is replaced by 8 hex characters of a fresh UUID.
       The ID goes into a ContextVar, request.state and the response header.
When:  Runs before the logging middleware so access logs carry the ID.

Error envelopes repeat the same ID in `request_id`, so a client can quote
it and the matching log lines can be found directly.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied IDs end up in log lines and response headers
_VALID_REQUEST_ID = re.compile(r"^[\w.\-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(incoming: str | None) -> str:
    """Keep a well-formed incoming ID, otherwise mint a short one."""
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each request and its response with a correlation ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
