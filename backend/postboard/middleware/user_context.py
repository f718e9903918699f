"""
Postboard Backend - User Context Middleware
=============================================

What:  Copies the authenticated user id forwarded by the upstream gateway
       onto the request.
How:   Reads the header named by settings.user_id_header and stores the value
       in request.state.user_id and in a ContextVar for log correlation.
When:  Outermost middleware, before request ID and logging.

This middleware performs no verification. The gateway in front of the
service authenticates callers and strips the header from untrusted traffic.
A missing or blank header leaves request.state.user_id as None.
"""

from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from postboard.config import settings

user_id_var: ContextVar[str] = ContextVar("user_id", default="")


class UserContextMiddleware(BaseHTTPMiddleware):
    """Populates request.state.user_id from the trusted user id header."""

    def __init__(self, app, header_name: str | None = None, **kwargs):
        super().__init__(app, **kwargs)
        self.header_name = header_name or settings.user_id_header

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        user_id = request.headers.get(self.header_name, "").strip()

        request.state.user_id = user_id or None
        user_id_var.set(user_id)

        return await call_next(request)
