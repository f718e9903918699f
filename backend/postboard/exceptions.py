"""
Postboard Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return one JSON error envelope with the matching HTTP status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    PostboardError (base)          → 500 Internal Server Error
    ├── AuthenticationError        → 401 Unauthorized
    ├── NotFoundError              → 404 Not Found
    │   └── InvalidPostIdError     → 404 Not Found (malformed identifier)
    ├── ConflictError              → 409 Conflict
    └── DatabaseError              → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(PostboardError):
    """
    Raised when an operation needs the caller's user id and none was forwarded.

    The upstream gateway owns authentication. This service only checks that
    the gateway populated the user context.
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Unauthenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PostboardError):
    """
    Raised when a requested resource does not exist or cannot be looked up.

    Also used for list/search failures, which clients of this API have
    always received as 404.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidPostIdError(NotFoundError):
    """
    Raised when a path identifier is not a well-formed post id.

    Raised before any store call, so a malformed id never reaches the database.
    """

    def __init__(self, post_id: str):
        super().__init__(
            resource="post",
            resource_id=post_id,
            message=f"No post with id: {post_id}",
        )
        self.post_id = post_id


class ConflictError(PostboardError):
    """
    Raised when the store rejects a write (constraint or type violation).

    HTTP: 409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The post could not be saved",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PostboardError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Detailed error
    info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
