"""
Postboard Backend - Request Dependencies
==========================================

What:  Route-level access to the caller's user id.
How:   Reads request.state.user_id set by UserContextMiddleware.
       CurrentUserId yields None for anonymous callers; AuthenticatedUserId
       rejects them with AuthenticationError (401) before the handler runs.
Who:   create_post takes AuthenticatedUserId. like_post takes CurrentUserId
       and checks authentication in the service, ahead of id validation.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request

from postboard.exceptions import AuthenticationError


async def get_current_user_id(request: Request) -> Optional[str]:
    """User id placed on the request by UserContextMiddleware, or None."""
    return getattr(request.state, "user_id", None)


async def require_user_id(
    user_id: Optional[str] = Depends(get_current_user_id),
) -> str:
    """Same as get_current_user_id, but rejects anonymous requests with 401."""
    if not user_id:
        raise AuthenticationError()
    return user_id


# Type annotations for dependency injection in route signatures
CurrentUserId = Annotated[Optional[str], Depends(get_current_user_id)]
AuthenticatedUserId = Annotated[str, Depends(require_user_id)]
