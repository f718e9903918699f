"""
Postboard Backend - Post Route Handlers
=========================================

What:  HTTP surface of the post resource.
How:   Extracts path/query/body values, delegates to PostService, returns JSON.

Endpoints:
    GET    /posts?page=N                 paginated list (8 per page)
    GET    /posts/search?searchQuery=&tags=
    GET    /posts/{id}                   single post or null
    POST   /posts                        create (authenticated)
    PATCH  /posts/{id}                   update (PUT accepted too)
    DELETE /posts/{id}                   delete
    PATCH  /posts/{id}/likePost          like toggle (authenticated)
    POST   /posts/{id}/commentPost       append comment

Path ids are taken as plain strings so the service can answer a malformed
id with 404 instead of FastAPI's 422.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.database import get_db_session
from postboard.dependencies import AuthenticatedUserId, CurrentUserId
from postboard.schemas.post import (
    CommentCreate,
    ErrorResponse,
    MessageResponse,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostSearchResponse,
    PostUpdate,
)
from postboard.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])

NOT_FOUND = {"description": "Malformed id or no such post", "model": ErrorResponse}
UNAUTHENTICATED = {"description": "No authenticated user on the request", "model": ErrorResponse}


@router.get(
    "",
    response_model=PostListResponse,
    responses={404: {"description": "Posts could not be retrieved", "model": ErrorResponse}},
    summary="List posts, newest first, 8 per page",
)
async def list_posts(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    db: AsyncSession = Depends(get_db_session),
) -> PostListResponse:
    """
    Example:
        10 posts exist → GET /posts?page=2 returns the two oldest,
        with currentPage=2 and numberOfPages=2.
    """
    return await post_service.list_posts(db=db, page=page)


@router.get(
    "/search",
    response_model=PostSearchResponse,
    responses={404: {"description": "Search failed", "model": ErrorResponse}},
    summary="Search posts by title pattern or tags",
)
async def search_posts(
    search_query: Optional[str] = Query(
        default=None,
        alias="searchQuery",
        description="Case-insensitive regular expression matched against the title",
    ),
    tags: Optional[str] = Query(
        default=None,
        description="Comma-separated tag labels; any overlap matches",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> PostSearchResponse:
    return await post_service.search_posts(db=db, search_query=search_query, tags=tags)


@router.get(
    "/{post_id}",
    response_model=Optional[PostResponse],
    responses={404: NOT_FOUND},
    summary="Get a single post (null when absent)",
)
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Optional[PostResponse]:
    return await post_service.get_post(db=db, post_id=post_id)


@router.post(
    "",
    status_code=201,
    response_model=PostResponse,
    responses={
        401: UNAUTHENTICATED,
        409: {"description": "The store rejected the post", "model": ErrorResponse},
    },
    summary="Create a post as the authenticated user",
)
async def create_post(
    payload: PostCreate,
    user_id: AuthenticatedUserId,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """creator comes from the request context; a creator in the body is ignored."""
    return await post_service.create_post(db=db, payload=payload, creator=user_id)


@router.patch(
    "/{post_id}",
    response_model=PostResponse,
    responses={404: NOT_FOUND},
    summary="Update a post's title, message, tags or attachment",
)
@router.put("/{post_id}", response_model=PostResponse, responses={404: NOT_FOUND}, include_in_schema=False)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_post(db=db, post_id=post_id, payload=payload)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={404: NOT_FOUND},
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await post_service.delete_post(db=db, post_id=post_id)


@router.patch(
    "/{post_id}/likePost",
    response_model=PostResponse,
    responses={401: UNAUTHENTICATED, 404: NOT_FOUND},
    summary="Toggle the caller's like on a post",
)
async def like_post(
    post_id: str,
    user_id: CurrentUserId,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    # Authentication is checked in the service, before the id, so an
    # anonymous caller gets 401 even for a malformed id
    return await post_service.like_post(db=db, post_id=post_id, user_id=user_id)


@router.post(
    "/{post_id}/commentPost",
    response_model=PostResponse,
    responses={404: NOT_FOUND},
    summary="Append a comment to a post",
)
async def comment_post(
    post_id: str,
    comment: CommentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.comment_post(db=db, post_id=post_id, value=comment.value)
