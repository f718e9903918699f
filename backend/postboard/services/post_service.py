"""
Postboard Backend - Post Service (Business Logic)
===================================================

What:  All post operations: list, search, get, create, update, delete,
       like toggle and comment append.
How:   Each method builds one or two SQLAlchemy statements against the
       `posts` table and maps the result to response schemas.
Who:   Called by route handlers in routes/posts.py.

Error Mapping:
    Store failures are translated into application exceptions here so the
    routes never see SQLAlchemy errors:
        list / search / get  → NotFoundError (404)
        create               → ConflictError (409)
        update / delete /
        like / comment       → DatabaseError (500)
    Malformed ids raise InvalidPostIdError before any statement executes.

Concurrency:
    Like and comment are single UPDATE ... RETURNING statements using
    PostgreSQL array functions. The row lock taken by UPDATE serializes
    concurrent toggles and appends on the same post, so none are lost.

Design Decision:
    PostService is stateless; the session is passed into every call. A
    module-level singleton is shared by all requests.
"""

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import String, Text, any_, case, delete, desc, func, literal, or_, select, update
from sqlalchemy.sql.elements import Case
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    InvalidPostIdError,
    NotFoundError,
)
from postboard.models.post import Post
from postboard.schemas.post import (
    MessageResponse,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostSearchResponse,
    PostUpdate,
)

logger = logging.getLogger(__name__)

# Page size of the paginated listing
PAGE_LIMIT = 8

DELETED_MESSAGE = "Post deleted successfully."


def parse_post_id(post_id: str) -> uuid.UUID:
    """
    Validate a path identifier and convert it to a UUID.

    Raises:
        InvalidPostIdError: post_id is not a UUID (→ 404, store not queried)
    """
    try:
        return uuid.UUID(str(post_id))
    except (ValueError, TypeError):
        raise InvalidPostIdError(post_id)


def parse_tags(tags: Optional[str]) -> List[str]:
    """Split the comma-separated `tags` query parameter into labels."""
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def page_count(total: int) -> int:
    """Number of pages needed to show `total` posts."""
    return math.ceil(total / PAGE_LIMIT)


def toggled_likes(user_id) -> Case:
    """
    likes with user_id removed when present, appended otherwise.

    array_remove drops every occurrence, so applying the toggle twice
    restores the original membership and never leaves a duplicate.
    """
    user = literal(str(user_id), String)
    likes_type = ARRAY(String)
    return case(
        (user == any_(Post.likes), func.array_remove(Post.likes, user, type_=likes_type)),
        else_=func.array_append(Post.likes, user, type_=likes_type),
    )


def _newest_first(query):
    # id breaks ties between posts created in the same instant
    return query.order_by(desc(Post.created_at), desc(Post.id))


class PostService:
    """
    Business logic layer for post operations.

    Responsibilities:
        - list_posts(): offset pagination, newest first
        - search_posts(): title pattern OR tag overlap
        - get_post(): single post, None when absent
        - create_post() / update_post() / delete_post()
        - like_post() / comment_post(): atomic array updates
    """

    async def list_posts(self, db: AsyncSession, page: int = 1) -> PostListResponse:
        """
        Return one page of posts, newest first.

        Query plan:
            SELECT count(posts.id) FROM posts
            SELECT * FROM posts ORDER BY created_at DESC, id DESC
            LIMIT 8 OFFSET (page - 1) * 8

        The count and the page are separate statements, so a write landing
        between them can make number_of_pages momentarily stale.

        Raises:
            NotFoundError: the store failed to answer (→ 404)
        """
        start_index = (page - 1) * PAGE_LIMIT

        try:
            count_result = await db.execute(select(func.count(Post.id)))
            total = count_result.scalar() or 0

            result = await db.execute(
                _newest_first(select(Post)).offset(start_index).limit(PAGE_LIMIT)
            )
            posts = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing posts (page=%d): %s", page, str(e))
            raise NotFoundError(
                resource="posts",
                message="Could not retrieve posts. Please try again.",
                context={"page": page, "error_type": type(e).__name__},
            )

        return PostListResponse(
            data=[PostResponse.model_validate(post) for post in posts],
            current_page=page,
            number_of_pages=page_count(total),
        )

    async def search_posts(
        self,
        db: AsyncSession,
        search_query: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> PostSearchResponse:
        """
        Return every post whose title matches OR whose tags overlap.

        search_query is a case-insensitive regular expression (PostgreSQL `~*`);
        tags is a comma-separated list matched with the array overlap operator
        (`&&`). Either criterion alone is enough for a post to match. With
        neither supplied, nothing matches.

        Raises:
            NotFoundError: the store failed, including an invalid pattern (→ 404)
        """
        conditions = []
        if search_query:
            conditions.append(Post.title.regexp_match(search_query, flags="i"))

        tag_list = parse_tags(tags)
        if tag_list:
            conditions.append(Post.tags.overlap(tag_list))

        if not conditions:
            return PostSearchResponse(data=[])

        try:
            result = await db.execute(_newest_first(select(Post).where(or_(*conditions))))
            posts = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.warning(
                "Search failed (query=%r, tags=%r): %s", search_query, tag_list, str(e)
            )
            raise NotFoundError(
                resource="posts",
                message="Could not search posts. Check the search pattern and try again.",
                context={"error_type": type(e).__name__},
            )

        logger.debug("Search matched %d posts", len(posts))
        return PostSearchResponse(data=[PostResponse.model_validate(post) for post in posts])

    async def get_post(self, db: AsyncSession, post_id: str) -> Optional[PostResponse]:
        """
        Retrieve a single post by ID.

        Returns None when no post has this id; the route renders that as
        JSON null rather than an error.

        Raises:
            InvalidPostIdError: malformed id (→ 404)
            NotFoundError: the store failed to answer (→ 404)
        """
        pid = parse_post_id(post_id)

        try:
            result = await db.execute(select(Post).where(Post.id == pid))
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", pid, str(e))
            raise NotFoundError(
                resource="post",
                resource_id=str(pid),
                message="Could not retrieve the post. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if post is None:
            return None
        return PostResponse.model_validate(post)

    async def create_post(
        self,
        db: AsyncSession,
        payload: PostCreate,
        creator: str,
    ) -> PostResponse:
        """
        Persist a new post.

        creator and created_at are always set here; payload.creator is
        ignored. The id is generated client-side so it is known before flush.

        Raises:
            AuthenticationError: no creator (→ 401)
            ConflictError: the store rejected the insert (→ 409)
        """
        if not creator:
            raise AuthenticationError()

        post = Post(
            id=uuid.uuid4(),
            title=payload.title,
            message=payload.message,
            tags=list(payload.tags),
            selected_file=payload.selected_file,
            creator=str(creator),
            created_at=datetime.now(timezone.utc),
            likes=[],
            comments=[],
        )
        db.add(post)

        try:
            # Flush surfaces constraint errors now; commit happens in get_db_session
            await db.flush()
        except SQLAlchemyError as e:
            logger.warning("Post insert rejected for creator %s: %s", creator, str(e))
            raise ConflictError(
                message="The post could not be saved. Check the submitted fields.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Post %s created by %s", post.id, creator)
        return PostResponse.model_validate(post)

    async def update_post(
        self,
        db: AsyncSession,
        post_id: str,
        payload: PostUpdate,
    ) -> PostResponse:
        """
        Rewrite the mutable fields present in the payload.

        Only title, message, tags and selected_file are written; id,
        creator and created_at are never touched. Existence is decided by
        the UPDATE itself: no row returned means no such post.

        Raises:
            InvalidPostIdError: malformed id, store not queried (→ 404)
            NotFoundError: no post with this id (→ 404)
            DatabaseError: the store failed (→ 500)
        """
        pid = parse_post_id(post_id)
        changes = payload.changes()

        if changes:
            statement = (
                update(Post)
                .where(Post.id == pid)
                .values(**changes)
                .returning(Post)
            )
        else:
            statement = select(Post).where(Post.id == pid)

        post = await self._fetch_one(db, statement, pid, action="updating")
        logger.info("Post %s updated (%s)", pid, ", ".join(sorted(changes)) or "no changes")
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, post_id: str) -> MessageResponse:
        """
        Remove a post.

        The confirmation is the same whether or not a post existed.

        Raises:
            InvalidPostIdError: malformed id, store not queried (→ 404)
            DatabaseError: the store failed (→ 500)
        """
        pid = parse_post_id(post_id)

        try:
            result = await db.execute(delete(Post).where(Post.id == pid))
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %s: %s", pid, str(e))
            raise DatabaseError(
                message="Could not delete the post. Please try again.",
                context={"post_id": str(pid), "error_type": type(e).__name__},
            )

        logger.info("Delete post %s (rows=%s)", pid, getattr(result, "rowcount", None))
        return MessageResponse(message=DELETED_MESSAGE)

    async def like_post(
        self,
        db: AsyncSession,
        post_id: str,
        user_id: Optional[str],
    ) -> PostResponse:
        """
        Toggle the caller's like on a post.

        SQL:
            UPDATE posts SET likes = CASE
                WHEN :user = ANY(likes) THEN array_remove(likes, :user)
                ELSE array_append(likes, :user)
            END
            WHERE id = :id RETURNING *

        Raises:
            AuthenticationError: no user id on the request (→ 401)
            InvalidPostIdError: malformed id, store not queried (→ 404)
            NotFoundError: no post with this id (→ 404)
        """
        if not user_id:
            raise AuthenticationError()

        pid = parse_post_id(post_id)
        statement = (
            update(Post)
            .where(Post.id == pid)
            .values(likes=toggled_likes(user_id))
            .returning(Post)
        )

        post = await self._fetch_one(db, statement, pid, action="liking")
        logger.info(
            "User %s toggled like on post %s (liked=%s)",
            user_id, pid, str(user_id) in post.likes,
        )
        return PostResponse.model_validate(post)

    async def comment_post(self, db: AsyncSession, post_id: str, value: str) -> PostResponse:
        """
        Append a comment to a post with array_append in one UPDATE.

        Raises:
            InvalidPostIdError: malformed id, store not queried (→ 404)
            NotFoundError: no post with this id (→ 404)
        """
        pid = parse_post_id(post_id)

        statement = (
            update(Post)
            .where(Post.id == pid)
            .values(
                comments=func.array_append(
                    Post.comments, literal(value, Text), type_=ARRAY(Text)
                )
            )
            .returning(Post)
        )

        post = await self._fetch_one(db, statement, pid, action="commenting on")
        logger.info("Comment added to post %s (%d total)", pid, len(post.comments))
        return PostResponse.model_validate(post)

    async def _fetch_one(self, db: AsyncSession, statement, pid: uuid.UUID, action: str) -> Post:
        """Execute a statement expected to yield one Post; 404 when it yields none."""
        try:
            result = await db.execute(statement)
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error %s post %s: %s", action, pid, str(e))
            raise DatabaseError(
                message="Could not save changes to the post. Please try again.",
                context={"post_id": str(pid), "error_type": type(e).__name__},
            )

        if post is None:
            raise NotFoundError(
                resource="post",
                resource_id=str(pid),
                message=f"No post with id: {pid}",
            )
        return post


post_service = PostService()
