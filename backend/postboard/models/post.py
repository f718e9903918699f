"""
Postboard Backend - Post SQLAlchemy Model
===========================================

What:  ORM model representing the `posts` table in PostgreSQL.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by PostService for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key, assigned at creation and never rewritten
    - tags / likes / comments are PostgreSQL arrays, so one row holds the
      whole document and array operators can modify it in place
    - likes has set semantics; the service only adds an id that is absent
    - created_at: UTC with timezone, set once at creation

Indexes:
    - created_at DESC for the newest-first listing
    - GIN on tags for the `&&` overlap search
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import ARRAY, UUID, TIMESTAMP

from postboard.database import Base


class Post(Base):
    """
    A single post document.

    Lifecycle:
        1. Created by POST /posts (creator and created_at set server-side)
        2. Mutated in place by update, like toggle and comment append
        3. Removed by delete (no soft delete)

    Query Patterns:
        - Page of recent posts: ORDER BY created_at DESC, id DESC OFFSET n LIMIT 8
        - Single post: WHERE id = :uuid (primary key)
        - Search: WHERE title ~* :pattern OR tags && :tags
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
        comment="Unique identifier, immutable for the life of the post",
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    # Set from the request's user context on create; never taken from the body
    creator: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Identifier of the authenticated submitter",
    )

    tags: Mapped[List[str]] = mapped_column(
        ARRAY(String(255)),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
    )

    # Opaque encoded attachment (typically a base64 data URL)
    selected_file: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this post was created (UTC)",
    )

    likes: Mapped[List[str]] = mapped_column(
        ARRAY(String(255)),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
        comment="User ids that liked the post, at most one entry per user",
    )

    comments: Mapped[List[str]] = mapped_column(
        ARRAY(Text),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
        comment="Comment texts in the order they were added",
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
        Index("idx_posts_tags", tags, postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, title='{self.title}', "
            f"created_at='{self.created_at}')>"
        )
