"""Create posts table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `posts` table: one row per post, with tags, likes and
       comments held in PostgreSQL arrays.
How:   UUID primary key, TIMESTAMP WITH TIME ZONE, array columns with
       empty-array defaults, plus the listing and tag-search indexes.

Rollback: downgrade() drops the table entirely (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the posts table with all columns, constraints, and indexes."""
    op.create_table(
        "posts",

        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Unique identifier, immutable for the life of the post",
        ),

        sa.Column("title", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("message", sa.Text(), nullable=False, server_default=sa.text("''")),

        sa.Column(
            "creator",
            sa.String(255),
            nullable=True,
            comment="Identifier of the authenticated submitter",
        ),

        sa.Column(
            "tags",
            postgresql.ARRAY(sa.String(255)),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),

        sa.Column("selected_file", sa.Text(), nullable=True),

        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this post was created (UTC)",
        ),

        sa.Column(
            "likes",
            postgresql.ARRAY(sa.String(255)),
            nullable=False,
            server_default=sa.text("'{}'"),
            comment="User ids that liked the post, at most one entry per user",
        ),

        sa.Column(
            "comments",
            postgresql.ARRAY(sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'"),
            comment="Comment texts in the order they were added",
        ),

        sa.PrimaryKeyConstraint("id"),
    )

    # Newest-first listing: ORDER BY created_at DESC
    op.create_index(
        "idx_posts_created_at",
        "posts",
        [sa.text("created_at DESC")],
    )

    # Tag search uses the array overlap operator (&&)
    op.create_index(
        "idx_posts_tags",
        "posts",
        ["tags"],
        postgresql_using="gin",
    )


def downgrade() -> None:
    """
    Drop the posts table entirely.

    WARNING: destructive, all post data is permanently lost.
    """
    op.drop_index("idx_posts_tags", table_name="posts")
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_table("posts")
