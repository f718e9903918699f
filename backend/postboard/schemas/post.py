"""
Postboard Backend - Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between clients and backend.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate OpenAPI documentation.

Naming:
    Python attributes are snake_case; the JSON contract is camelCase
    (selectedFile, createdAt, currentPage, numberOfPages). CamelModel
    generates the aliases, and FastAPI serializes responses by alias.
"""

import uuid
from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for models exchanged as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _clean_tags(tags: List[str]) -> List[str]:
    """Strips labels and drops empty ones, keeping order."""
    return [tag.strip() for tag in tags if tag and tag.strip()]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(CamelModel):
    """
    Body of POST /posts.

    `creator` is accepted so existing clients can keep sending it, but the
    service always replaces it with the authenticated user id.
    """
    title: str = Field(default="", description="Post title")
    message: str = Field(default="", description="Post body text")
    tags: List[str] = Field(default_factory=list, description="Ordered tag labels")
    selected_file: Optional[str] = Field(
        default=None,
        description="Encoded attachment, e.g. a base64 data URL",
    )
    creator: Optional[str] = Field(default=None, description="Ignored; set from request context")

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)


class PostUpdate(CamelModel):
    """
    Body of PATCH /posts/{id}.

    Only fields present in the body are written. `creator` and `id` are
    accepted and ignored; created_at is not part of the body at all.
    """
    title: Optional[str] = None
    message: Optional[str] = None
    tags: Optional[List[str]] = None
    selected_file: Optional[str] = None
    creator: Optional[str] = None
    id: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return _clean_tags(v)

    # Fields the update operation is allowed to rewrite
    MUTABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset(
        {"title", "message", "tags", "selected_file"}
    )

    def changes(self) -> dict:
        """Column values to write, limited to fields the client actually sent."""
        sent = self.model_dump(exclude_unset=True)
        return {
            name: value
            for name, value in sent.items()
            if name in self.MUTABLE_FIELDS
            # selectedFile may be cleared; the other columns are NOT NULL
            and (value is not None or name == "selected_file")
        }


class CommentCreate(BaseModel):
    """Body of POST /posts/{id}/commentPost."""
    value: str = Field(min_length=1, description="Comment text to append")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PostResponse(CamelModel):
    """Full representation of a post, as stored."""
    id: uuid.UUID = Field(description="Unique post identifier (UUID)")
    title: str
    message: str
    creator: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    selected_file: Optional[str] = None
    created_at: datetime = Field(description="When the post was created (UTC ISO 8601)")
    likes: List[str] = Field(default_factory=list, description="User ids that liked the post")
    comments: List[str] = Field(default_factory=list)


class PostListResponse(CamelModel):
    """
    Page of posts returned by GET /posts.

    Offset pagination: page N covers positions (N-1)*8 .. N*8-1 of the
    newest-first ordering. number_of_pages is ceil(total / 8) at query time.
    """
    data: List[PostResponse]
    current_page: int = Field(description="Page number echoed from the request")
    number_of_pages: int = Field(description="ceil(total posts / page size)")


class PostSearchResponse(CamelModel):
    """Unpaginated search results returned by GET /posts/search."""
    data: List[PostResponse]


class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error envelope shared by every endpoint.

    Example:
        {
            "error": "not_found",
            "message": "No post with id: abc",
            "details": null,
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
