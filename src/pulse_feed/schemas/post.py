# src/pulse_feed/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import Field

from .common import ApiModel
from .user import AuthorSummary


class PostCreate(ApiModel):
    """Schema for creating a new post or reply."""

    content: str = Field(..., min_length=1, max_length=5000, description="Post text")
    parent_id: int | None = Field(None, description="Parent post ID for replies")


class PostCreated(ApiModel):
    """Identifier of a newly created post."""

    id: int


class DeleteResult(ApiModel):
    """Outcome of a delete request."""

    success: bool


class AnnotatedPost(ApiModel):
    """A post enriched with its author's live profile and the viewer's interaction state."""

    id: int
    content: str
    created_at: datetime
    parent_id: int | None = None
    author: AuthorSummary | None
    like_count: int
    reply_count: int
    repost_count: int
    liked: bool = False
    saved: bool = False
