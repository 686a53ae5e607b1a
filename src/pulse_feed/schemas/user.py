"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from .common import ApiModel


class Principal(BaseModel):
    """Identity asserted by the external identity provider for one request."""

    principal_id: str = Field(..., min_length=1, description="Stable provider-side user id")
    display_name: str | None = Field(None, description="Display name, if the provider has one")
    username: str | None = Field(None, description="Preferred handle, if the provider has one")
    avatar_url: str | None = Field(None, description="Profile image URL")
    email: str | None = Field(None, description="Primary email address")


class AuthorSummary(ApiModel):
    """Public profile fragment embedded in posts and follow listings."""

    id: int
    name: str
    username: str
    avatar: str | None = None


class UserResponse(ApiModel):
    """Schema for user information returned by the API."""

    id: int
    name: str
    username: str
    avatar: str | None = None
    created_at: datetime
    last_login_at: datetime


class UserProfile(UserResponse):
    """User information plus relationship counts computed on demand."""

    followers: int
    following: int
    is_following: bool = Field(False, description="Whether the viewer follows this user")


class FollowEntry(ApiModel):
    """One row of a followers/following listing."""

    user: AuthorSummary | None
    is_followed_by_me: bool
    followed_at: datetime
