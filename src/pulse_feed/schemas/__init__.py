# src/pulse_feed/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ApiModel, Page
from .interaction import FollowResult, LikeResult, SaveResult
from .post import AnnotatedPost, DeleteResult, PostCreate, PostCreated
from .user import AuthorSummary, FollowEntry, Principal, UserProfile, UserResponse

__all__ = [
    "ApiModel", "Page",
    "FollowResult", "LikeResult", "SaveResult",
    "AnnotatedPost", "DeleteResult", "PostCreate", "PostCreated",
    "AuthorSummary", "FollowEntry", "Principal", "UserProfile", "UserResponse",
]
