# src/pulse_feed/models/__init__.py
"""SQLAlchemy models for the Pulse Feed application."""

from .follow import Follow
from .interaction import Like, Save
from .post import Post
from .user import User

__all__ = [
    "Follow",
    "Like", "Save",
    "Post",
    "User",
]
