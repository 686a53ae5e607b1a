# src/pulse_feed/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .feed import router as feed_router
from .posts import router as posts_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "feed_router",
    "posts_router",
    "users_router",
]
