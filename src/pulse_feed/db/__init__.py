"""Storage layer: engine, sessions and time helpers."""

from .session import Base, SessionLocal, create_tables, get_db
from .time import as_utc, utcnow

__all__ = ["Base", "SessionLocal", "as_utc", "create_tables", "get_db", "utcnow"]
