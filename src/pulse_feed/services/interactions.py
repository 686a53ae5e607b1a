"""Interaction store: likes, saves and the counters derived from them.

Writes here are single statements so that each one is atomic at the storage
layer: membership changes are conditional inserts/deletes guarded by the
composite primary keys, and counters only move by relative deltas.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pulse_feed.models import Like, Post, Save

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = ("like_count", "reply_count", "repost_count")

__all__ = [
    "bump_counter",
    "delete_if_present",
    "has_liked",
    "has_saved",
    "insert_if_absent",
    "liked_post_ids",
    "saved_post_ids",
]


def _has_row(db: Session, model: type[Like] | type[Save], user_id: int, post_id: int) -> bool:
    stmt = select(model.post_id).where(model.post_id == post_id, model.user_id == user_id)
    return db.scalar(stmt) is not None


def has_liked(db: Session, user_id: int, post_id: int) -> bool:
    """Return whether ``user_id`` has liked ``post_id``."""
    return _has_row(db, Like, user_id, post_id)


def has_saved(db: Session, user_id: int, post_id: int) -> bool:
    """Return whether ``user_id`` has saved ``post_id``."""
    return _has_row(db, Save, user_id, post_id)


def _member_post_ids(
    db: Session,
    model: type[Like] | type[Save],
    user_id: int,
    post_ids: Iterable[int],
) -> set[int]:
    ids = list(post_ids)
    if not ids:
        return set()
    rows = db.scalars(
        select(model.post_id).where(model.user_id == user_id, model.post_id.in_(ids))
    )
    return set(rows)


def liked_post_ids(db: Session, user_id: int, post_ids: Iterable[int]) -> set[int]:
    """Return the subset of ``post_ids`` the user has liked."""
    return _member_post_ids(db, Like, user_id, post_ids)


def saved_post_ids(db: Session, user_id: int, post_ids: Iterable[int]) -> set[int]:
    """Return the subset of ``post_ids`` the user has saved."""
    return _member_post_ids(db, Save, user_id, post_ids)


def insert_if_absent(db: Session, model: type[Any], **values: Any) -> bool:
    """Insert a join row unless one with the same key exists.

    Returns:
        True if this call created the row, False if it was already present.
    """
    table = model.__table__
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(table).values(**values).on_conflict_do_nothing()
    elif dialect == "sqlite":
        stmt = sqlite.insert(table).values(**values).on_conflict_do_nothing()
    else:
        # No native upsert: let the primary key reject the duplicate inside a savepoint.
        try:
            with db.begin_nested():
                db.execute(insert(table).values(**values))
        except IntegrityError:
            return False
        return True
    return db.execute(stmt).rowcount == 1


def delete_if_present(db: Session, model: type[Any], **key: Any) -> bool:
    """Delete the join row identified by ``key``.

    Returns:
        True if a row was removed, False if none existed.
    """
    table = model.__table__
    conditions = [table.c[name] == value for name, value in key.items()]
    return db.execute(delete(table).where(*conditions)).rowcount > 0


def bump_counter(db: Session, post_id: int, column: str, delta: int) -> bool:
    """Move a denormalized post counter by one, relative to its stored value.

    Decrements are floored at zero. Returns True if the post row changed.
    """
    if column not in COUNTER_COLUMNS:
        raise ValueError(f"Unknown counter column: {column}")
    if delta not in (1, -1):
        raise ValueError("Counters move by exactly one step")

    counter = getattr(Post, column)
    stmt = update(Post).where(Post.id == post_id)
    if delta > 0:
        stmt = stmt.values({counter: counter + 1})
    else:
        stmt = stmt.where(counter > 0).values({counter: counter - 1})
    changed = db.execute(stmt.execution_options(synchronize_session=False)).rowcount > 0
    if not changed:
        logger.debug("Counter %s on post %s left unchanged (delta %s)", column, post_id, delta)
    return changed
