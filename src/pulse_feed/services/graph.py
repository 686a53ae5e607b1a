"""Social graph store: follow edges and the listings built on them."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from pulse_feed.models import Follow, User
from pulse_feed.schemas.common import Page
from pulse_feed.schemas.user import FollowEntry
from pulse_feed.services.cursor import (
    Position,
    decode_cursor,
    keyset_before,
    resolve_page_size,
    slice_page,
)
from pulse_feed.services.identity import get_user_or_404, to_author_summary

__all__ = [
    "follow_counts",
    "followed_ids",
    "following_among",
    "get_followers",
    "get_following",
    "is_following",
]


def is_following(db: Session, follower_id: int, followed_id: int) -> bool:
    """Return whether ``follower_id`` follows ``followed_id``."""
    stmt = select(Follow.follower_id).where(
        Follow.follower_id == follower_id,
        Follow.followed_id == followed_id,
    )
    return db.scalar(stmt) is not None


def followed_ids(db: Session, follower_id: int) -> list[int]:
    """Return the ids of every user ``follower_id`` follows."""
    return list(db.scalars(select(Follow.followed_id).where(Follow.follower_id == follower_id)))


def following_among(db: Session, follower_id: int, candidate_ids: Iterable[int]) -> set[int]:
    """Return the subset of ``candidate_ids`` that ``follower_id`` follows."""
    ids = list(candidate_ids)
    if not ids:
        return set()
    stmt = select(Follow.followed_id).where(
        Follow.follower_id == follower_id,
        Follow.followed_id.in_(ids),
    )
    return set(db.scalars(stmt))


def follow_counts(db: Session, user_id: int) -> dict[str, int]:
    """Count follow edges touching ``user_id``; nothing is denormalized for follows."""
    followers = db.scalar(
        select(func.count()).select_from(Follow).where(Follow.followed_id == user_id)
    )
    following = db.scalar(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    )
    return {"followers": int(followers or 0), "following": int(following or 0)}


def _list_edges(
    db: Session,
    *,
    anchor_column,
    other_column,
    anchor_id: int,
    viewer: User | None,
    cursor: str | None,
    page_size: int | None,
    viewer_owns_list: bool,
) -> Page[FollowEntry]:
    size = resolve_page_size(page_size)
    position = decode_cursor(cursor)

    stmt = select(Follow).where(anchor_column == anchor_id)
    if position is not None:
        stmt = stmt.where(keyset_before(Follow.created_at, other_column, position))
    stmt = stmt.order_by(desc(Follow.created_at), desc(other_column)).limit(size + 1)
    rows = list(db.scalars(stmt))

    def other_id(edge: Follow) -> int:
        return getattr(edge, other_column.key)

    edges, next_cursor, is_done = slice_page(
        rows, size, lambda edge: Position.of(edge.created_at, other_id(edge))
    )

    ids = [other_id(edge) for edge in edges]
    users = {user.id: user for user in db.scalars(select(User).where(User.id.in_(ids)))}
    followed_by_viewer: set[int] = set()
    if viewer is not None and not viewer_owns_list:
        followed_by_viewer = following_among(db, viewer.id, ids)

    items = []
    for edge in edges:
        user = users.get(other_id(edge))
        items.append(
            FollowEntry(
                user=to_author_summary(user) if user is not None else None,
                is_followed_by_me=viewer_owns_list or other_id(edge) in followed_by_viewer,
                followed_at=edge.created_at,
            )
        )
    return Page[FollowEntry](items=items, continue_cursor=next_cursor, is_done=is_done)


def get_followers(
    db: Session,
    user_id: int,
    viewer: User | None,
    cursor: str | None = None,
    page_size: int | None = None,
) -> Page[FollowEntry]:
    """List users following ``user_id``, most recent follow first."""
    get_user_or_404(db, user_id)
    return _list_edges(
        db,
        anchor_column=Follow.followed_id,
        other_column=Follow.follower_id,
        anchor_id=user_id,
        viewer=viewer,
        cursor=cursor,
        page_size=page_size,
        viewer_owns_list=False,
    )


def get_following(
    db: Session,
    user_id: int,
    viewer: User | None,
    cursor: str | None = None,
    page_size: int | None = None,
) -> Page[FollowEntry]:
    """List users ``user_id`` follows, most recent follow first.

    When viewers look at their own list every entry is followed by them, so the
    per-row lookup is skipped.
    """
    get_user_or_404(db, user_id)
    return _list_edges(
        db,
        anchor_column=Follow.follower_id,
        other_column=Follow.followed_id,
        anchor_id=user_id,
        viewer=viewer,
        cursor=cursor,
        page_size=page_size,
        viewer_owns_list=viewer is not None and viewer.id == user_id,
    )
