"""Feed composer: ordered, annotated, paginated views over posts.

Every listing returns a :class:`~pulse_feed.schemas.common.Page` of
:class:`~pulse_feed.schemas.post.AnnotatedPost` and uses the keyset cursors from
:mod:`pulse_feed.services.cursor`.

The global feed is one indexed range scan. The following feed has no single
index to scan, so it merges one sorted stream per followed author with
``heapq.merge``; each stream reads at most a page past the cursor.
"""
from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Sequence

from sqlalchemy import desc, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from pulse_feed.core.errors import Unauthenticated, ValidationError
from pulse_feed.models import Post, Save, User
from pulse_feed.schemas.common import Page
from pulse_feed.schemas.post import AnnotatedPost
from pulse_feed.services import graph, interactions
from pulse_feed.services.cursor import (
    Position,
    decode_cursor,
    keyset_before,
    resolve_page_size,
    slice_page,
)
from pulse_feed.services.identity import get_user_or_404, to_author_summary

logger = logging.getLogger(__name__)

FEED_ALL = "all"
FEED_FOLLOWING = "following"
FEED_VARIANTS = (FEED_ALL, FEED_FOLLOWING)

__all__ = [
    "FEED_VARIANTS",
    "annotate_posts",
    "get_feed",
    "get_post",
    "get_replies",
    "get_saved_posts",
    "get_user_posts",
    "search_posts",
]


def _post_position(post: Post) -> Position:
    return Position.of(post.created_at, post.id)


def annotate_posts(
    db: Session,
    posts: Sequence[Post],
    viewer: User | None,
    *,
    all_saved: bool = False,
) -> list[AnnotatedPost]:
    """Attach live author profiles and the viewer's like/save flags to ``posts``.

    Posts whose author no longer exists are kept with ``author=None``.
    """
    if not posts:
        return []

    author_ids = {post.user_id for post in posts}
    authors = {
        user.id: user for user in db.scalars(select(User).where(User.id.in_(author_ids)))
    }

    post_ids = [post.id for post in posts]
    liked: set[int] = set()
    saved: set[int] = set()
    if viewer is not None:
        liked = interactions.liked_post_ids(db, viewer.id, post_ids)
        if not all_saved:
            saved = interactions.saved_post_ids(db, viewer.id, post_ids)

    annotated = []
    for post in posts:
        author = authors.get(post.user_id)
        annotated.append(
            AnnotatedPost(
                id=post.id,
                content=post.content,
                created_at=post.created_at,
                parent_id=post.parent_id,
                author=to_author_summary(author) if author is not None else None,
                like_count=post.like_count,
                reply_count=post.reply_count,
                repost_count=post.repost_count,
                liked=post.id in liked,
                saved=all_saved or post.id in saved,
            )
        )
    return annotated


def _scan(db: Session, stmt: Select, position: Position | None, limit: int) -> list[Post]:
    if position is not None:
        stmt = stmt.where(keyset_before(Post.created_at, Post.id, position))
    stmt = stmt.order_by(desc(Post.created_at), desc(Post.id)).limit(limit)
    return list(db.scalars(stmt))


def _build_page(
    db: Session,
    rows: Sequence[Post],
    size: int,
    viewer: User | None,
) -> Page[AnnotatedPost]:
    posts, next_cursor, is_done = slice_page(rows, size, _post_position)
    return Page[AnnotatedPost](
        items=annotate_posts(db, posts, viewer),
        continue_cursor=next_cursor,
        is_done=is_done,
    )


def _indexed_page(
    db: Session,
    stmt: Select,
    viewer: User | None,
    cursor: str | None,
    page_size: int | None,
) -> Page[AnnotatedPost]:
    size = resolve_page_size(page_size)
    rows = _scan(db, stmt, decode_cursor(cursor), size + 1)
    return _build_page(db, rows, size, viewer)


def _following_page(
    db: Session,
    viewer: User | None,
    cursor: str | None,
    page_size: int | None,
) -> Page[AnnotatedPost]:
    if viewer is None:
        raise Unauthenticated("Authentication required")
    size = resolve_page_size(page_size)
    position = decode_cursor(cursor)

    author_ids = graph.followed_ids(db, viewer.id)
    if not author_ids:
        return Page[AnnotatedPost](items=[], continue_cursor=None, is_done=True)

    streams = [
        _scan(db, select(Post).where(Post.user_id == author_id), position, size + 1)
        for author_id in author_ids
    ]
    merged = heapq.merge(*streams, key=_post_position, reverse=True)
    rows = list(itertools.islice(merged, size + 1))
    logger.debug(
        "Merged %d author streams for viewer %s into %d rows",
        len(streams),
        viewer.id,
        len(rows),
    )
    return _build_page(db, rows, size, viewer)


def get_feed(
    db: Session,
    variant: str,
    viewer: User | None,
    cursor: str | None = None,
    page_size: int | None = None,
) -> Page[AnnotatedPost]:
    """Return one page of the ``"all"`` or ``"following"`` feed, newest first.

    Args:
        db: Database session
        variant: ``"all"`` for every post, ``"following"`` for followed authors only
        viewer: Signed-in user, if any; required for ``"following"``
        cursor: Continuation token from the previous page, or None to start
        page_size: Items per page; defaults to the configured feed page size

    Raises:
        Unauthenticated: ``"following"`` requested without a viewer
        ValidationError: Unknown variant, bad cursor, or page size out of range
    """
    if variant == FEED_ALL:
        return _indexed_page(db, select(Post), viewer, cursor, page_size)
    if variant == FEED_FOLLOWING:
        return _following_page(db, viewer, cursor, page_size)
    raise ValidationError(f"Unknown feed variant: {variant}")


def get_post(db: Session, post_id: int, viewer: User | None) -> AnnotatedPost | None:
    """Return a single annotated post, or None if it does not exist."""
    post = db.get(Post, post_id)
    if post is None:
        return None
    return annotate_posts(db, [post], viewer)[0]


def get_replies(
    db: Session,
    post_id: int,
    viewer: User | None,
    cursor: str | None = None,
    page_size: int | None = None,
) -> Page[AnnotatedPost]:
    """List direct replies to ``post_id``, newest first.

    Works for deleted parents too, so orphaned replies stay reachable.
    """
    stmt = select(Post).where(Post.parent_id == post_id)
    return _indexed_page(db, stmt, viewer, cursor, page_size)


def get_user_posts(
    db: Session,
    user_id: int,
    viewer: User | None,
    cursor: str | None = None,
    page_size: int | None = None,
) -> Page[AnnotatedPost]:
    """List posts authored by ``user_id``, newest first."""
    get_user_or_404(db, user_id)
    stmt = select(Post).where(Post.user_id == user_id)
    return _indexed_page(db, stmt, viewer, cursor, page_size)


def get_saved_posts(
    db: Session,
    viewer: User | None,
    cursor: str | None = None,
    page_size: int | None = None,
) -> Page[AnnotatedPost]:
    """List the viewer's saved posts, most recently saved first.

    Pagination runs over the save rows; posts deleted since they were saved are
    skipped, so a page may hold fewer items than ``page_size``.
    """
    if viewer is None:
        raise Unauthenticated("Authentication required")
    size = resolve_page_size(page_size)
    position = decode_cursor(cursor)

    stmt = select(Save).where(Save.user_id == viewer.id)
    if position is not None:
        stmt = stmt.where(keyset_before(Save.created_at, Save.post_id, position))
    stmt = stmt.order_by(desc(Save.created_at), desc(Save.post_id)).limit(size + 1)
    saves, next_cursor, is_done = slice_page(
        list(db.scalars(stmt)),
        size,
        lambda save: Position.of(save.created_at, save.post_id),
    )

    post_ids = [save.post_id for save in saves]
    found = {post.id: post for post in db.scalars(select(Post).where(Post.id.in_(post_ids)))}
    posts = [found[post_id] for post_id in post_ids if post_id in found]
    return Page[AnnotatedPost](
        items=annotate_posts(db, posts, viewer, all_saved=True),
        continue_cursor=next_cursor,
        is_done=is_done,
    )


def search_posts(
    db: Session,
    query: str,
    viewer: User | None,
    cursor: str | None = None,
    page_size: int | None = None,
) -> Page[AnnotatedPost]:
    """Case-insensitive substring search over post content, newest first.

    This is a full scan of the post table and is not meant to scale.
    """
    needle = (query or "").strip().lower()
    if not needle:
        raise ValidationError("Search query must not be empty")
    size = resolve_page_size(page_size)
    position = decode_cursor(cursor)

    matches = [post for post in db.scalars(select(Post)) if needle in post.content.lower()]
    matches.sort(key=_post_position, reverse=True)
    if position is not None:
        matches = [post for post in matches if _post_position(post) < position]
    return _build_page(db, matches[: size + 1], size, viewer)
