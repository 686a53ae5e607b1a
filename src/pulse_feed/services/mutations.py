"""Mutation coordinator: posts, likes, saves and follows.

Each operation commits once. A failure anywhere rolls back the whole unit, so a
join row and the counter that summarizes it never change independently.

Toggles carry no target state: the presence of the join row is the state, and
every call flips it. The flip is a conditional delete followed, if nothing was
deleted, by a conditional insert. Both are single statements guarded by the
composite primary key, and counters move by relative deltas, so two racing
toggles cannot leave a duplicate row or a counter out of step with its rows.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

from pulse_feed.core.errors import Forbidden, NotFound, SelfFollowForbidden, ValidationError
from pulse_feed.models import Follow, Like, Post, Save, User
from pulse_feed.schemas.interaction import FollowResult, LikeResult, SaveResult
from pulse_feed.schemas.post import DeleteResult
from pulse_feed.services import interactions
from pulse_feed.services.identity import default_username

logger = logging.getLogger(__name__)

__all__ = [
    "create_post",
    "delete_post",
    "toggle_follow",
    "toggle_like",
    "toggle_save",
]


@contextmanager
def _unit_of_work(db: Session) -> Iterator[None]:
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


def _get_post_or_404(db: Session, post_id: int) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


def create_post(
    db: Session,
    user: User,
    content: str,
    parent_id: int | None = None,
) -> Post:
    """Create a post, or a reply when ``parent_id`` is given.

    Args:
        db: Database session
        user: Resolved author
        content: Post text; must contain something besides whitespace
        parent_id: Post being replied to

    Returns:
        The persisted post with zeroed counters and the author's profile snapshot.

    Raises:
        ValidationError: If the content is blank.

    Notes:
        A reply to a post that no longer exists is still created; only the
        parent's reply counter is skipped.
    """
    if not content or not content.strip():
        raise ValidationError("Post content must not be empty")

    post = Post(
        user_id=user.id,
        parent_id=parent_id,
        content=content,
        like_count=0,
        reply_count=0,
        repost_count=0,
        author_name=user.name,
        author_username=user.username or default_username(user.principal_id),
        author_avatar_url=user.avatar_url,
    )
    with _unit_of_work(db):
        db.add(post)
        db.flush()
        if parent_id is not None and not interactions.bump_counter(
            db, parent_id, "reply_count", 1
        ):
            logger.warning(
                "Reply %s created for missing parent %s; reply count not updated",
                post.id,
                parent_id,
            )
    db.refresh(post)
    logger.info("User %s created post %s", user.id, post.id)
    return post


def delete_post(db: Session, user: User, post_id: int) -> DeleteResult:
    """Delete a post owned by ``user``.

    Replies, likes and saves pointing at the post are left in place; replies
    keep their now dangling ``parent_id``.

    Raises:
        NotFound: If the post does not exist.
        Forbidden: If ``user`` is not the author.
    """
    post = _get_post_or_404(db, post_id)
    if post.user_id != user.id:
        logger.warning("User %s attempted to delete post %s owned by %s", user.id, post_id, post.user_id)
        raise Forbidden("Not authorized to delete this post")

    with _unit_of_work(db):
        if post.parent_id is not None:
            interactions.bump_counter(db, post.parent_id, "reply_count", -1)
        db.delete(post)
    logger.info("User %s deleted post %s", user.id, post_id)
    return DeleteResult(success=True)


def toggle_like(db: Session, user: User, post_id: int) -> LikeResult:
    """Flip the user's like on a post and move ``like_count`` with it."""
    _get_post_or_404(db, post_id)
    with _unit_of_work(db):
        if interactions.delete_if_present(db, Like, post_id=post_id, user_id=user.id):
            interactions.bump_counter(db, post_id, "like_count", -1)
            liked = False
        elif interactions.insert_if_absent(db, Like, post_id=post_id, user_id=user.id):
            interactions.bump_counter(db, post_id, "like_count", 1)
            liked = True
        else:
            logger.info("Like on post %s by user %s was recorded concurrently", post_id, user.id)
            liked = True
    logger.debug("User %s like on post %s -> %s", user.id, post_id, liked)
    return LikeResult(liked=liked)


def toggle_save(db: Session, user: User, post_id: int) -> SaveResult:
    """Flip the user's save on a post. Saves have no counter."""
    _get_post_or_404(db, post_id)
    with _unit_of_work(db):
        if interactions.delete_if_present(db, Save, post_id=post_id, user_id=user.id):
            saved = False
        else:
            if not interactions.insert_if_absent(db, Save, post_id=post_id, user_id=user.id):
                logger.info("Save on post %s by user %s was recorded concurrently", post_id, user.id)
            saved = True
    logger.debug("User %s save on post %s -> %s", user.id, post_id, saved)
    return SaveResult(saved=saved)


def toggle_follow(db: Session, user: User, target_user_id: int) -> FollowResult:
    """Flip whether ``user`` follows ``target_user_id``.

    Raises:
        SelfFollowForbidden: If the target is the caller.
        NotFound: If the target user does not exist.
    """
    if target_user_id == user.id:
        raise SelfFollowForbidden()
    if db.get(User, target_user_id) is None:
        raise NotFound("User not found")

    key = {"follower_id": user.id, "followed_id": target_user_id}
    with _unit_of_work(db):
        if interactions.delete_if_present(db, Follow, **key):
            following = False
        else:
            if not interactions.insert_if_absent(db, Follow, **key):
                logger.info("Follow %s -> %s was recorded concurrently", user.id, target_user_id)
            following = True
    logger.debug("User %s follow %s -> %s", user.id, target_user_id, following)
    return FollowResult(following=following)
