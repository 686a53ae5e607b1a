"""Identity resolution: map identity-provider principals onto user records."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pulse_feed.core.errors import NotFound, Unauthenticated
from pulse_feed.core.settings import settings
from pulse_feed.db.time import utcnow
from pulse_feed.models import User
from pulse_feed.schemas.user import AuthorSummary, Principal, UserResponse

logger = logging.getLogger(__name__)

__all__ = [
    "default_username",
    "get_user",
    "get_user_by_principal",
    "get_user_or_404",
    "record_login",
    "require_user",
    "resolve_user",
    "to_author_summary",
    "to_user_response",
]


def default_username(principal_id: str) -> str:
    """Return the fallback handle derived from the principal id prefix."""
    return f"user_{principal_id[: settings.username_prefix_length]}"


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def get_user_or_404(db: Session, user_id: int) -> User:
    """Return a user by primary key or raise ``NotFound``."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def get_user_by_principal(db: Session, principal_id: str) -> User | None:
    """Return the user mirrored from ``principal_id``, if any."""
    return db.scalars(select(User).where(User.principal_id == principal_id)).first()


def _username_taken(db: Session, username: str, exclude_user_id: int | None) -> bool:
    stmt = select(User.id).where(User.username == username)
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    return db.scalar(stmt) is not None


def _choose_username(db: Session, principal: Principal, current: User | None) -> str:
    requested = (principal.username or "").strip()
    exclude = current.id if current is not None else None
    if requested and not _username_taken(db, requested, exclude):
        return requested
    if current is not None and current.username:
        return current.username
    fallback = default_username(principal.principal_id)
    if _username_taken(db, fallback, exclude):
        # Prefix collision between two principals; the full id is unique.
        fallback = f"user_{principal.principal_id}"
    return fallback


def _insert_user(db: Session, principal: Principal) -> User:
    username = _choose_username(db, principal, None)
    now = utcnow()
    user = User(
        principal_id=principal.principal_id,
        name=principal.display_name or username,
        username=username,
        avatar_url=principal.avatar_url,
        email=principal.email,
        created_at=now,
        last_login_at=now,
    )
    db.add(user)
    db.commit()
    return user


def _create_user(db: Session, principal: Principal) -> User:
    try:
        user = _insert_user(db, principal)
    except IntegrityError:
        db.rollback()
        existing = get_user_by_principal(db, principal.principal_id)
        if existing is not None:
            # Another request created the same principal first.
            return existing
        # Another principal claimed the chosen username first; pick again.
        logger.info("Username race for principal %s; retrying", principal.principal_id)
        try:
            user = _insert_user(db, principal)
        except IntegrityError:
            db.rollback()
            raise
    db.refresh(user)
    logger.info("Created user %s for principal %s", user.id, principal.principal_id)
    return user


def resolve_user(db: Session, principal: Principal) -> User:
    """Return the user for ``principal``, creating it on first sight.

    Existing users are returned untouched; profile refresh happens in
    :func:`record_login`.
    """
    user = get_user_by_principal(db, principal.principal_id)
    if user is not None:
        return user
    return _create_user(db, principal)


def record_login(db: Session, principal: Principal) -> User:
    """Create or refresh the user for ``principal`` and stamp the login time.

    Safe to call repeatedly; each call only moves ``last_login_at`` forward and
    re-syncs the profile fields the provider supplied.
    """
    user = resolve_user(db, principal)
    user.last_login_at = utcnow()
    if principal.display_name:
        user.name = principal.display_name
    if principal.avatar_url is not None:
        user.avatar_url = principal.avatar_url
    if principal.email is not None:
        user.email = principal.email
    user.username = _choose_username(db, principal, user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(user)
    logger.info("Recorded login for user %s", user.id)
    return user


def require_user(user: User | None) -> User:
    """Return ``user`` or raise ``Unauthenticated`` when no principal is present."""
    if user is None:
        raise Unauthenticated()
    return user


def to_author_summary(user: User) -> AuthorSummary:
    """Project a user onto the public fragment embedded in posts."""
    return AuthorSummary(
        id=user.id,
        name=user.name,
        username=user.username or default_username(user.principal_id),
        avatar=user.avatar_url,
    )


def to_user_response(user: User) -> UserResponse:
    """Convert a User ORM instance to an API schema."""
    return UserResponse(
        id=user.id,
        name=user.name,
        username=user.username or default_username(user.principal_id),
        avatar=user.avatar_url,
        created_at=user.created_at,
        last_login_at=user.last_login_at,
    )
