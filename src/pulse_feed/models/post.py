# src/pulse_feed/models/post.py
"""SQLAlchemy models for posts and replies."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from pulse_feed.db.session import Base
from pulse_feed.db.time import utcnow


class Post(Base):
    """Short text update authored by a user.

    Replies point at their parent through ``parent_id``. Deleting a parent does
    not touch its replies, so ``parent_id`` may dangle.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_post_like_count"),
        CheckConstraint("reply_count >= 0", name="ck_post_reply_count"),
        CheckConstraint("repost_count >= 0", name="ck_post_repost_count"),
        Index("ix_post_created", "created_at", "id"),
        Index("ix_post_user_created", "user_id", "created_at"),
        Index("ix_post_parent_created", "parent_id", "created_at"),
        # Ids are never reused: likes, saves and replies outlive a deleted post.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    # No FK: replies outlive their parents.
    parent_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Cached projections of the join tables; only ever changed by relative updates.
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reply_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    repost_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Author snapshot taken at creation time; may drift from the live profile.
    author_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author_username: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author_avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
