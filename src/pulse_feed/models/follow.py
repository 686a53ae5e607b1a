"""Directed follow edges between users."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from pulse_feed.db.session import Base
from pulse_feed.db.time import utcnow


class Follow(Base):
    """Follower -> followed edge. At most one per ordered pair, never a self-loop."""

    __tablename__ = "follow"
    __table_args__ = (
        CheckConstraint("follower_id <> followed_id", name="ck_follow_not_self"),
        Index("ix_follow_followed_created", "followed_id", "created_at"),
        Index("ix_follow_follower_created", "follower_id", "created_at"),
    )

    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        primary_key=True,
    )
    followed_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
