"""Join rows recording per-user interactions with posts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from pulse_feed.db.session import Base
from pulse_feed.db.time import utcnow


class Like(Base):
    """A user's like on a post; existence of the row is the liked state.

    The composite primary key rules out duplicate likes from the same user.
    """

    __tablename__ = "post_like"
    __table_args__ = (Index("ix_post_like_user_created", "user_id", "created_at"),)

    post_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Save(Base):
    """A user's bookmark on a post. Same shape as ``Like``, no counter on the post."""

    __tablename__ = "post_save"
    __table_args__ = (Index("ix_post_save_user_created", "user_id", "created_at"),)

    post_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
