"""initial schema

Revision ID: 5c1e0a7d2b91
Revises:
Create Date: 2026-10-16 09:12:44.310254

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e0a7d2b91"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, posts and the like/save/follow join tables."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("principal_id", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("principal_id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("reply_count", sa.Integer(), nullable=False),
        sa.Column("repost_count", sa.Integer(), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("author_username", sa.Text(), nullable=False),
        sa.Column("author_avatar_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("like_count >= 0", name="ck_post_like_count"),
        sa.CheckConstraint("reply_count >= 0", name="ck_post_reply_count"),
        sa.CheckConstraint("repost_count >= 0", name="ck_post_repost_count"),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_post_created", "post", ["created_at", "id"])
    op.create_index("ix_post_user_created", "post", ["user_id", "created_at"])
    op.create_index("ix_post_parent_created", "post", ["parent_id", "created_at"])

    for table_name in ("post_like", "post_save"):
        op.create_table(
            table_name,
            sa.Column("post_id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
            sa.PrimaryKeyConstraint("post_id", "user_id"),
        )
        op.create_index(
            f"ix_{table_name}_user_created", table_name, ["user_id", "created_at"]
        )

    op.create_table(
        "follow",
        sa.Column("follower_id", sa.Integer(), nullable=False),
        sa.Column("followed_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("follower_id <> followed_id", name="ck_follow_not_self"),
        sa.ForeignKeyConstraint(["follower_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["followed_id"], ["user_account.id"]),
        sa.PrimaryKeyConstraint("follower_id", "followed_id"),
    )
    op.create_index("ix_follow_followed_created", "follow", ["followed_id", "created_at"])
    op.create_index("ix_follow_follower_created", "follow", ["follower_id", "created_at"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_follow_follower_created", table_name="follow")
    op.drop_index("ix_follow_followed_created", table_name="follow")
    op.drop_table("follow")
    for table_name in ("post_save", "post_like"):
        op.drop_index(f"ix_{table_name}_user_created", table_name=table_name)
        op.drop_table(table_name)
    op.drop_index("ix_post_parent_created", table_name="post")
    op.drop_index("ix_post_user_created", table_name="post")
    op.drop_index("ix_post_created", table_name="post")
    op.drop_table("post")
    op.drop_table("user_account")
