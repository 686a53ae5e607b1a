"""Results of toggle mutations.

Every toggle returns the resulting state so clients can reconcile optimistic
updates without re-querying.
"""

from .common import ApiModel


class LikeResult(ApiModel):
    """Outcome of toggling a like."""

    liked: bool


class SaveResult(ApiModel):
    """Outcome of toggling a save."""

    saved: bool


class FollowResult(ApiModel):
    """Outcome of toggling a follow."""

    following: bool
