"""User profile and social graph endpoints."""

from fastapi import APIRouter

from pulse_feed.schemas.common import Page
from pulse_feed.schemas.interaction import FollowResult
from pulse_feed.schemas.post import AnnotatedPost
from pulse_feed.schemas.user import FollowEntry, UserProfile
from pulse_feed.services import feed, graph, mutations
from pulse_feed.services.identity import get_user_or_404, to_user_response

from ..dependencies import (
    CurrentUserDep,
    CursorQuery,
    OptionalUserDep,
    PageSizeQuery,
    SessionDep,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=UserProfile)
async def get_user_profile(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> UserProfile:
    """Return a user's profile with follower counts counted on demand."""
    user = get_user_or_404(db, user_id)
    counts = graph.follow_counts(db, user.id)
    is_following = viewer is not None and graph.is_following(db, viewer.id, user.id)
    return UserProfile(
        **to_user_response(user).model_dump(),
        followers=counts["followers"],
        following=counts["following"],
        is_following=is_following,
    )


@router.get("/{user_id}/posts", response_model=Page[AnnotatedPost])
async def list_user_posts(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    cursor: CursorQuery = None,
    page_size: PageSizeQuery = None,
) -> Page[AnnotatedPost]:
    """List posts authored by a user, newest first."""
    return feed.get_user_posts(db, user_id, viewer, cursor, page_size)


@router.get("/{user_id}/followers", response_model=Page[FollowEntry])
async def list_followers(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    cursor: CursorQuery = None,
    page_size: PageSizeQuery = None,
) -> Page[FollowEntry]:
    """List users following ``user_id``."""
    return graph.get_followers(db, user_id, viewer, cursor, page_size)


@router.get("/{user_id}/following", response_model=Page[FollowEntry])
async def list_following(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    cursor: CursorQuery = None,
    page_size: PageSizeQuery = None,
) -> Page[FollowEntry]:
    """List users ``user_id`` follows."""
    return graph.get_following(db, user_id, viewer, cursor, page_size)


@router.post("/{user_id}/follow", response_model=FollowResult)
async def toggle_follow(
    user_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> FollowResult:
    """Follow the user, or unfollow if already following."""
    return mutations.toggle_follow(db, current_user, user_id)
