"""Post-related endpoints for the Pulse Feed API."""

from fastapi import APIRouter, Query, status

from pulse_feed.core.errors import NotFound
from pulse_feed.schemas.common import Page
from pulse_feed.schemas.interaction import LikeResult, SaveResult
from pulse_feed.schemas.post import AnnotatedPost, DeleteResult, PostCreate, PostCreated
from pulse_feed.services import feed, mutations

from ..dependencies import (
    CurrentUserDep,
    CursorQuery,
    OptionalUserDep,
    PageSizeQuery,
    SessionDep,
)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/search", response_model=Page[AnnotatedPost])
async def search_posts(
    db: SessionDep,
    viewer: OptionalUserDep,
    q: str = Query(..., min_length=1, description="Text to look for in post content"),
    cursor: CursorQuery = None,
    page_size: PageSizeQuery = None,
) -> Page[AnnotatedPost]:
    """Find posts whose content contains ``q`` (case-insensitive), newest first."""
    return feed.search_posts(db, q, viewer, cursor, page_size)


@router.get("/saved", response_model=Page[AnnotatedPost])
async def list_saved_posts(
    db: SessionDep,
    current_user: CurrentUserDep,
    cursor: CursorQuery = None,
    page_size: PageSizeQuery = None,
) -> Page[AnnotatedPost]:
    """List the caller's saved posts, most recently saved first."""
    return feed.get_saved_posts(db, current_user, cursor, page_size)


@router.get("/{post_id}", response_model=AnnotatedPost)
async def get_post(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> AnnotatedPost:
    """Get a specific post by ID."""
    post = feed.get_post(db, post_id, viewer)
    if post is None:
        raise NotFound("Post not found")
    return post


@router.get("/{post_id}/replies", response_model=Page[AnnotatedPost])
async def get_post_replies(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    cursor: CursorQuery = None,
    page_size: PageSizeQuery = None,
) -> Page[AnnotatedPost]:
    """Get replies to a post, newest first."""
    return feed.get_replies(db, post_id, viewer, cursor, page_size)


@router.post("", response_model=PostCreated, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostCreated:
    """Create a post, or a reply when ``parentId`` is set."""
    post = mutations.create_post(db, current_user, post_data.content, post_data.parent_id)
    return PostCreated(id=post.id)


@router.delete("/{post_id}", response_model=DeleteResult)
async def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DeleteResult:
    """Delete one of the caller's own posts."""
    return mutations.delete_post(db, current_user, post_id)


@router.post("/{post_id}/like", response_model=LikeResult)
async def toggle_like(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LikeResult:
    """Like the post, or remove the caller's existing like."""
    return mutations.toggle_like(db, current_user, post_id)


@router.post("/{post_id}/save", response_model=SaveResult)
async def toggle_save(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> SaveResult:
    """Save the post, or remove the caller's existing save."""
    return mutations.toggle_save(db, current_user, post_id)
