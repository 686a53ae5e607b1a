"""Feed endpoints for the global and following timelines."""

from typing import Literal

from fastapi import APIRouter, Query

from pulse_feed.schemas.common import Page
from pulse_feed.schemas.post import AnnotatedPost
from pulse_feed.services import feed

from ..dependencies import CursorQuery, OptionalUserDep, PageSizeQuery, SessionDep

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=Page[AnnotatedPost])
async def get_feed(
    db: SessionDep,
    viewer: OptionalUserDep,
    cursor: CursorQuery = None,
    page_size: PageSizeQuery = None,
    variant: Literal["all", "following"] = Query("all", description="Feed to read"),
) -> Page[AnnotatedPost]:
    """Return one page of a feed, newest first.

    The ``following`` variant requires a signed-in viewer.
    """
    return feed.get_feed(db, variant, viewer, cursor, page_size)
