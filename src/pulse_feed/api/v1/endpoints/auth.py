"""Session endpoints backed by the external identity provider."""

from fastapi import APIRouter

from pulse_feed.core.errors import Unauthenticated
from pulse_feed.schemas.user import UserResponse
from pulse_feed.services.identity import record_login, to_user_response

from ..dependencies import CurrentUserDep, PrincipalDep, SessionDep

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=UserResponse, summary="Record a login")
async def login(principal: PrincipalDep, db: SessionDep) -> UserResponse:
    """Create or refresh the caller's user record after the provider signed them in.

    Repeated calls are harmless; each one refreshes the login timestamp and the
    profile fields the provider supplied.
    """
    if principal is None:
        raise Unauthenticated()
    return to_user_response(record_login(db, principal))


@router.get("/me", response_model=UserResponse)
async def me(current_user: CurrentUserDep) -> UserResponse:
    """Return the signed-in user."""
    return to_user_response(current_user)
