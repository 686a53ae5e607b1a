"""Shared API dependencies for authentication and pagination."""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pulse_feed.core.security import decode_principal
from pulse_feed.db.session import get_db
from pulse_feed.models import User
from pulse_feed.schemas.user import Principal
from pulse_feed.services.identity import require_user, resolve_user

# Bearer scheme carrying the identity provider's token; optional so public reads work
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Principal | None:
    """Return the principal asserted by the bearer token, if one was sent.

    Raises:
        Unauthenticated: If a token was sent but does not verify
    """
    if credentials is None:
        return None
    return decode_principal(credentials.credentials)


PrincipalDep = Annotated[Principal | None, Depends(get_principal)]


def get_optional_user(principal: PrincipalDep, db: SessionDep) -> User | None:
    """Resolve the signed-in user for personalization, or None for anonymous callers."""
    if principal is None:
        return None
    return resolve_user(db, principal)


OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def get_current_user(user: OptionalUserDep) -> User:
    """Resolve the signed-in user, rejecting anonymous callers.

    Raises:
        Unauthenticated: If no principal accompanied the request
    """
    return require_user(user)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]

CursorQuery = Annotated[
    str | None,
    Query(description="Continuation token returned by the previous page"),
]
PageSizeQuery = Annotated[
    int | None,
    Query(alias="pageSize", ge=1, description="Items per page"),
]
