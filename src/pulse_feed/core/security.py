"""Principal token handling for the external identity provider.

The identity provider signs a JWT per session; this module only verifies it and
extracts the asserted principal. Credentials are never checked here.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from pulse_feed.core.errors import Unauthenticated
from pulse_feed.core.settings import settings
from pulse_feed.schemas.user import Principal


def decode_principal(token: str) -> Principal:
    """Verify a bearer token and return the principal it asserts.

    Args:
        token: Raw JWT taken from the ``Authorization`` header.

    Returns:
        The principal described by the token claims.

    Raises:
        Unauthenticated: If the signature, expiry or subject is invalid.
    """
    options = {"verify_aud": settings.identity_audience is not None}
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.identity_secret,
            algorithms=[settings.identity_algorithm],
            audience=settings.identity_audience,
            options=options,
        )
    except JWTError as err:
        raise Unauthenticated("Could not validate credentials") from err

    subject = claims.get("sub")
    if not subject:
        raise Unauthenticated("Could not validate credentials")

    return Principal(
        principal_id=str(subject),
        display_name=claims.get("name"),
        username=claims.get("preferred_username") or claims.get("username"),
        avatar_url=claims.get("picture"),
        email=claims.get("email"),
    )


def create_principal_token(
    principal_id: str,
    extra_claims: dict[str, str] | None = None,
) -> str:
    """Mint a principal token the way the identity provider would.

    Used for local development and tests; production tokens come from the provider.
    """
    to_encode: dict[str, object] = {"sub": principal_id}
    if extra_claims:
        to_encode.update(extra_claims)
    if settings.identity_audience:
        to_encode["aud"] = settings.identity_audience
    to_encode["exp"] = datetime.now(UTC) + timedelta(
        minutes=settings.identity_token_ttl_minutes
    )
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.identity_secret,
        algorithm=settings.identity_algorithm,
    )
    return encoded_jwt
