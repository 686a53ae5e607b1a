"""Domain error taxonomy and its mapping onto HTTP responses.

Services raise these exceptions; the API layer never builds error responses by
hand. Each error carries the HTTP status it maps to and a human-readable detail.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class FeedError(RuntimeError):
    """Base exception for all domain failures raised by the service layer."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(FeedError):
    """Raised when an operation requires a principal and none was supplied."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class Forbidden(FeedError):
    """Raised when the caller is authenticated but not allowed to act."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized to perform this action"


class NotFound(FeedError):
    """Raised when a referenced post or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class SelfFollowForbidden(FeedError):
    """Raised when a user attempts to follow themselves."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "You cannot follow yourself"


class ValidationError(FeedError):
    """Raised for malformed input the schemas cannot catch (cursors, blank content)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


async def feed_error_handler(request: Request, exc: FeedError) -> JSONResponse:
    """Render a domain error as a JSON response with its mapped status code."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info(
            "%s %s rejected (%s): %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.detail,
        )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handler on the application."""
    app.add_exception_handler(FeedError, feed_error_handler)  # type: ignore[arg-type]
