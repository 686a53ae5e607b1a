"""Opaque keyset cursors shared by every paginated listing.

Listings are ordered by ``(created_at desc, id desc)``. A cursor encodes the
position of the last row handed out, so rows inserted while a client is paging
always sort before the cursor and never shift or duplicate later pages.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from pulse_feed.core.errors import ValidationError
from pulse_feed.core.settings import settings
from pulse_feed.db.time import as_utc

T = TypeVar("T")

__all__ = [
    "Position",
    "decode_cursor",
    "encode_cursor",
    "keyset_before",
    "resolve_page_size",
    "slice_page",
]


@dataclass(frozen=True, order=True)
class Position:
    """Sort key of a single row: creation time, then row id as tie-breaker."""

    created_at: datetime
    row_id: int

    @classmethod
    def of(cls, created_at: datetime, row_id: int) -> Position:
        return cls(as_utc(created_at), int(row_id))


def encode_cursor(position: Position) -> str:
    """Serialize a position into a URL-safe opaque token."""
    payload = json.dumps(
        {"t": position.created_at.isoformat(), "id": position.row_id},
        separators=(",", ":"),
    )
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode().rstrip("=")


def decode_cursor(cursor: str | None) -> Position | None:
    """Parse a cursor produced by :func:`encode_cursor`.

    Returns ``None`` for an absent cursor (start of the listing).

    Raises:
        ValidationError: If the token is not a cursor this service issued.
    """
    if cursor is None or cursor == "":
        return None
    padding = "=" * (-len(cursor) % 4)
    try:
        raw = base64.urlsafe_b64decode(cursor + padding)
        data = json.loads(raw)
        return Position.of(datetime.fromisoformat(data["t"]), int(data["id"]))
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as err:
        raise ValidationError("Invalid pagination cursor") from err


def keyset_before(
    created_column: ColumnElement[datetime],
    id_column: ColumnElement[int],
    position: Position,
) -> ColumnElement[bool]:
    """Build the ``(created, id) < position`` predicate for a descending scan."""
    return or_(
        created_column < position.created_at,
        and_(created_column == position.created_at, id_column < position.row_id),
    )


def resolve_page_size(page_size: int | None) -> int:
    """Apply the configured default and bounds to a caller-supplied page size."""
    if page_size is None:
        return settings.feed_default_page_size
    if page_size < 1 or page_size > settings.feed_max_page_size:
        raise ValidationError(
            f"Page size must be between 1 and {settings.feed_max_page_size}"
        )
    return page_size


def slice_page(
    rows: Sequence[T],
    page_size: int,
    key: Callable[[T], Position],
) -> tuple[list[T], str | None, bool]:
    """Cut a ``page_size + 1`` window into a page, its continuation and a done flag."""
    page = list(rows[:page_size])
    is_done = len(rows) <= page_size
    next_cursor = None if is_done or not page else encode_cursor(key(page[-1]))
    return page, next_cursor, is_done
