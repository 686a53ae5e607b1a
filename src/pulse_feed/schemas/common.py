"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(ApiModel, Generic[T]):
    """One page of a cursor-paginated listing."""

    items: list[T] = Field(default_factory=list)
    continue_cursor: str | None = Field(
        None,
        description="Opaque cursor for the next page; null when the listing is exhausted.",
    )
    is_done: bool = Field(..., description="True when no items exist beyond this page.")
