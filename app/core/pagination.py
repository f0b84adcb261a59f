"""Pagination helpers."""

from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    start: int
    page_size: int
    total: int | None = None


def clamp_start(start: int) -> int:
    """Offsets below zero read from the head."""
    return max(0, start)


def slice_page(items: Sequence[T], start: int, page_size: int) -> list[T]:
    """Exactly page_size items from start (fewer at the tail)."""
    start = clamp_start(start)
    return list(items[start:start + page_size])
