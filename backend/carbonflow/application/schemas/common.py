"""Pydantic DTOs shared by every list endpoint."""

from typing import Any

from pydantic import BaseModel

from carbonflow.domain.entities import Page


class PaginationResponse(BaseModel):
    """Cursor pagination block of a list response.

    ``count`` is the number of items returned after in-process filtering;
    ``scanned_count`` is how many were read from the index. A page can be
    short (even empty) while ``has_more`` is still true.
    """

    has_more: bool
    next_token: str | None = None
    count: int
    scanned_count: int

    @classmethod
    def of(cls, page: Page[Any]) -> "PaginationResponse":
        return cls(
            has_more=page.has_more,
            next_token=page.next_cursor,
            count=page.count,
            scanned_count=page.scanned_count,
        )
