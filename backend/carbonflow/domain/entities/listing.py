"""Value objects for paginated listing and aggregate statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ListQuery:
    """Filter for a repository ``list`` call.

    The meaning of ``category`` and ``parent_id`` depends on the entity:
    industry (no parent) for customers, project type / customer for projects,
    measurement type / project for measurements. ``status`` is the alert
    level for measurements.
    """

    status: str | None = None
    category: str | None = None
    parent_id: str | None = None
    search: str | None = None
    time_from: datetime | None = None
    time_to: datetime | None = None
    page_size: int = 20
    cursor: str | None = None


@dataclass
class Page(Generic[T]):
    """One page of results.

    ``scanned_count`` is the number of items read from the index before
    post-filtering; ``items`` may be shorter (even empty) while
    ``next_cursor`` is still set.
    """

    items: list[T]
    next_cursor: str | None = None
    scanned_count: int = 0

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass
class EntityStatistics:
    """Per-status totals and per-category breakdown for one entity type."""

    total_by_status: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.total_by_status.values())
