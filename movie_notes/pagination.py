"""Page arithmetic for list endpoints.

Pagination happens in memory over the complete result set: callers load every
row and slice here. That is fine at the current data sizes but scales linearly
with the table, so a store-level LIMIT/OFFSET is the upgrade path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, TypeVar

PAGE_SIZE = 10

T = TypeVar("T")


def parse_page(raw: Optional[Any]) -> int:
    """Interpret a `page` query value. Absent, non-numeric or < 1 means page 1."""
    if raw is None:
        return 1
    try:
        page = int(str(raw).strip())
    except ValueError:
        return 1
    return page if page >= 1 else 1


@dataclass(frozen=True)
class Page(Generic[T]):
    total: int
    page: int
    total_pages: int
    items: List[T]


def paginate(items: Sequence[T], page: int, *, page_size: int = PAGE_SIZE) -> Page[T]:
    total = len(items)
    start = (page - 1) * page_size
    return Page(
        total=total,
        page=page,
        total_pages=math.ceil(total / page_size),
        items=list(items[start : start + page_size]),
    )
