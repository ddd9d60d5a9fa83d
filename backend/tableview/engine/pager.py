from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Sequence

from .dataset import Row

# page_size value meaning "no paging"
ALL = 0


@dataclass(frozen=True)
class PageState:
    page_size: int = 10
    current_page: int = 1
    total_pages: int = 1

    def with_page(self, page: int) -> "PageState":
        return replace(self, current_page=clamp_page(page, self.total_pages))

    def with_total(self, total_pages: int) -> "PageState":
        total = max(1, int(total_pages))
        return PageState(self.page_size, clamp_page(self.current_page, total), total)


@dataclass(frozen=True)
class PageResult:
    page_rows: list[Row]
    total_pages: int
    current_page: int


def normalize_page_size(page_size: int | None) -> int:
    if page_size is None:
        return ALL
    try:
        return max(ALL, int(page_size))
    except (TypeError, ValueError):
        return ALL


def total_pages_for(row_count: int, page_size: int) -> int:
    if page_size <= ALL:
        return 1
    return max(1, math.ceil(max(0, row_count) / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    return max(1, min(page, max(1, total_pages)))


def paginate(rows: Sequence[Row], page_state: PageState) -> PageResult:
    """Slice the current page out of an ordered row sequence.

    ``page_size == 0`` returns everything as a single page; an out-of-range
    ``current_page`` is clamped into ``[1, total_pages]``.
    """
    page_size = normalize_page_size(page_state.page_size)
    total = total_pages_for(len(rows), page_size)
    current = clamp_page(page_state.current_page, total)
    if page_size == ALL:
        return PageResult(list(rows), total, current)
    start = (current - 1) * page_size
    return PageResult(list(rows[start : start + page_size]), total, current)


def paginate_remote(rows: Sequence[Row], current_page: int, reported_total_pages: int | None) -> PageResult:
    """Server-paginated window: trust the reported page count, never slice."""
    try:
        total = max(1, int(reported_total_pages or 1))
    except (TypeError, ValueError):
        total = 1
    return PageResult(list(rows), total, clamp_page(current_page, total))
