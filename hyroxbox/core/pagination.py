"""
In-memory pagination for the public listing.

All matching rows are fetched first and then sliced here; there is no
server-side cursor. The page window is a centred run of at most five page
numbers, with the first/last page and an ellipsis shown when skipped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 8
WINDOW_SIZE = 5


def total_pages(total_items: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    if total_items <= 0:
        return 0
    return math.ceil(total_items / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp a requested page into [1, max(pages, 1)]."""
    return min(max(page, 1), max(pages, 1))


def page_window(current_page: int, pages: int, window: int = WINDOW_SIZE) -> List[int]:
    """
    Return the contiguous page numbers to render around `current_page`.

    >>> page_window(1, 10)
    [1, 2, 3, 4, 5]
    >>> page_window(6, 10)
    [4, 5, 6, 7, 8]
    >>> page_window(10, 10)
    [6, 7, 8, 9, 10]
    """
    if pages <= 0:
        return []
    start = max(1, current_page - window // 2)
    end = min(pages, start + window - 1)
    if end - start + 1 < window:
        start = max(1, end - window + 1)
    return list(range(start, end + 1))


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int
    window: List[int] = field(default_factory=list)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def show_controls(self) -> bool:
        return self.total_pages > 1

    @property
    def show_first(self) -> bool:
        return bool(self.window) and self.window[0] > 1

    @property
    def leading_ellipsis(self) -> bool:
        return bool(self.window) and self.window[0] > 2

    @property
    def show_last(self) -> bool:
        return bool(self.window) and self.window[-1] < self.total_pages

    @property
    def trailing_ellipsis(self) -> bool:
        return bool(self.window) and self.window[-1] < self.total_pages - 1

    @property
    def start_item(self) -> int:
        """1-based index of the first item shown (0 when empty)."""
        if not self.total_items:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def end_item(self) -> int:
        return min(self.page * self.page_size, self.total_items)


def paginate(
    rows: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
) -> Page[T]:
    """Slice `rows` for `page`; items are rows[(p-1)*size : min(p*size, N)]."""
    if page_size < 1:
        raise ValueError("page_size must be positive")

    total = len(rows)
    pages = total_pages(total, page_size)
    current = clamp_page(page, pages)
    offset = (current - 1) * page_size

    return Page(
        items=list(rows[offset : offset + page_size]),
        page=current,
        page_size=page_size,
        total_items=total,
        total_pages=pages,
        window=page_window(current, pages),
    )
