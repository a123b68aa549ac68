from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, List, Sequence, Tuple, TypeVar

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    number: int  # 1-based
    items: Tuple[T, ...]


def check_capacity(page_capacity: int) -> int:
    if isinstance(page_capacity, bool) or not isinstance(page_capacity, int) or page_capacity <= 0:
        raise ConfigurationError(f"Page capacity must be a positive integer, got {page_capacity!r}")
    return page_capacity


def paginate(items: Sequence[T], page_capacity: int) -> List[Page[T]]:
    """
    Split items into consecutive pages of page_capacity, the last one holding the rest.

    Capacity counts items, not measured height. An empty input still yields one
    empty page so that every document has something to render.
    """
    check_capacity(page_capacity)
    items = tuple(items)
    pages: List[Page[T]] = []
    for start in range(0, len(items), page_capacity):
        pages.append(Page(number=len(pages) + 1, items=items[start:start + page_capacity]))
    if not pages:
        pages.append(Page(number=1, items=()))
    logger.debug("Paginated %d items into %d pages (capacity %d)", len(items), len(pages), page_capacity)
    return pages
