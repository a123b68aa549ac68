from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from .payload import ServiceItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryGroup:
    category: str
    items: Tuple[ServiceItem, ...]


def group_by_category(items: Iterable[ServiceItem]) -> List[CategoryGroup]:
    """
    Partition items by category, keeping categories in order of first appearance
    and items in input order within each category.
    """
    order: List[str] = []
    index: Dict[str, List[ServiceItem]] = {}
    for item in items:
        bucket = index.get(item.category)
        if bucket is None:
            bucket = []
            index[item.category] = bucket
            order.append(item.category)
        bucket.append(item)

    groups = [CategoryGroup(category=name, items=tuple(index[name])) for name in order]
    logger.debug("Grouped services into %d categories", len(groups))
    return groups
