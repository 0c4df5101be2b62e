"""
Display ordering for sibling items.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from ..content.models import ContentItem


def _id_key(item_id: str) -> Tuple[int, int, str]:
    # Numeric ids compare numerically so "10" sorts after "9".
    if item_id.isdigit():
        return (0, int(item_id), "")
    return (1, 0, item_id)


def sort_key(item: ContentItem) -> Tuple[bool, int, Tuple[int, int, str]]:
    """Ascending ``order`` with unset values last, ties broken by id."""
    # Integers compare exactly; unset orders are grouped after every set one.
    return (item.order is None, item.order or 0, _id_key(item.id))


def sort_siblings(items: Iterable[ContentItem]) -> List[ContentItem]:
    return sorted(items, key=sort_key)


def find_duplicate_orders(siblings: Iterable[ContentItem]) -> Dict[int, List[str]]:
    """
    Report order values shared by more than one sibling.

    Returns a mapping of order value to the ids sharing it, in sort order.
    Unset orders are not reported.
    """
    seen: Dict[int, List[str]] = defaultdict(list)
    for item in sort_siblings(siblings):
        if item.order is not None:
            seen[item.order].append(item.id)
    return {order: ids for order, ids in seen.items() if len(ids) > 1}
