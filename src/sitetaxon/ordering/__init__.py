"""
Sibling ordering: comparator, swap-based moves and renumbering.
"""

from .comparator import find_duplicate_orders, sort_key, sort_siblings
from .sequencer import (
    OrderUpdate,
    ReorderPlan,
    effective_order,
    index_of,
    move_down,
    move_up,
    next_order,
    renumber,
)

__all__ = [
    "find_duplicate_orders",
    "sort_key",
    "sort_siblings",
    "OrderUpdate",
    "ReorderPlan",
    "effective_order",
    "index_of",
    "move_down",
    "move_up",
    "next_order",
    "renumber",
]
