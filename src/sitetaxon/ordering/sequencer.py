"""
Manual sequencing of siblings through two-item order swaps.

A move never renumbers the whole category: it produces a plan of exactly two
whole-record updates (or none when the move is a no-op). Order values may stay
sparse; the comparator's id tie-break keeps untouched pairs deterministic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..content.models import ContentItem
from .comparator import sort_siblings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderUpdate:
    """A whole-record write that changes only ``order``."""

    before: ContentItem
    after: ContentItem

    @property
    def item_id(self) -> str:
        return self.after.id


@dataclass(frozen=True)
class ReorderPlan:
    """The writes needed for one reorder action, in application order."""

    updates: Tuple[OrderUpdate, ...] = field(default_factory=tuple)
    description: str = ""

    @property
    def is_noop(self) -> bool:
        return not self.updates

    def __len__(self) -> int:
        return len(self.updates)

    def apply_to(self, siblings: Sequence[ContentItem]) -> List[ContentItem]:
        """Return ``siblings`` with the planned records substituted, re-sorted."""
        replacements = {update.item_id: update.after for update in self.updates}
        return sort_siblings(replacements.get(item.id, item) for item in siblings)


def effective_order(item: ContentItem, index: int) -> int:
    """The item's order, or its position in the list when unset."""
    return item.order if item.order is not None else index


def _swap(
    siblings: Sequence[ContentItem],
    index: int,
    neighbour_index: int,
) -> ReorderPlan:
    current = siblings[index]
    neighbour = siblings[neighbour_index]
    current_value = effective_order(current, index)
    neighbour_value = effective_order(neighbour, neighbour_index)
    moving_up = neighbour_index < index

    if current_value == neighbour_value:
        # Duplicate values would absorb the swap; push the mover past the tie.
        # The new value can equal a third sibling's order, in which case the id
        # tie-break decides between them and the mover may pass that sibling too.
        current_target = current_value - 1 if moving_up else current_value + 1
        neighbour_target = current_value
    else:
        low, high = sorted((current_value, neighbour_value))
        current_target, neighbour_target = (low, high) if moving_up else (high, low)

    direction = "up" if moving_up else "down"
    logger.debug(
        "Moving %s %s: order %s -> %s; swapping with %s: order %s -> %s",
        current.id,
        direction,
        current.order,
        current_target,
        neighbour.id,
        neighbour.order,
        neighbour_target,
    )
    updates = (
        OrderUpdate(before=current, after=current.with_order(current_target)),
        OrderUpdate(before=neighbour, after=neighbour.with_order(neighbour_target)),
    )
    return ReorderPlan(updates=updates, description=f"move {current.id} {direction}")


def move_up(siblings: Sequence[ContentItem], index: int) -> ReorderPlan:
    """
    Plan moving ``siblings[index]`` one place towards the start.

    ``siblings`` must be one category's items in display order. Returns an
    empty plan at the first position or for an index outside the list.
    """
    if index <= 0 or index >= len(siblings):
        return ReorderPlan(description="no-op")
    return _swap(siblings, index, index - 1)


def move_down(siblings: Sequence[ContentItem], index: int) -> ReorderPlan:
    """Mirror of :func:`move_up` against the following sibling."""
    if index < 0 or index >= len(siblings) - 1:
        return ReorderPlan(description="no-op")
    return _swap(siblings, index, index + 1)


def next_order(siblings: Sequence[ContentItem]) -> int:
    """
    Order value past the highest set order among ``siblings``, never below
    their count.

    The new item lands after every sibling with a set order. Siblings whose
    order is unset still sort after it, since unset values always come last.
    """
    values = [item.order for item in siblings if item.order is not None]
    if not values:
        return len(siblings)
    return max(max(values) + 1, len(siblings))


def renumber(siblings: Sequence[ContentItem], *, start: int = 0) -> ReorderPlan:
    """
    Plan rewriting the siblings' display order to contiguous values.

    Only items whose value changes get an update, so an already tidy category
    produces an empty plan.
    """
    updates: List[OrderUpdate] = []
    for position, item in enumerate(sort_siblings(siblings), start=start):
        if item.order != position:
            updates.append(OrderUpdate(before=item, after=item.with_order(position)))
    return ReorderPlan(updates=tuple(updates), description="renumber")


def index_of(siblings: Sequence[ContentItem], item_id: str) -> Optional[int]:
    for position, item in enumerate(siblings):
        if item.id == item_id:
            return position
    return None
