"""
Content store boundary and reorder plan application.
"""

from __future__ import annotations

import logging
from typing import ContextManager, Iterable, List, Optional, Protocol, TypeGuard, runtime_checkable

from ..content.models import ContentItem
from ..ordering import ReorderPlan, sort_siblings

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the content store cannot read or write records."""


class ItemNotFoundError(StoreError, LookupError):
    """Raised when a record id is unknown to the store."""


class ReorderError(StoreError):
    """
    Raised when a reorder plan could not be persisted.

    Attributes:
        written: Records that reached the store before the failure.
        rolled_back: True when every written record was restored.
    """

    def __init__(self, message: str, *, written: Iterable[ContentItem] = (), rolled_back: bool = True) -> None:
        super().__init__(message)
        self.written = list(written)
        self.rolled_back = rolled_back


@runtime_checkable
class ContentStore(Protocol):
    """
    "Read list by category" / "write whole record" boundary.

    ``write_item`` replaces the stored record entirely; a field left out of the
    record is cleared, so callers always send complete records.
    """

    def list_items(self, category_name: Optional[str] = None) -> List[ContentItem]: ...

    def get_item(self, item_id: str) -> ContentItem: ...

    def write_item(self, item: ContentItem) -> ContentItem: ...


@runtime_checkable
class TransactionalStore(ContentStore, Protocol):
    """A store that can apply several writes atomically."""

    def transaction(self) -> ContextManager[None]: ...


def load_siblings(store: ContentStore, category_name: str) -> List[ContentItem]:
    """One category's records in display order."""
    return sort_siblings(store.list_items(category_name))


def _supports_transactions(store: ContentStore) -> TypeGuard[TransactionalStore]:
    return isinstance(store, TransactionalStore)


def apply_plan(store: ContentStore, plan: ReorderPlan) -> List[ContentItem]:
    """
    Persist a reorder plan.

    Stores exposing ``transaction()`` get every write inside one transaction.
    Otherwise writes are applied in order and, if one fails, records already
    written are restored from their before-state.

    Returns:
        The records as written, in plan order.

    Raises:
        ReorderError: If any write fails. The cause is chained.
    """
    if plan.is_noop:
        return []

    if _supports_transactions(store):
        try:
            with store.transaction():
                written = [store.write_item(update.after) for update in plan.updates]
        except (StoreError, OSError) as exc:
            raise ReorderError(f"Could not apply {plan.description or 'reorder'}: {exc}") from exc
        logger.info("Applied %s (%d writes, transactional)", plan.description or "reorder", len(written))
        return written

    written: List[ContentItem] = []
    for position, update in enumerate(plan.updates):
        try:
            written.append(store.write_item(update.after))
        except (StoreError, OSError) as exc:
            rolled_back = _compensate(store, plan, position)
            state = "rolled back" if rolled_back else "left partially applied"
            raise ReorderError(
                f"Write {position + 1}/{len(plan)} of {plan.description or 'reorder'} failed ({exc}); {state}",
                written=written,
                rolled_back=rolled_back,
            ) from exc
    logger.info("Applied %s (%d writes)", plan.description or "reorder", len(written))
    return written


def _compensate(store: ContentStore, plan: ReorderPlan, failed_position: int) -> bool:
    """Rewrite already-applied records from their before-state, newest first."""
    ok = True
    for update in reversed(plan.updates[:failed_position]):
        try:
            store.write_item(update.before)
        except (StoreError, OSError) as exc:
            ok = False
            logger.error("Rollback of %s failed: %s", update.item_id, exc)
        else:
            logger.warning("Rolled back order of %s to %s", update.item_id, update.before.order)
    return ok


def write_items(store: ContentStore, items: Iterable[ContentItem]) -> List[ContentItem]:
    """Write several whole records, inside a transaction when the store has one."""
    records = list(items)
    if not records:
        return []
    if _supports_transactions(store):
        with store.transaction():
            return [store.write_item(item) for item in records]
    return [store.write_item(item) for item in records]
