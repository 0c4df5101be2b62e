"""
In-process content store.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

from ..content.models import ContentItem
from .base import ItemNotFoundError


class MemoryStore:
    """Dictionary-backed store with snapshot/restore transactions."""

    def __init__(self, items: Iterable[ContentItem] = ()) -> None:
        self._items: Dict[str, ContentItem] = {}
        for item in items:
            self._items[item.id] = item

    def list_items(self, category_name: Optional[str] = None) -> List[ContentItem]:
        if category_name is None:
            return list(self._items.values())
        return [item for item in self._items.values() if item.category_name == category_name]

    def get_item(self, item_id: str) -> ContentItem:
        try:
            return self._items[str(item_id)]
        except KeyError:
            raise ItemNotFoundError(f"No item with id {item_id!r}") from None

    def write_item(self, item: ContentItem) -> ContentItem:
        self._items[item.id] = item
        return item

    def delete_item(self, item_id: str) -> None:
        if self._items.pop(str(item_id), None) is None:
            raise ItemNotFoundError(f"No item with id {item_id!r}")

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = dict(self._items)
        try:
            yield
        except BaseException:
            self._items = snapshot
            raise
