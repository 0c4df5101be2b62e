"""
JSON file content store guarded by a lock file.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from filelock import Timeout
from pydantic import ValidationError

from ..content.models import ContentItem
from ..util.filesystem import DEFAULT_LOCK_TIMEOUT, file_lock, read_json_document, write_json_document
from .base import ItemNotFoundError, StoreError

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Store records in a single JSON document: ``{"items": [...]}``.

    Every write outside a transaction locks the file, reloads it, replaces the
    record and rewrites the document atomically. Inside :meth:`transaction`
    the lock is held throughout and the document is written once on success.
    """

    def __init__(self, path: Path | str, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.path = Path(path).expanduser().resolve()
        self.lock_timeout = lock_timeout
        self._pending: Optional[Dict[str, ContentItem]] = None

    @contextmanager
    def _locked(self) -> Iterator[None]:
        try:
            with file_lock(self.path, timeout=self.lock_timeout):
                yield
        except Timeout as exc:
            raise StoreError(f"Store {self.path} is locked by another process") from exc

    def _load(self) -> Dict[str, ContentItem]:
        try:
            data = read_json_document(self.path)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON in store {self.path}: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Unable to read store {self.path}: {exc}") from exc
        if data is None:
            return {}
        entries = data.get("items", []) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise StoreError(f"Store {self.path} must hold a list of items")
        try:
            items = [ContentItem.model_validate(entry) for entry in entries]
        except ValidationError as exc:
            raise StoreError(f"Invalid item in store {self.path}: {exc}") from exc
        return {item.id: item for item in items}

    def _save(self, items: Dict[str, ContentItem]) -> None:
        payload = {"items": [item.model_dump(mode="json") for item in items.values()]}
        try:
            write_json_document(self.path, payload)
        except OSError as exc:
            raise StoreError(f"Unable to write store {self.path}: {exc}") from exc
    def _current(self) -> Dict[str, ContentItem]:
        return self._pending if self._pending is not None else self._load()

    def list_items(self, category_name: Optional[str] = None) -> List[ContentItem]:
        items = list(self._current().values())
        if category_name is None:
            return items
        return [item for item in items if item.category_name == category_name]

    def get_item(self, item_id: str) -> ContentItem:
        try:
            return self._current()[str(item_id)]
        except KeyError:
            raise ItemNotFoundError(f"No item with id {item_id!r} in {self.path}") from None

    def write_item(self, item: ContentItem) -> ContentItem:
        if self._pending is not None:
            self._pending[item.id] = item
            return item
        with self._locked():
            items = self._load()
            items[item.id] = item
            self._save(items)
        logger.debug("Wrote item %s to %s", item.id, self.path)
        return item

    def delete_item(self, item_id: str) -> None:
        key = str(item_id)
        if self._pending is not None:
            if self._pending.pop(key, None) is None:
                raise ItemNotFoundError(f"No item with id {item_id!r} in {self.path}")
            return
        with self._locked():
            items = self._load()
            if items.pop(key, None) is None:
                raise ItemNotFoundError(f"No item with id {item_id!r} in {self.path}")
            self._save(items)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._pending is not None:
            yield
            return
        with self._locked():
            self._pending = self._load()
            try:
                yield
                self._save(self._pending)
            finally:
                self._pending = None
