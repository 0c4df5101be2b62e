"""
Content store boundary: protocol, implementations and plan application.
"""

from .base import (
    ContentStore,
    ItemNotFoundError,
    ReorderError,
    StoreError,
    TransactionalStore,
    apply_plan,
    load_siblings,
    write_items,
)
from .json_file import JsonFileStore
from .memory import MemoryStore

__all__ = [
    "ContentStore",
    "ItemNotFoundError",
    "ReorderError",
    "StoreError",
    "TransactionalStore",
    "apply_plan",
    "load_siblings",
    "write_items",
    "JsonFileStore",
    "MemoryStore",
]
