"""
Shared utility helpers for text normalization, naming and filesystem access.
"""

from .filesystem import file_lock, read_json_document, write_json_document
from .naming import unique_slug
from .text import join_segments, normalize_title, split_segments

__all__ = [
    "file_lock",
    "read_json_document",
    "write_json_document",
    "unique_slug",
    "join_segments",
    "normalize_title",
    "split_segments",
]
