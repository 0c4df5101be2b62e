"""
Helpers for keeping derived identifiers unique.
"""

from __future__ import annotations

from typing import Iterable


def unique_slug(candidate: str, taken: Iterable[str]) -> str:
    """
    Return ``candidate`` unchanged when free, otherwise append ``-2``, ``-3``...

    The numeric suffix is appended to the whole slug so the category prefix and
    the title-derived suffix stay intact.
    """
    taken_set = {slug for slug in taken if slug}
    if candidate not in taken_set:
        return candidate

    counter = 2
    while f"{candidate}-{counter}" in taken_set:
        counter += 1
    return f"{candidate}-{counter}"
