"""
Text-related helpers.
"""

from __future__ import annotations

import re
import unicodedata

_SEPARATOR_PATTERN = re.compile(r"[\s_/]+")
_DISALLOWED_PATTERN = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_PATTERN = re.compile(r"-{2,}")


def normalize_title(value: str | None) -> str:
    """
    Reduce free text to a lowercase, hyphen-separated token sequence.

    Accented characters are folded to ASCII, "&" becomes "and", whitespace,
    underscores and slashes become hyphens and anything else outside
    ``[a-z0-9-]`` is dropped. Returns an empty string when nothing survives.
    """
    if not value:
        return ""
    folded = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    raw = folded.strip().lower().replace("&", " and ")
    raw = _SEPARATOR_PATTERN.sub("-", raw)
    raw = _DISALLOWED_PATTERN.sub("", raw)
    return _HYPHEN_RUN_PATTERN.sub("-", raw).strip("-")


def split_segments(value: str) -> list[str]:
    """Split a hyphenated token string, ignoring empty segments."""
    return [segment for segment in value.split("-") if segment]


def join_segments(segments: list[str] | tuple[str, ...]) -> str:
    return "-".join(segments)
