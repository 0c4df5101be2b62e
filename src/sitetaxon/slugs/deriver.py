"""
Derive slugs from (category, title) pairs and resolve slugs back to categories.

Slugs have the shape ``<namespace>-<category prefix>-<suffix>``. The category
prefix may itself contain hyphens (``home-services``), so parsing a slug always
matches known prefixes as whole segment runs, longest first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from ..config.models import CategoryDescriptor, Taxonomy
from ..util.text import join_segments, normalize_title, split_segments

logger = logging.getLogger(__name__)

CategoryLike = Union[CategoryDescriptor, str, None]


@dataclass(frozen=True)
class ParsedSlug:
    """A slug split into its category prefix and unique suffix."""

    prefix: str
    suffix: str
    category: CategoryDescriptor


def _longest_prefix(candidates: Iterable[str], segments: Sequence[str]) -> Optional[str]:
    """Return the candidate covering the most leading segments, if any."""
    best: Optional[str] = None
    best_len = 0
    for candidate in candidates:
        parts = split_segments(candidate)
        size = len(parts)
        if size > best_len and list(segments[:size]) == parts:
            best, best_len = candidate, size
    return best


def _strip_namespace(taxonomy: Taxonomy, segments: List[str]) -> Optional[List[str]]:
    namespace = split_segments(taxonomy.namespace)
    if segments[: len(namespace)] != namespace:
        return None
    return segments[len(namespace):]


def _coerce_descriptor(taxonomy: Taxonomy, category: CategoryLike) -> CategoryDescriptor:
    if isinstance(category, CategoryDescriptor):
        return category
    return taxonomy.descriptor_for(category)


def public_url_to_slug(taxonomy: Taxonomy, url: str) -> str:
    """
    Convert a public path such as ``/vendors/home-services/joes`` to slug form.

    Any leading path components before the namespace (``more/vendors/...``) are
    ignored. Returns an empty string when the namespace does not appear.
    """
    parts = [normalize_title(part) for part in (url or "").split("/")]
    parts = [part for part in parts if part]
    if taxonomy.namespace not in parts:
        return ""
    start = parts.index(taxonomy.namespace)
    return join_segments(parts[start:])


def split_slug(taxonomy: Taxonomy, slug: str) -> Optional[ParsedSlug]:
    """
    Split ``slug`` into prefix and suffix using the taxonomy snapshot.

    Known category prefixes and compound prefixes are tried as a whole,
    longest first, so ``home`` never shadows ``home-services``. When the
    longest match is not a current category the legacy table is consulted.
    Returns None for slugs outside the namespace or with no recognisable prefix.
    """
    value = (slug or "").strip().lower()
    if "/" in value:
        value = public_url_to_slug(taxonomy, value)
    rest = _strip_namespace(taxonomy, split_segments(value))
    if not rest:
        return None

    by_prefix = {category.slug_prefix: category for category in taxonomy.categories}
    matched = _longest_prefix(list(by_prefix) + sorted(taxonomy.compound_set), rest)
    if matched is not None and matched in by_prefix:
        size = len(split_segments(matched))
        return ParsedSlug(prefix=matched, suffix=join_segments(rest[size:]), category=by_prefix[matched])

    legacy_token = _longest_prefix(taxonomy.legacy, rest)
    if legacy_token is not None and (matched is None or len(split_segments(legacy_token)) >= len(split_segments(matched))):
        name = taxonomy.legacy[legacy_token]
        category = taxonomy.find(name) or CategoryDescriptor(name=name, slug_prefix=legacy_token)
        size = len(split_segments(legacy_token))
        logger.debug("Slug %s matched legacy token %s -> %s", slug, legacy_token, name)
        return ParsedSlug(prefix=legacy_token, suffix=join_segments(rest[size:]), category=category)

    if matched is not None:
        # Retired compound prefix: the split is still meaningful, the category is not.
        size = len(split_segments(matched))
        return ParsedSlug(prefix=matched, suffix=join_segments(rest[size:]), category=taxonomy.fallback)

    fallback = taxonomy.fallback
    if rest[: len(fallback.segments)] == list(fallback.segments):
        size = len(fallback.segments)
        return ParsedSlug(prefix=fallback.slug_prefix, suffix=join_segments(rest[size:]), category=fallback)
    return None


def resolve_category(taxonomy: Taxonomy, slug: str) -> CategoryDescriptor:
    """
    Map a slug (or public URL) back to its category.

    Deterministic, side-effect free and never raises: anything that cannot be
    matched resolves to the taxonomy's fallback sentinel.
    """
    parsed = split_slug(taxonomy, slug)
    if parsed is None:
        logger.debug("Slug %r resolved to fallback category", slug)
        return taxonomy.fallback
    return parsed.category


def _strip_duplicate_segments(
    segments: List[str],
    descriptor: CategoryDescriptor,
    namespace: str,
) -> List[str]:
    duplicates = set(descriptor.segments) | set(split_segments(namespace))
    index = 0
    while index < len(segments) and segments[index] in duplicates:
        index += 1
    return segments[index:]


def _is_shadowed(taxonomy: Taxonomy, descriptor: CategoryDescriptor, segments: List[str]) -> bool:
    """True when prefix + segments would parse under a longer known prefix."""
    if not segments:
        return False
    candidates = [category.slug_prefix for category in taxonomy.categories]
    candidates.extend(taxonomy.compound_set)
    matched = _longest_prefix(candidates, list(descriptor.segments) + segments)
    return matched is not None and len(split_segments(matched)) > len(descriptor.segments)


def _clean_suffix(taxonomy: Taxonomy, descriptor: CategoryDescriptor, segments: List[str]) -> List[str]:
    while True:
        cleaned = _strip_duplicate_segments(segments, descriptor, taxonomy.namespace)
        if _is_shadowed(taxonomy, descriptor, cleaned):
            logger.debug("Suffix %s collides with a longer prefix than %s", cleaned, descriptor.slug_prefix)
            cleaned = cleaned[1:]
        if cleaned == segments:
            return cleaned
        segments = cleaned


def derive_slug(
    taxonomy: Taxonomy,
    category: CategoryLike,
    title: Optional[str],
    existing_slug: Optional[str] = None,
) -> str:
    """
    Build the canonical slug for an item.

    Args:
        taxonomy: Snapshot of the categories for this content kind.
        category: Descriptor (or category name) the item belongs to.
        title: Free-text title.
        existing_slug: Current slug on the edit path. Its suffix is kept when it
            can be parsed, so moving an item to another category keeps its
            identifier; otherwise the title is used.

    Returns:
        ``<namespace>-<prefix>-<suffix>``. Never empty: blank titles and
        suffixes consumed by de-duplication become the taxonomy placeholder.

    Examples:
        "Landscaping" + "Joe's Mowing"        -> "vendors-landscaping-joes-mowing"
        "Landscaping" + "Landscaping by Joe"  -> "vendors-landscaping-by-joe"
    """
    descriptor = _coerce_descriptor(taxonomy, category)

    suffix: Optional[str] = None
    if existing_slug:
        parsed = split_slug(taxonomy, existing_slug)
        if parsed is not None and parsed.suffix:
            suffix = parsed.suffix
        else:
            logger.debug("No suffix parsed from %r; deriving from title", existing_slug)
    if suffix is None:
        suffix = normalize_title(title)

    slug = compose_slug(taxonomy, descriptor, suffix)
    logger.debug("Derived slug %s from category=%s title=%r", slug, descriptor.name, title)
    return slug


def compose_slug(taxonomy: Taxonomy, category: CategoryLike, suffix: Optional[str]) -> str:
    """
    Join namespace, category prefix and a cleaned suffix.

    The suffix is normalized, stripped of segments repeating the prefix and
    trimmed until it no longer parses under a longer known prefix.
    """
    descriptor = _coerce_descriptor(taxonomy, category)
    segments = _clean_suffix(taxonomy, descriptor, split_segments(normalize_title(suffix)))
    if not segments:
        segments = [taxonomy.placeholder]
        if _is_shadowed(taxonomy, descriptor, segments):
            logger.warning(
                "Placeholder suffix %r for category %s resolves to a longer prefix",
                taxonomy.placeholder,
                descriptor.slug_prefix,
            )

    return join_segments([taxonomy.namespace, descriptor.slug_prefix, *segments])
