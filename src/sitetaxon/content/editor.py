"""
Create/edit lifecycle for content items.

These helpers combine the slug deriver and the sequencer into the complete
records that the store's whole-record writes expect. They never perform I/O.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config.models import CategoryDescriptor, ConfigError, Taxonomy
from ..ordering import next_order, sort_siblings
from ..slugs import compose_slug, derive_slug, resolve_category, split_slug
from ..util.naming import unique_slug
from ..util.text import normalize_title
from .models import ContentItem

logger = logging.getLogger(__name__)


def create_item(
    taxonomy: Taxonomy,
    siblings: Sequence[ContentItem],
    *,
    item_id: str,
    title: str,
    category_name: str,
    is_hidden: bool = False,
    taken_slugs: Iterable[str] = (),
    extra: Optional[Dict[str, object]] = None,
) -> ContentItem:
    """
    Build a new record placed last among ``siblings``.

    The slug is derived from the title and made unique against ``taken_slugs``.
    """
    descriptor = taxonomy.descriptor_for(category_name)
    slug = unique_slug(derive_slug(taxonomy, descriptor, title), taken_slugs)
    item = ContentItem(
        id=item_id,
        title=title,
        category_name=descriptor.name,
        slug=slug,
        order=next_order(siblings),
        is_hidden=is_hidden,
        extra=dict(extra or {}),
    )
    logger.info("Prepared item %s as %s (order %s)", item.id, item.slug, item.order)
    return item


def edit_item(
    taxonomy: Taxonomy,
    item: ContentItem,
    *,
    title: Optional[str] = None,
    category_name: Optional[str] = None,
    taken_slugs: Iterable[str] = (),
) -> ContentItem:
    """
    Apply a title and/or category edit, re-deriving the slug.

    A title change derives the suffix from the new title. A category-only
    change keeps the existing suffix under the new prefix. ``order`` is left
    untouched either way.
    """
    new_title = item.title if title is None else title
    descriptor = taxonomy.descriptor_for(item.category_name if category_name is None else category_name)
    title_changed = new_title != item.title
    category_changed = descriptor.name != item.category_name

    if not title_changed and not category_changed:
        return item

    existing = None if title_changed else item.slug
    slug = derive_slug(taxonomy, descriptor, new_title, existing_slug=existing)
    if slug != item.slug:
        slug = unique_slug(slug, (taken for taken in taken_slugs if taken != item.slug))
    logger.info("Re-derived slug for %s: %s -> %s", item.id, item.slug, slug)
    return item.model_copy(update={"title": new_title, "category_name": descriptor.name, "slug": slug})


def set_hidden(item: ContentItem, hidden: bool) -> ContentItem:
    """Flip visibility only; ``order`` and ``slug`` are unchanged."""
    if item.is_hidden == hidden:
        return item
    return item.model_copy(update={"is_hidden": hidden})


def public_items(items: Iterable[ContentItem], *, taxonomy: Optional[Taxonomy] = None) -> List[ContentItem]:
    """
    Items the public site may list, in display order.

    With a taxonomy, items whose slug resolves to a hidden category are
    dropped as well.
    """
    visible = (item for item in items if not item.is_hidden)
    if taxonomy is not None:
        visible = (item for item in visible if not resolve_category(taxonomy, item.slug).is_hidden)
    return sort_siblings(visible)


def group_by_category(taxonomy: Taxonomy, items: Iterable[ContentItem]) -> Dict[str, List[ContentItem]]:
    """
    Group items by the category their slug resolves to.

    Groups follow the taxonomy's category order, with the fallback group last;
    each group is sorted for display. Empty categories are omitted.
    """
    buckets: Dict[str, List[ContentItem]] = {}
    for item in items:
        category = resolve_category(taxonomy, item.slug)
        buckets.setdefault(category.name, []).append(item)

    grouped: Dict[str, List[ContentItem]] = {}
    for category in taxonomy.ordered_categories():
        if category.name in buckets:
            grouped[category.name] = sort_siblings(buckets.pop(category.name))
    fallback_items = buckets.pop(taxonomy.fallback_category, None)
    for name in sorted(buckets):
        grouped[name] = sort_siblings(buckets[name])
    if fallback_items:
        grouped[taxonomy.fallback_category] = sort_siblings(fallback_items)
    return grouped


def rename_category_prefix(
    taxonomy: Taxonomy,
    category_name: str,
    new_prefix: str,
    items: Iterable[ContentItem],
) -> Tuple[Taxonomy, List[ContentItem]]:
    """
    Change a category's slug prefix and migrate the slugs that reference it.

    Returns the updated taxonomy and the migrated records (only those whose
    slug changed). Suffixes are preserved.

    Raises:
        ConfigError: If the category is unknown or the prefix is invalid or taken.
    """
    current = taxonomy.find(category_name)
    if current is None:
        raise ConfigError(f"Unknown category: {category_name}")
    prefix = normalize_title(new_prefix)
    if not prefix:
        raise ConfigError(f"Invalid slug prefix: {new_prefix!r}")
    for other in taxonomy.categories:
        if other.slug_prefix == prefix and other.name != current.name:
            raise ConfigError(f"Slug prefix {prefix!r} is already used by {other.name}")

    renamed = CategoryDescriptor(
        name=current.name,
        slug_prefix=prefix,
        order=current.order,
        is_hidden=current.is_hidden,
    )
    categories = [renamed if category.name == current.name else category for category in taxonomy.categories]
    updated = taxonomy.model_copy(update={"categories": categories})

    migrated: List[ContentItem] = []
    for item in items:
        parsed = split_slug(taxonomy, item.slug)
        if parsed is None or parsed.category.name != current.name:
            continue
        slug = compose_slug(updated, renamed, parsed.suffix or item.title)
        if slug != item.slug:
            migrated.append(item.model_copy(update={"slug": slug}))
    logger.info("Renamed prefix %s -> %s; %d slug(s) migrated", current.slug_prefix, prefix, len(migrated))
    return updated, migrated

