"""
Conversion between stored slugs and public URL paths, plus slug repair.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config.models import Taxonomy
from ..util.text import normalize_title, split_segments
from .deriver import CategoryLike, derive_slug, public_url_to_slug, split_slug

logger = logging.getLogger(__name__)

__all__ = ["slug_to_public_url", "public_url_to_slug", "needs_repair", "repair_slug"]


def slug_to_public_url(taxonomy: Taxonomy, slug: str) -> str:
    """
    Convert ``vendors-home-services-joes`` to ``/vendors/home-services/joes``.

    Unparseable slugs keep their remaining text as a single path component.
    """
    namespace = taxonomy.namespace
    if not slug:
        return f"/{namespace}"
    parsed = split_slug(taxonomy, slug)
    if parsed is None:
        remainder = slug.strip().lower()
        if remainder.startswith(f"{namespace}-"):
            remainder = remainder[len(namespace) + 1:]
        return f"/{namespace}/{remainder}" if remainder and remainder != namespace else f"/{namespace}"
    if not parsed.suffix:
        return f"/{namespace}/{parsed.prefix}"
    return f"/{namespace}/{parsed.prefix}/{parsed.suffix}"


def needs_repair(taxonomy: Taxonomy, slug: str) -> bool:
    """
    Flag stored slugs that a fresh derivation would not produce.

    Covers wrong or missing namespace, non-normalized text, empty segments,
    a missing suffix, a suffix repeating the category prefix and slugs that
    only resolve to the fallback category.
    """
    if not slug:
        return False
    if normalize_title(slug) != slug or "--" in slug:
        return True
    if not slug.startswith(f"{taxonomy.namespace}-"):
        return True
    parsed = split_slug(taxonomy, slug)
    if parsed is None or not parsed.suffix:
        return True
    if parsed.category.name == taxonomy.fallback_category and taxonomy.find(taxonomy.fallback_category) is None:
        return True
    first = split_segments(parsed.suffix)[0]
    return first in split_segments(parsed.prefix)


def repair_slug(
    taxonomy: Taxonomy,
    slug: str,
    category: CategoryLike,
    title: Optional[str] = None,
) -> str:
    """
    Produce a well-formed slug for ``category``.

    With a title the slug is derived afresh from it. Without one the existing
    suffix is kept where it parses; otherwise the old slug text (minus any
    namespace) is treated as the title.
    """
    if title:
        repaired = derive_slug(taxonomy, category, title)
    else:
        text = (slug or "").strip().lower()
        if "/" in text:
            text = public_url_to_slug(taxonomy, text) or text
        if text.startswith(f"{taxonomy.namespace}-"):
            text = text[len(taxonomy.namespace) + 1:]
        repaired = derive_slug(taxonomy, category, text, existing_slug=slug)
    if repaired != slug:
        logger.info("Repaired slug %s -> %s", slug, repaired)
    return repaired
