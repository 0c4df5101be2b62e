"""
Slug derivation, category resolution and public URL helpers.
"""

from .deriver import ParsedSlug, compose_slug, derive_slug, public_url_to_slug, resolve_category, split_slug
from .urls import needs_repair, repair_slug, slug_to_public_url

__all__ = [
    "ParsedSlug",
    "compose_slug",
    "derive_slug",
    "public_url_to_slug",
    "resolve_category",
    "split_slug",
    "needs_repair",
    "repair_slug",
    "slug_to_public_url",
]
