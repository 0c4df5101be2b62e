"""
Pydantic models for validating, loading and hashing taxonomy files.
"""

from __future__ import annotations

import hashlib
import json
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..util.text import normalize_title, split_segments

DEFAULT_FALLBACK_NAME = "Uncategorized"
DEFAULT_PLACEHOLDER = "main"


class ConfigError(RuntimeError):
    """Raised when taxonomy files cannot be loaded or validated."""


class ContentKind(str, Enum):
    """Content kinds sharing the taxonomy core, valued by their default namespace."""

    PAGES = "pages"
    VENDORS = "vendors"
    FORUM = "forum"


class CategoryDescriptor(BaseModel):
    """
    A category within one taxonomy.

    Attributes:
        name: Human-readable label, unique within the taxonomy (e.g. "Home Services").
        slug_prefix: Lowercase hyphen-joined token(s) used as the slug prefix
            (e.g. "home-services"). Stable once items reference it.
        order: Position of the category itself among its siblings, if curated.
        is_hidden: Hide the category from public navigation.
    """

    name: str
    slug_prefix: str
    order: Optional[int] = None
    is_hidden: bool = False

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category name must not be blank")
        return value

    @field_validator("slug_prefix")
    @classmethod
    def _prefix_normalized(cls, value: str) -> str:
        normalized = normalize_title(value)
        if not normalized:
            raise ValueError("slug_prefix must contain at least one [a-z0-9] token")
        if normalized != value:
            raise ValueError(f"slug_prefix {value!r} is not normalized (expected {normalized!r})")
        return value

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(split_segments(self.slug_prefix))

    @property
    def is_compound(self) -> bool:
        return len(self.segments) > 1


class Taxonomy(BaseModel):
    """
    Snapshot of the categories for one content kind.

    Passed explicitly into every derive/resolve call; nothing reads ambient
    taxonomy state.

    Attributes:
        namespace: Root tag prefixed to every slug of this content kind.
        categories: Known category descriptors.
        compound_prefixes: Known multi-segment prefixes, including ones from
            retired categories that still appear in stored slugs.
        legacy: Static ``prefix token -> category name`` table for slugs minted
            before the current taxonomy existed.
        fallback_category: Name of the sentinel returned when nothing matches.
        placeholder: Suffix used when a title yields no usable tokens.
    """

    namespace: str = ContentKind.VENDORS.value
    categories: List[CategoryDescriptor] = Field(default_factory=list)
    compound_prefixes: List[str] = Field(default_factory=list)
    legacy: Dict[str, str] = Field(default_factory=dict)
    fallback_category: str = DEFAULT_FALLBACK_NAME
    placeholder: str = DEFAULT_PLACEHOLDER

    model_config = {
        "extra": "forbid",
    }

    @field_validator("namespace", "placeholder")
    @classmethod
    def _token_normalized(cls, value: str) -> str:
        normalized = normalize_title(value)
        if not normalized or normalized != value:
            raise ValueError(f"{value!r} must be a non-empty lowercase hyphenated token")
        return value

    @field_validator("compound_prefixes")
    @classmethod
    def _compounds_normalized(cls, values: List[str]) -> List[str]:
        cleaned: List[str] = []
        for value in values:
            normalized = normalize_title(value)
            if len(split_segments(normalized)) < 2:
                raise ValueError(f"compound prefix {value!r} must contain at least two segments")
            if normalized not in cleaned:
                cleaned.append(normalized)
        return cleaned

    @field_validator("legacy")
    @classmethod
    def _legacy_keys_normalized(cls, values: Dict[str, str]) -> Dict[str, str]:
        cleaned: Dict[str, str] = {}
        for token, name in values.items():
            normalized = normalize_title(token)
            if not normalized:
                raise ValueError(f"legacy token {token!r} is empty once normalized")
            cleaned[normalized] = name
        return cleaned

    @model_validator(mode="after")
    def _unique_categories(self) -> "Taxonomy":
        names: set[str] = set()
        prefixes: set[str] = set()
        for category in self.categories:
            if category.name in names:
                raise ValueError(f"duplicate category name {category.name!r}")
            if category.slug_prefix in prefixes:
                raise ValueError(f"duplicate slug_prefix {category.slug_prefix!r}")
            names.add(category.name)
            prefixes.add(category.slug_prefix)
        return self

    @property
    def fallback(self) -> CategoryDescriptor:
        """The "Uncategorized" sentinel descriptor."""
        existing = self.find(self.fallback_category)
        if existing is not None:
            return existing
        prefix = normalize_title(self.fallback_category) or "uncategorized"
        return CategoryDescriptor(name=self.fallback_category, slug_prefix=prefix)

    @property
    def compound_set(self) -> frozenset[str]:
        """Configured compound prefixes plus every hyphenated category prefix."""
        derived = {category.slug_prefix for category in self.categories if category.is_compound}
        return frozenset(self.compound_prefixes) | derived

    def find(self, key: str | None) -> Optional[CategoryDescriptor]:
        """Look a category up by exact name, then by slug prefix."""
        if not key:
            return None
        for category in self.categories:
            if category.name == key:
                return category
        for category in self.categories:
            if category.slug_prefix == key:
                return category
        return None

    def descriptor_for(self, name: str | None) -> CategoryDescriptor:
        """
        Return the descriptor for ``name``, synthesizing one for unknown names.

        Unknown names get a prefix normalized from the name itself; blank or
        unrepresentable names fall back to the sentinel.
        """
        found = self.find(name)
        if found is not None:
            return found
        prefix = normalize_title(name)
        if not prefix:
            return self.fallback
        return CategoryDescriptor(name=name.strip(), slug_prefix=prefix)

    def ordered_categories(self) -> List[CategoryDescriptor]:
        """Categories sorted by their own order (unset last), then declaration."""
        indexed = list(enumerate(self.categories))
        indexed.sort(key=lambda pair: (pair[1].order is None, pair[1].order or 0, pair[0]))
        return [category for _, category in indexed]

    @property
    def hash(self) -> str:
        """
        Deterministic hash of the normalized taxonomy, used to detect changes.
        """
        payload = self.model_dump(mode="json", round_trip=True)
        blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.sha256(blob).hexdigest()


def load_taxonomy(path: Path | str) -> Taxonomy:
    """
    Load and validate a TOML taxonomy file into a Taxonomy instance.

    Args:
        path: Path to the TOML taxonomy file.

    Returns:
        A validated Taxonomy object.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    taxonomy_path = Path(path).expanduser().resolve()
    if not taxonomy_path.exists():
        raise ConfigError(f"Taxonomy file not found: {taxonomy_path}")

    try:
        with taxonomy_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read taxonomy file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in taxonomy file: {exc}") from exc

    raw_data = _normalize_toml_schema(raw_data)

    try:
        return Taxonomy.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _normalize_toml_schema(data: Any) -> Dict[str, Any]:
    """
    Map the singular ``[[category]]`` table array onto the ``categories`` field.
    """
    if not isinstance(data, dict):
        raise ConfigError("Taxonomy root must be a TOML table/object.")

    if "categories" in data:
        raise ConfigError("Use [[category]] blocks (singular) instead of [[categories]].")

    normalized = dict(data)
    normalized["categories"] = _coerce_table_array(normalized.pop("category", None), "category")
    return normalized


def _coerce_table_array(value: Any, label: str) -> list[dict]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        if not all(isinstance(item, dict) for item in value):
            raise ConfigError(f"Each [[{label}]] entry must be a table/object.")
        return value
    raise ConfigError(f"Invalid [{label}] block; expected a table or array of tables.")
