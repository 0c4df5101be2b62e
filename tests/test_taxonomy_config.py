from pathlib import Path
import textwrap

import pytest

from sitetaxon.config import CategoryDescriptor, ConfigError, Taxonomy, load_taxonomy


def _write_taxonomy(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "taxonomy.toml"
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_loads_singular_category_blocks(taxonomy_file: Path) -> None:
    taxonomy = load_taxonomy(taxonomy_file)

    assert taxonomy.namespace == "vendors"
    assert [category.name for category in taxonomy.categories] == ["Home Services", "Landscaping"]
    assert taxonomy.legacy == {"home": "Home Services"}
    assert taxonomy.compound_set == frozenset({"anchor-vapor-barrier", "home-services"})


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as exc:
        load_taxonomy(tmp_path / "missing.toml")

    assert "not found" in str(exc.value)


def test_rejects_plural_category_blocks(tmp_path: Path) -> None:
    path = _write_taxonomy(
        tmp_path,
        """
        [[categories]]
        name = "Landscaping"
        slug_prefix = "landscaping"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_taxonomy(path)

    assert "[[category]]" in str(exc.value)


def test_rejects_unknown_keys(tmp_path: Path) -> None:
    path = _write_taxonomy(
        tmp_path,
        """
        namespace = "vendors"
        unexpected = "nope"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_taxonomy(path)

    assert "extra" in str(exc.value).lower()


def test_rejects_invalid_toml(tmp_path: Path) -> None:
    path = _write_taxonomy(tmp_path, 'namespace = "vendors')

    with pytest.raises(ConfigError) as exc:
        load_taxonomy(path)

    assert "Invalid TOML" in str(exc.value)


def test_rejects_duplicate_prefixes(tmp_path: Path) -> None:
    path = _write_taxonomy(
        tmp_path,
        """
        [[category]]
        name = "Landscaping"
        slug_prefix = "landscaping"

        [[category]]
        name = "Lawn Care"
        slug_prefix = "landscaping"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_taxonomy(path)

    assert "duplicate slug_prefix" in str(exc.value)


def test_rejects_unnormalized_prefix() -> None:
    with pytest.raises(ValueError):
        CategoryDescriptor(name="Home Services", slug_prefix="Home Services")


def test_single_segment_compound_prefix_is_rejected() -> None:
    with pytest.raises(ValueError):
        Taxonomy(compound_prefixes=["landscaping"])


def test_descriptor_for_unknown_and_blank_names(vendor_taxonomy: Taxonomy) -> None:
    assert vendor_taxonomy.descriptor_for("Home Services").slug_prefix == "home-services"
    assert vendor_taxonomy.descriptor_for("home-services").name == "Home Services"
    assert vendor_taxonomy.descriptor_for("Roofing & Gutters").slug_prefix == "roofing-and-gutters"
    assert vendor_taxonomy.descriptor_for("").name == "Other Vendors"
    assert vendor_taxonomy.descriptor_for("???").slug_prefix == "other-vendors"


def test_ordered_categories_puts_unordered_last() -> None:
    taxonomy = Taxonomy(
        categories=[
            CategoryDescriptor(name="C", slug_prefix="c"),
            CategoryDescriptor(name="B", slug_prefix="b", order=2),
            CategoryDescriptor(name="A", slug_prefix="a", order=1),
        ]
    )

    assert [category.name for category in taxonomy.ordered_categories()] == ["A", "B", "C"]


def test_hash_is_deterministic(vendor_taxonomy: Taxonomy) -> None:
    copy = Taxonomy.model_validate(vendor_taxonomy.model_dump())

    assert copy.hash == vendor_taxonomy.hash
    changed = vendor_taxonomy.model_copy(update={"placeholder": "listing"})
    assert changed.hash != vendor_taxonomy.hash
