from pathlib import Path
import textwrap

import pytest
from typer.testing import CliRunner

from sitetaxon.config import CategoryDescriptor, Taxonomy
from sitetaxon.content import ContentItem


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def vendor_taxonomy() -> Taxonomy:
    return Taxonomy(
        namespace="vendors",
        fallback_category="Other Vendors",
        compound_prefixes=["anchor-vapor-barrier", "hvac-and-air-quality"],
        legacy={"home": "Home Services", "food": "Food & Dining"},
        categories=[
            CategoryDescriptor(name="Home", slug_prefix="home", order=0),
            CategoryDescriptor(name="Home Services", slug_prefix="home-services", order=1),
            CategoryDescriptor(name="Food & Dining", slug_prefix="food-and-dining", order=2),
            CategoryDescriptor(name="Landscaping", slug_prefix="landscaping", order=3),
            CategoryDescriptor(name="Professional Services", slug_prefix="professional-services", order=4),
        ],
    )


@pytest.fixture
def forum_items() -> list[ContentItem]:
    return [
        ContentItem(id="1", title="General", category_name="Forum", slug="forum-general-main", order=0),
        ContentItem(id="2", title="Events", category_name="Forum", slug="forum-general-events", order=1),
        ContentItem(id="3", title="Help", category_name="Forum", slug="forum-general-help", order=2),
    ]


@pytest.fixture
def taxonomy_file(tmp_path: Path) -> Path:
    """
    Write a small vendor taxonomy file for CLI tests and return its path.
    """
    body = textwrap.dedent(
        """
        namespace = "vendors"
        fallback_category = "Other Vendors"
        compound_prefixes = ["anchor-vapor-barrier"]

        [legacy]
        home = "Home Services"

        [[category]]
        name = "Home Services"
        slug_prefix = "home-services"
        order = 0

        [[category]]
        name = "Landscaping"
        slug_prefix = "landscaping"
        order = 1
        """
    ).strip()
    path = tmp_path / "vendors.toml"
    path.write_text(body + "\n", encoding="utf-8")
    return path


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    return tmp_path / "store.json"
