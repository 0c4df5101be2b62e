import json
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from sitetaxon import cli
from sitetaxon.content import ContentItem
from sitetaxon.store import JsonFileStore


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "console", Console(width=200))


def _args(taxonomy_file: Path, store_file: Path) -> list[str]:
    return ["--taxonomy", str(taxonomy_file), "--store", str(store_file)]


def _seed(store_file: Path, items: list[ContentItem]) -> None:
    store = JsonFileStore(store_file)
    for item in items:
        store.write_item(item)


def test_version_flag(runner: CliRunner) -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert "sitetaxon" in result.stdout


def test_derive_prints_slug_and_url(runner: CliRunner, taxonomy_file: Path) -> None:
    result = runner.invoke(
        cli.app,
        ["derive", "--category", "Landscaping", "--title", "Landscaping by Joe", "--taxonomy", str(taxonomy_file)],
    )

    assert result.exit_code == 0, result.stdout
    assert "vendors-landscaping-by-joe" in result.stdout
    assert "/vendors/landscaping/by-joe" in result.stdout


def test_resolve_reports_categories(runner: CliRunner, taxonomy_file: Path) -> None:
    result = runner.invoke(
        cli.app,
        ["resolve", "vendors-home-services-joes", "vendors-roofing-acme", "--taxonomy", str(taxonomy_file)],
    )

    assert result.exit_code == 0, result.stdout
    assert "Home Services" in result.stdout
    assert "Other Vendors" in result.stdout


def test_invalid_taxonomy_exits_with_error(runner: CliRunner, tmp_path: Path) -> None:
    bad = tmp_path / "bad.toml"
    bad.write_text('[[categories]]\nname = "X"\nslug_prefix = "x"\n', encoding="utf-8")

    result = runner.invoke(cli.app, ["derive", "--category", "X", "--title", "Y", "--taxonomy", str(bad)])

    assert result.exit_code == 1
    assert "Configuration error" in result.stdout


def test_add_then_list(runner: CliRunner, taxonomy_file: Path, store_file: Path) -> None:
    for title in ["Joe's Mowing", "Green Thumb"]:
        result = runner.invoke(cli.app, ["add", "--title", title, "--category", "Landscaping", *_args(taxonomy_file, store_file)])
        assert result.exit_code == 0, result.stdout

    items = JsonFileStore(store_file).list_items("Landscaping")
    assert [(item.id, item.slug, item.order) for item in items] == [
        ("1", "vendors-landscaping-joes-mowing", 0),
        ("2", "vendors-landscaping-green-thumb", 1),
    ]

    listing = runner.invoke(cli.app, ["list", *_args(taxonomy_file, store_file)])
    assert listing.exit_code == 0, listing.stdout
    assert "Landscaping" in listing.stdout
    assert "vendors-landscaping-green-thumb" in listing.stdout


def test_move_down_swaps_orders(runner: CliRunner, taxonomy_file: Path, store_file: Path) -> None:
    _seed(
        store_file,
        [
            ContentItem(id="1", title="A", category_name="Landscaping", slug="vendors-landscaping-a", order=0),
            ContentItem(id="2", title="B", category_name="Landscaping", slug="vendors-landscaping-b", order=1),
            ContentItem(id="3", title="C", category_name="Landscaping", slug="vendors-landscaping-c", order=2),
        ],
    )

    result = runner.invoke(cli.app, ["move-down", "1", "--store", str(store_file)])

    assert result.exit_code == 0, result.stdout
    orders = {item.id: item.order for item in JsonFileStore(store_file).list_items()}
    assert orders == {"1": 1, "2": 0, "3": 2}

    noop = runner.invoke(cli.app, ["move-up", "2", "--store", str(store_file)])
    assert "Nothing to move" in noop.stdout


def test_hide_and_public_listing(runner: CliRunner, taxonomy_file: Path, store_file: Path) -> None:
    _seed(
        store_file,
        [ContentItem(id="1", title="Secret", category_name="Landscaping", slug="vendors-landscaping-secret", order=0)],
    )

    result = runner.invoke(cli.app, ["hide", "1", "--store", str(store_file)])
    assert result.exit_code == 0, result.stdout
    assert JsonFileStore(store_file).get_item("1").is_hidden is True

    public = runner.invoke(cli.app, ["list", "--public", *_args(taxonomy_file, store_file)])
    assert "No items found" in public.stdout

    admin = runner.invoke(cli.app, ["list", *_args(taxonomy_file, store_file)])
    assert "(hidden)" in admin.stdout


def test_public_listing_skips_hidden_categories(runner: CliRunner, taxonomy_file: Path, store_file: Path) -> None:
    taxonomy_file.write_text(
        taxonomy_file.read_text(encoding="utf-8").replace('order = 1\n', 'order = 1\nis_hidden = true\n'),
        encoding="utf-8",
    )
    _seed(
        store_file,
        [
            ContentItem(id="1", title="Green Thumb", category_name="Landscaping", slug="vendors-landscaping-green-thumb", order=0),
            ContentItem(id="2", title="Joe", category_name="Home Services", slug="vendors-home-services-joe", order=0),
        ],
    )

    public = runner.invoke(cli.app, ["list", "--public", *_args(taxonomy_file, store_file)])

    assert public.exit_code == 0, public.stdout
    assert "vendors-home-services-joe" in public.stdout
    assert "green-thumb" not in public.stdout


def test_missing_item_exits_with_error(runner: CliRunner, store_file: Path) -> None:
    result = runner.invoke(cli.app, ["hide", "42", "--store", str(store_file)])

    assert result.exit_code == 1
    assert "No item" in result.stdout


def test_audit_fix_keeps_repaired_slugs_unique(runner: CliRunner, taxonomy_file: Path, store_file: Path) -> None:
    _seed(
        store_file,
        [
            ContentItem(id="1", title="Joe's Mowing", category_name="Landscaping", slug="bad-1", order=0),
            ContentItem(id="2", title="Joe's Mowing", category_name="Landscaping", slug="bad-2", order=1),
            ContentItem(id="3", title="Joe's Mowing", category_name="Landscaping", slug="vendors-landscaping-joes-mowing-2", order=2),
        ],
    )

    result = runner.invoke(cli.app, ["audit", "--fix", *_args(taxonomy_file, store_file)])

    assert result.exit_code == 0, result.stdout
    slugs = {item.id: item.slug for item in JsonFileStore(store_file).list_items()}
    assert slugs == {
        "1": "vendors-landscaping-joes-mowing",
        "2": "vendors-landscaping-joes-mowing-3",
        "3": "vendors-landscaping-joes-mowing-2",
    }


def test_audit_fix_repairs_slugs_and_reports_duplicates(runner: CliRunner, taxonomy_file: Path, store_file: Path) -> None:
    _seed(
        store_file,
        [
            ContentItem(id="1", title="Joe's Mowing", category_name="Landscaping", slug="vendors-landscaping-landscaping-joes", order=3),
            ContentItem(id="2", title="Green Thumb", category_name="Landscaping", slug="vendors-landscaping-green-thumb", order=3),
        ],
    )

    result = runner.invoke(cli.app, ["audit", "--fix", *_args(taxonomy_file, store_file)])

    assert result.exit_code == 0, result.stdout
    assert "order 3 shared by 1, 2" in result.stdout
    assert JsonFileStore(store_file).get_item("1").slug == "vendors-landscaping-joes-mowing"


def test_renumber_command(runner: CliRunner, store_file: Path) -> None:
    _seed(
        store_file,
        [
            ContentItem(id="1", title="A", category_name="Landscaping", slug="vendors-landscaping-a", order=5),
            ContentItem(id="2", title="B", category_name="Landscaping", slug="vendors-landscaping-b", order=5),
        ],
    )

    result = runner.invoke(cli.app, ["renumber", "--category", "Landscaping", "--store", str(store_file)])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(store_file.read_text(encoding="utf-8"))
    assert sorted((entry["id"], entry["order"]) for entry in payload["items"]) == [("1", 0), ("2", 1)]


def test_edit_command_rederives_slug(runner: CliRunner, taxonomy_file: Path, store_file: Path) -> None:
    _seed(
        store_file,
        [ContentItem(id="1", title="Joe's Mowing", category_name="Landscaping", slug="vendors-landscaping-joes-mowing", order=0)],
    )

    result = runner.invoke(cli.app, ["edit", "1", "--category", "Home Services", *_args(taxonomy_file, store_file)])

    assert result.exit_code == 0, result.stdout
    assert JsonFileStore(store_file).get_item("1").slug == "vendors-home-services-joes-mowing"


def test_url_converts_both_directions(runner: CliRunner, taxonomy_file: Path) -> None:
    result = runner.invoke(
        cli.app,
        ["url", "vendors-home-services-joes", "/vendors/landscaping/green-thumb", "--taxonomy", str(taxonomy_file)],
    )

    assert result.exit_code == 0, result.stdout
    assert "vendors-home-services-joes -> /vendors/home-services/joes" in result.stdout
    assert "/vendors/landscaping/green-thumb -> vendors-landscaping-green-thumb" in result.stdout
