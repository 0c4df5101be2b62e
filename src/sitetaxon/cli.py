"""
Command line interface for inspecting and curating content taxonomies.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import ConfigError, Taxonomy, get_settings, load_taxonomy
from .content import ContentItem
from .content.editor import create_item, edit_item, group_by_category, public_items, set_hidden
from .ordering import ReorderPlan, find_duplicate_orders, index_of, move_down, move_up, renumber
from .slugs import derive_slug, needs_repair, public_url_to_slug, repair_slug, resolve_category, slug_to_public_url
from .store import ItemNotFoundError, JsonFileStore, StoreError, apply_plan, load_siblings, write_items
from .util.naming import unique_slug

console = Console()
app = typer.Typer(help="Derive slugs and curate sibling order for pages, vendors and forum categories.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def _configure_logging(level_name: str) -> None:
    env_override = os.getenv("SITETAXON_LOG_LEVEL") or get_settings().log_level
    level_str = (env_override or level_name or "warning").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "WARNING"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_taxonomy_path(value: Optional[Path]) -> Path:
    """Fall back to SITETAXON_TAXONOMY and ensure the file exists."""
    candidate = value or get_settings().taxonomy_path
    if candidate is None:
        raise typer.BadParameter("Pass --taxonomy or set SITETAXON_TAXONOMY.")
    resolved = Path(candidate).expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No taxonomy file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Taxonomy path must be a file, got directory: {resolved}")
    return resolved


def _resolve_store_path(value: Optional[Path]) -> Path:
    """Fall back to SITETAXON_STORE; the file is created on first write."""
    candidate = value or get_settings().store_path
    if candidate is None:
        raise typer.BadParameter("Pass --store or set SITETAXON_STORE.")
    return Path(candidate).expanduser().resolve()


def _load_taxonomy_or_exit(path: Path) -> Taxonomy:
    try:
        return load_taxonomy(path)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _get_item_or_exit(store: JsonFileStore, item_id: str) -> ContentItem:
    try:
        return store.get_item(item_id)
    except ItemNotFoundError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc


def _next_item_id(items: List[ContentItem]) -> str:
    numeric = [int(item.id) for item in items if item.id.isdigit()]
    return str(max(numeric, default=0) + 1)


def _apply_or_exit(store: JsonFileStore, plan: ReorderPlan) -> None:
    if plan.is_noop:
        console.print("[yellow]Nothing to move.[/]")
        return
    try:
        written = apply_plan(store, plan)
    except StoreError as exc:
        console.print(f"[bold red]Reorder failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    for item in written:
        console.print(f"- {escape(item.title)} ({item.id}): order {item.order}")


TAXONOMY_OPTION = typer.Option(None, "--taxonomy", "-t", help="Path to the taxonomy TOML file.")
STORE_OPTION = typer.Option(None, "--store", "-s", help="Path to the JSON content store.")


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show sitetaxon version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]sitetaxon[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def derive(
    category: str = typer.Option(..., "--category", "-c", help="Category name (or slug prefix)."),
    title: str = typer.Option("", "--title", help="Item title."),
    existing: Optional[str] = typer.Option(None, "--existing", help="Current slug whose suffix should be kept."),
    taxonomy: Optional[Path] = TAXONOMY_OPTION,
) -> None:
    """
    Print the slug and public URL for a title in a category.
    """
    snapshot = _load_taxonomy_or_exit(_resolve_taxonomy_path(taxonomy))
    slug = derive_slug(snapshot, category, title, existing_slug=existing)
    console.print(slug)
    console.print(f"[dim]{slug_to_public_url(snapshot, slug)}[/]")


@app.command()
def resolve(
    slugs: List[str] = typer.Argument(..., help="Slugs or public URLs to resolve."),
    taxonomy: Optional[Path] = TAXONOMY_OPTION,
) -> None:
    """
    Show the category each slug belongs to.
    """
    snapshot = _load_taxonomy_or_exit(_resolve_taxonomy_path(taxonomy))
    table = Table(title="Category Resolution")
    table.add_column("Slug", overflow="fold")
    table.add_column("Category")
    table.add_column("Prefix")
    table.add_column("Public URL", overflow="fold")
    for slug in slugs:
        value = public_url_to_slug(snapshot, slug) if "/" in slug else slug
        category = resolve_category(snapshot, value)
        table.add_row(escape(slug), escape(category.name), category.slug_prefix, slug_to_public_url(snapshot, value))
    console.print(table)


@app.command()
def url(
    values: List[str] = typer.Argument(..., help="Slugs or public paths to convert."),
    taxonomy: Optional[Path] = TAXONOMY_OPTION,
) -> None:
    """
    Convert slugs to public paths and public paths back to slugs.
    """
    snapshot = _load_taxonomy_or_exit(_resolve_taxonomy_path(taxonomy))
    for value in values:
        if "/" in value:
            converted = public_url_to_slug(snapshot, value)
        else:
            converted = slug_to_public_url(snapshot, value)
        console.print(f"{escape(value)} -> {converted or '[red]outside namespace[/]'}")


@app.command("list")
def list_items(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only show this category."),
    public: bool = typer.Option(False, "--public", help="Hide hidden items and items of hidden categories, as the public site does."),
    taxonomy: Optional[Path] = TAXONOMY_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    List stored items grouped by category in display order.
    """
    snapshot = _load_taxonomy_or_exit(_resolve_taxonomy_path(taxonomy))
    content = JsonFileStore(_resolve_store_path(store))
    items = content.list_items()
    if public:
        items = public_items(items, taxonomy=snapshot)
    grouped = group_by_category(snapshot, items)
    if category:
        grouped = {name: members for name, members in grouped.items() if name == category}
    if not grouped:
        console.print("[yellow]No items found.[/]")
        return
    for name, members in grouped.items():
        table = Table(title=escape(name))
        table.add_column("#", justify="right")
        table.add_column("ID")
        table.add_column("Title")
        table.add_column("Order", justify="right")
        table.add_column("Slug", overflow="fold")
        for position, item in enumerate(members):
            marker = " [dim](hidden)[/]" if item.is_hidden else ""
            order = "-" if item.order is None else str(item.order)
            table.add_row(str(position), item.id, f"{escape(item.title)}{marker}", order, item.slug)
        console.print(table)


@app.command()
def add(
    title: str = typer.Option(..., "--title", help="Item title."),
    category: str = typer.Option(..., "--category", "-c", help="Category name."),
    item_id: Optional[str] = typer.Option(None, "--id", help="Explicit id (defaults to the next numeric id)."),
    hidden: bool = typer.Option(False, "--hidden", help="Create the item hidden from public listings."),
    taxonomy: Optional[Path] = TAXONOMY_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Create an item placed last in its category.
    """
    snapshot = _load_taxonomy_or_exit(_resolve_taxonomy_path(taxonomy))
    content = JsonFileStore(_resolve_store_path(store))
    existing = content.list_items()
    descriptor = snapshot.descriptor_for(category)
    item = create_item(
        snapshot,
        [item for item in existing if item.category_name == descriptor.name],
        item_id=item_id or _next_item_id(existing),
        title=title,
        category_name=descriptor.name,
        is_hidden=hidden,
        taken_slugs=[item.slug for item in existing],
    )
    content.write_item(item)
    console.print(f"[bold green]Created[/] {item.id}: {item.slug} (order {item.order})")


@app.command()
def edit(
    item_id: str = typer.Argument(..., help="Id of the item to edit."),
    title: Optional[str] = typer.Option(None, "--title", help="New title."),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="New category name."),
    taxonomy: Optional[Path] = TAXONOMY_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Change an item's title and/or category, re-deriving its slug.
    """
    snapshot = _load_taxonomy_or_exit(_resolve_taxonomy_path(taxonomy))
    content = JsonFileStore(_resolve_store_path(store))
    item = _get_item_or_exit(content, item_id)
    updated = edit_item(
        snapshot,
        item,
        title=title,
        category_name=category,
        taken_slugs=[other.slug for other in content.list_items() if other.id != item.id],
    )
    if updated == item:
        console.print("[yellow]No changes.[/]")
        return
    content.write_item(updated)
    console.print(f"[bold green]Updated[/] {updated.id}: {item.slug} -> {updated.slug}")


def _move(item_id: str, store: Optional[Path], *, up: bool) -> None:
    content = JsonFileStore(_resolve_store_path(store))
    item = _get_item_or_exit(content, item_id)
    siblings = load_siblings(content, item.category_name)
    index = index_of(siblings, item.id)
    plan = move_up(siblings, index) if up else move_down(siblings, index)
    _apply_or_exit(content, plan)


@app.command("move-up")
def move_up_command(
    item_id: str = typer.Argument(..., help="Id of the item to move."),
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Swap an item with the sibling displayed before it.
    """
    _move(item_id, store, up=True)


@app.command("move-down")
def move_down_command(
    item_id: str = typer.Argument(..., help="Id of the item to move."),
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Swap an item with the sibling displayed after it.
    """
    _move(item_id, store, up=False)


def _set_visibility(item_id: str, store: Optional[Path], *, hidden: bool) -> None:
    content = JsonFileStore(_resolve_store_path(store))
    item = _get_item_or_exit(content, item_id)
    updated = set_hidden(item, hidden)
    if updated is not item:
        content.write_item(updated)
    state = "hidden" if hidden else "visible"
    console.print(f"{escape(updated.title)} ({updated.id}) is {state}.")


@app.command()
def hide(
    item_id: str = typer.Argument(..., help="Id of the item to hide."),
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Exclude an item from public listings.
    """
    _set_visibility(item_id, store, hidden=True)


@app.command()
def show(
    item_id: str = typer.Argument(..., help="Id of the item to show."),
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Include a hidden item in public listings again.
    """
    _set_visibility(item_id, store, hidden=False)


@app.command("renumber")
def renumber_command(
    category: str = typer.Option(..., "--category", "-c", help="Category whose items should be renumbered."),
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Rewrite a category's order values to 0..N-1, keeping display order.
    """
    content = JsonFileStore(_resolve_store_path(store))
    plan = renumber(load_siblings(content, category))
    if plan.is_noop:
        console.print("[green]Order values already contiguous.[/]")
        return
    _apply_or_exit(content, plan)


@app.command()
def audit(
    fix: bool = typer.Option(False, "--fix", help="Re-derive malformed slugs from title and category."),
    taxonomy: Optional[Path] = TAXONOMY_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Report malformed slugs and duplicate order values.
    """
    snapshot = _load_taxonomy_or_exit(_resolve_taxonomy_path(taxonomy))
    content = JsonFileStore(_resolve_store_path(store))
    items = content.list_items()

    broken = [item for item in items if needs_repair(snapshot, item.slug)]
    table = Table(title="Slug Audit")
    table.add_column("ID")
    table.add_column("Slug", overflow="fold")
    table.add_column("Suggested", overflow="fold")
    repairs: List[ContentItem] = []
    taken = {item.slug for item in items}
    for item in broken:
        taken.discard(item.slug)
        suggested = unique_slug(repair_slug(snapshot, item.slug, item.category_name, title=item.title), taken)
        taken.add(suggested)
        table.add_row(item.id, item.slug, suggested)
        if suggested != item.slug:
            repairs.append(item.model_copy(update={"slug": suggested}))
    if broken:
        console.print(table)
    else:
        console.print("[green]All slugs well formed.[/]")

    categories = sorted({item.category_name for item in items})
    duplicates_found = False
    for name in categories:
        duplicates = find_duplicate_orders(item for item in items if item.category_name == name)
        for order, ids in duplicates.items():
            duplicates_found = True
            console.print(f"[yellow]{escape(name)}[/]: order {order} shared by {', '.join(ids)}")
    if not duplicates_found:
        console.print("[green]No duplicate order values.[/]")

    if fix and repairs:
        write_items(content, repairs)
        console.print(f"[bold green]Repaired {len(repairs)} slug(s).[/]")


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
