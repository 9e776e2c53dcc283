"""Commands for creating and inspecting .taskbase files."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape

from taskbase.cli.utils import console
from taskbase.config import (
    FILTER_OPERATORS,
    SORT_DIRECTIONS,
    load_selection,
    merge_with_defaults,
    save_selection,
)
from taskbase.core.query import build_query, describe_query
from taskbase.errors import ConfigError


def _load_or_exit(path: Path):
    try:
        return load_selection(path)
    except ConfigError as e:
        console.print(f"[red]Invalid config:[/red] {escape(str(e))}")
        raise SystemExit(1) from None


def register_selection_commands(cli: click.Group) -> None:
    """Register validate/query/init commands."""
    cli.add_command(validate)
    cli.add_command(query)
    cli.add_command(init)


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(path: Path) -> None:
    """Check that a .taskbase file is valid."""
    definition = _load_or_exit(path)
    console.print(
        f"[green]OK[/green] {path.name}: version {definition.version}, "
        f"{len(definition.source.filters)} filter(s)"
    )


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--explain", "-e", is_flag=True, help="Describe the query parts")
def query(path: Path, explain: bool) -> None:
    """Print the engine query compiled from a .taskbase file."""
    definition = _load_or_exit(path)
    compiled = build_query(definition.source, definition.view)
    # Plain print so the query can be piped verbatim
    click.echo(compiled)
    if explain:
        for part in describe_query(compiled):
            console.print(f"[dim]- {escape(part)}[/dim]")


@click.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--folder", "-f", help="Limit to pages under this folder")
@click.option(
    "--filter",
    "filters",
    type=(str, click.Choice(FILTER_OPERATORS), str),
    multiple=True,
    metavar="PROPERTY OPERATOR VALUE",
    help="Page property filter (repeatable)",
)
@click.option("--show-completed", is_flag=True, help="Include completed tasks")
@click.option("--sort-by", default=None, help="Group sort field (default: file)")
@click.option(
    "--sort-direction",
    type=click.Choice(SORT_DIRECTIONS),
    default=None,
    help="Group sort direction (default: desc)",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(
    path: Path,
    folder: str | None,
    filters: tuple[tuple[str, str, str], ...],
    show_completed: bool,
    sort_by: str | None,
    sort_direction: str | None,
    force: bool,
) -> None:
    """Create a new .taskbase file."""
    if path.exists() and not force:
        console.print(f"[red]{path} already exists.[/red] Use --force to overwrite.")
        raise SystemExit(1)

    for prop, _op, _value in filters:
        if not prop:
            raise click.BadParameter("filter property must not be empty")

    partial: dict = {"source": {}, "view": {}}
    if folder:
        partial["source"]["folder"] = folder
    if filters:
        partial["source"]["filters"] = [
            {"property": p, "operator": op, "value": v} for p, op, v in filters
        ]
    if show_completed:
        partial["view"]["showCompleted"] = True
    if sort_by:
        partial["view"]["sortBy"] = sort_by
    if sort_direction:
        partial["view"]["sortDirection"] = sort_direction

    definition = merge_with_defaults(partial)
    save_selection(path, definition)
    console.print(f"[green]Created[/green] {path}")
    console.print(f"[dim]{escape(build_query(definition.source, definition.view))}[/dim]")
