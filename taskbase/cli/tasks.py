"""Commands that show task lists and write completion changes back."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape

from taskbase.cli.display import render_view
from taskbase.cli.utils import console, get_cli_settings, get_store, start_engine
from taskbase.core.toggle import ToggleResult, observe_task, set_task_status, toggle_task
from taskbase.core.view import TaskBaseView, ViewStatus
from taskbase.errors import ToggleError
from taskbase.storage import VaultStore


def register_task_commands(cli: click.Group) -> None:
    """Register show/toggle/done/undo commands."""
    cli.add_command(show)
    cli.add_command(toggle)
    cli.add_command(done)
    cli.add_command(undo)


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--engine-command", "-E", help="Override the configured engine command")
@click.pass_context
def show(ctx: click.Context, path: Path, engine_command: str | None) -> None:
    """Show the grouped task list for a .taskbase file."""
    settings = get_cli_settings(ctx)
    engine = start_engine(settings, engine_command)

    view = TaskBaseView(engine, get_store(settings), path)
    view.open()
    try:
        console.print(render_view(view, settings))
    finally:
        view.close()

    if view.status is ViewStatus.ERROR:
        raise SystemExit(1)


def _print_result(path: str, line: int, result: ToggleResult) -> None:
    location = escape(f"{path}:{line}")
    if not result.success:
        console.print(f"[red]Failed[/red] {location}: {escape(str(result.error))}")
    elif not result.written:
        state = "completed" if result.new_status else "pending"
        console.print(f"[yellow]Unchanged[/yellow] {location} (already {state})")
    elif result.new_status:
        console.print(f"[green]Completed[/green] {location}")
    else:
        console.print(f"[cyan]Reopened[/cyan] {location}")


def _set_status(store: VaultStore, path: str, line: int, completed: bool | None) -> ToggleResult:
    """Observe the line, then toggle it (``completed=None``) or set it."""
    try:
        task = observe_task(store, path, line)
    except ToggleError as e:
        return ToggleResult(success=False, error=e)
    if completed is None:
        return toggle_task(store, task)
    return set_task_status(store, task, completed)


@click.command()
@click.argument("path")
@click.argument("lines", type=click.IntRange(min=0), nargs=-1, required=True)
@click.pass_context
def toggle(ctx: click.Context, path: str, lines: tuple[int, ...]) -> None:
    """Toggle checkboxes in a vault document.

    PATH is relative to the vault; LINES are 0-based line numbers. Lines are
    processed one at a time, in order; a failure doesn't stop the rest.
    """
    store = get_store(get_cli_settings(ctx))
    failed = 0
    for line in lines:
        result = _set_status(store, path, line, None)
        _print_result(path, line, result)
        if not result.success:
            failed += 1
    if failed:
        raise SystemExit(1)


@click.command()
@click.argument("path")
@click.argument("line", type=click.IntRange(min=0))
@click.pass_context
def done(ctx: click.Context, path: str, line: int) -> None:
    """Mark the checkbox on LINE (0-based) as completed."""
    store = get_store(get_cli_settings(ctx))
    result = _set_status(store, path, line, True)
    _print_result(path, line, result)
    if not result.success:
        raise SystemExit(1)


@click.command()
@click.argument("path")
@click.argument("line", type=click.IntRange(min=0))
@click.pass_context
def undo(ctx: click.Context, path: str, line: int) -> None:
    """Mark the checkbox on LINE (0-based) as not completed."""
    store = get_store(get_cli_settings(ctx))
    result = _set_status(store, path, line, False)
    _print_result(path, line, result)
    if not result.success:
        raise SystemExit(1)
