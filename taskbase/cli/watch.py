"""Live task list: re-render whenever the vault or the .taskbase file changes."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from taskbase.cli.display import render_view
from taskbase.cli.utils import console, get_cli_settings, get_store, start_engine
from taskbase.config import Settings
from taskbase.core.view import TaskBaseView
from taskbase.engine import Engine
from taskbase.engine.watcher import VaultChangeHandler, VaultWatcher

logger = logging.getLogger(__name__)


def register_watch_commands(cli: click.Group) -> None:
    cli.add_command(watch)


def _setup_watch_logging(settings: Settings, verbose: bool) -> None:
    """Log to ``<vault>/.taskbase/taskbase.log`` (and stderr with --verbose)."""
    settings.taskbase_dir.mkdir(parents=True, exist_ok=True)
    handlers: list[logging.Handler] = [logging.FileHandler(settings.log_file)]
    if verbose:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


async def run_watch(
    engine: Engine,
    settings: Settings,
    selection_path: Path,
    clear: bool = True,
    stop: asyncio.Event | None = None,
) -> TaskBaseView:
    """Follow the vault until ``stop`` is set (or the task is cancelled)."""
    loop = asyncio.get_running_loop()
    stop = stop or asyncio.Event()

    def on_render(view: TaskBaseView) -> None:
        if clear:
            console.clear()
        console.print(render_view(view, settings))

    view = TaskBaseView(
        engine,
        get_store(settings),
        selection_path,
        on_render=on_render,
        debounce_seconds=settings.debounce_seconds,
    )
    handler = VaultChangeHandler(
        settings.vault_root,
        on_documents_changed=engine.notify_updated,
        selection_path=selection_path,
        on_selection_changed=view.schedule_config_reload,
    )
    watcher = VaultWatcher(handler, loop)

    watcher.start()
    try:
        view.open()
        await stop.wait()
    finally:
        view.close()
        watcher.stop()
    return view


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--engine-command", "-E", help="Override the configured engine command")
@click.option("--no-clear", is_flag=True, help="Append renders instead of clearing")
@click.pass_context
def watch(ctx: click.Context, path: Path, engine_command: str | None, no_clear: bool) -> None:
    """Keep a task list on screen, refreshing as notes change.

    Press Ctrl-C to stop.
    """
    settings = get_cli_settings(ctx)
    _setup_watch_logging(settings, ctx.obj.get("verbose", False))
    engine = start_engine(settings, engine_command)

    logger.info("Watching %s", path)
    try:
        asyncio.run(run_watch(engine, settings, path.resolve(), clear=not no_clear))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")
    logger.info("Stopped watching %s", path)
