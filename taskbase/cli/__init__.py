"""CLI package for taskbase."""

from __future__ import annotations

import locale
import logging
from pathlib import Path

import click

from taskbase import __version__
from taskbase.cli.selection import register_selection_commands
from taskbase.cli.tasks import register_task_commands
from taskbase.cli.utils import setup_logging
from taskbase.cli.watch import register_watch_commands

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="taskbase")
@click.option(
    "--vault",
    "-V",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Vault root (default: $TASKBASE_VAULT or the current directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, verbose: bool) -> None:
    """Saved, live task lists over a markdown vault.

    A .taskbase file selects pages by folder and properties; taskbase
    compiles it to an engine query, groups the matching tasks by file, and
    writes checkbox changes back to the source lines.
    """
    ctx.ensure_object(dict)
    ctx.obj["vault"] = vault
    ctx.obj["verbose"] = verbose
    if ctx.invoked_subcommand != "watch":
        setup_logging(verbose)


register_selection_commands(cli)
register_task_commands(cli)
register_watch_commands(cli)


def main() -> None:
    """Entry point for the CLI."""
    # Group headers sort with the user's collation rules
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug("Falling back to default collation: %s", e)
    cli()


__all__ = ["cli", "main"]
