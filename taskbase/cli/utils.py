"""Shared utilities for CLI commands."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console

from taskbase.config import Settings, get_settings, load_settings
from taskbase.engine import CommandEngine
from taskbase.errors import ConfigError, QueryError
from taskbase.storage import VaultStore

# Main console for stdout (user-facing output)
console = Console(highlight=False)

# Stderr console for diagnostics (doesn't interfere with piped output)
stderr_console = Console(file=sys.stderr, highlight=False)


def get_cli_settings(ctx: click.Context) -> Settings:
    """Settings for this invocation (``--vault`` wins over the global settings)."""
    ctx.ensure_object(dict)
    settings = ctx.obj.get("settings")
    if settings is not None:
        return settings

    vault = ctx.obj.get("vault")
    try:
        settings = load_settings(vault) if vault is not None else get_settings()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None

    ctx.obj["settings"] = settings
    return settings


def get_store(settings: Settings) -> VaultStore:
    return VaultStore(settings.vault_root)


def start_engine(settings: Settings, command: str | None = None) -> CommandEngine:
    """Create and start the configured engine, or exit with a message."""
    command = command or settings.engine_command
    if not command:
        console.print("[red]Error:[/red] No query engine configured.")
        console.print(
            "[dim]Set engine_command in .taskbase/config.yaml "
            "or TASKBASE_ENGINE_COMMAND.[/dim]"
        )
        raise SystemExit(1)

    try:
        engine = CommandEngine(command, timeout=settings.engine_timeout)
        engine.start()
    except (QueryError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from None
    return engine


def setup_logging(verbose: bool) -> None:
    """Send diagnostics to stderr for one-shot commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
