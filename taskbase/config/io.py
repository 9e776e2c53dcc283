"""Configuration I/O functions for taskbase."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from taskbase.errors import SettingsError

from .models import SelectionDefinition, Settings
from .parsers import (
    _parse_settings,
    expand_path,
    get_default_vault_root,
    get_settings_path,
    parse_selection,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Selection definitions
# =============================================================================


def selection_to_dict(definition: SelectionDefinition) -> dict[str, Any]:
    """Convert a definition to its on-disk JSON shape.

    ``folder`` is omitted when unset so that parse/serialize round-trips.
    """
    source: dict[str, Any] = {}
    if definition.source.folder is not None:
        source["folder"] = definition.source.folder
    source["filters"] = [
        {"property": f.property, "operator": f.operator, "value": f.value}
        for f in definition.source.filters
    ]
    return {
        "version": definition.version,
        "source": source,
        "view": {
            "showCompleted": definition.view.show_completed,
            "sortBy": definition.view.sort_by,
            "sortDirection": definition.view.sort_direction,
        },
    }


def serialize_selection(definition: SelectionDefinition) -> str:
    """Serialize a definition to canonical JSON text."""
    return json.dumps(selection_to_dict(definition), indent=2, ensure_ascii=False) + "\n"


def load_selection(path: Path) -> SelectionDefinition:
    """Read and validate a .taskbase file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the content is invalid.

    """
    content = path.read_text(encoding="utf-8")
    return parse_selection(content)


def save_selection(path: Path, definition: SelectionDefinition) -> None:
    """Write a definition to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_selection(definition), encoding="utf-8")


# =============================================================================
# Application settings
# =============================================================================


def load_settings(vault_root: Path | None = None) -> Settings:
    """Load application settings from the vault's YAML file.

    Environment variables are loaded from ``<vault>/.taskbase/.env`` first;
    variables already set in the shell win. A missing settings file
    means all defaults.
    """
    if vault_root is None:
        vault_root = get_default_vault_root()
    vault_root = expand_path(vault_root)

    env_file = vault_root / ".taskbase" / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)

    settings_path = get_settings_path(vault_root)
    if settings_path.exists():
        try:
            with settings_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid settings file {settings_path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file must be a mapping: {settings_path}")
    else:
        data = {}

    if "vault_root" in data:
        vault_root = expand_path(data["vault_root"])

    logger.debug("Loaded settings from %s", settings_path)
    return _parse_settings(data, vault_root)


def save_settings(settings: Settings) -> Path:
    """Write settings to ``<vault>/.taskbase/config.yaml``.

    Only values that differ from the defaults are written.
    """
    defaults = Settings(vault_root=settings.vault_root)
    data: dict[str, Any] = {}
    for key in (
        "engine_command",
        "engine_timeout",
        "debounce_ms",
        "log_level",
        "show_task_count",
        "show_full_path",
    ):
        value = getattr(settings, key)
        if value != getattr(defaults, key):
            data[key] = value

    settings_path = get_settings_path(settings.vault_root)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    with settings_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    return settings_path
