"""Configuration parsing and validation functions for taskbase."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from taskbase.errors import (
    ConfigError,
    InvalidSourceError,
    InvalidVersionError,
    InvalidViewError,
    MalformedJSONError,
    SettingsError,
)

from .models import (
    DEFAULT_SELECTION,
    FILTER_OPERATORS,
    SORT_DIRECTIONS,
    PropertyFilter,
    SelectionDefinition,
    Settings,
    SourceConfig,
    ViewConfig,
)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def expand_path(path: str | Path) -> Path:
    """Expand ~ and environment variables in a path."""
    path_str = os.path.expandvars(str(path))
    return Path(path_str).expanduser()


def get_default_vault_root() -> Path:
    """Get the default vault root directory."""
    env_root = os.environ.get("TASKBASE_VAULT")
    if env_root:
        return expand_path(env_root)
    return Path.cwd()


def get_settings_path(vault_root: Path | None = None) -> Path:
    """Get the path to the settings file."""
    if vault_root is None:
        vault_root = get_default_vault_root()
    return vault_root / ".taskbase" / "config.yaml"


# =============================================================================
# Selection definitions
# =============================================================================


@dataclass
class ParseResult:
    """Outcome of parsing a selection definition."""

    success: bool
    config: SelectionDefinition | None = None
    error: ConfigError | None = None


def _parse_filter(data: Any) -> PropertyFilter:
    if not isinstance(data, dict):
        raise InvalidSourceError("Filter must be an object")
    prop = data.get("property")
    operator = data.get("operator")
    value = data.get("value")
    if not isinstance(prop, str) or not prop:
        raise InvalidSourceError("Filter property must be a non-empty string")
    if not isinstance(operator, str) or operator not in FILTER_OPERATORS:
        raise InvalidSourceError(f"Invalid filter operator: {operator!r}")
    if not isinstance(value, str):
        raise InvalidSourceError(f"Filter value for '{prop}' must be a string")
    return PropertyFilter(property=prop, operator=operator, value=value)


def _parse_source(data: Any) -> SourceConfig:
    if not isinstance(data, dict):
        raise InvalidSourceError("Invalid source configuration")

    folder = data.get("folder")
    if folder is not None and not isinstance(folder, str):
        raise InvalidSourceError("Source folder must be a string")

    filters = data.get("filters")
    if not isinstance(filters, list):
        raise InvalidSourceError("Source filters must be a list")

    return SourceConfig(
        folder=folder,
        filters=tuple(_parse_filter(f) for f in filters),
    )


def _parse_view(data: Any) -> ViewConfig:
    if not isinstance(data, dict):
        raise InvalidViewError("Invalid view configuration")

    show_completed = data.get("showCompleted")
    sort_by = data.get("sortBy")
    sort_direction = data.get("sortDirection")

    if not isinstance(show_completed, bool):
        raise InvalidViewError("view.showCompleted must be a boolean")
    if not isinstance(sort_by, str):
        raise InvalidViewError("view.sortBy must be a string")
    if sort_direction not in SORT_DIRECTIONS:
        raise InvalidViewError(f"Invalid sort direction: {sort_direction!r}")

    return ViewConfig(
        show_completed=show_completed,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )


def parse_selection(content: str) -> SelectionDefinition:
    """Parse and validate a .taskbase JSON document.

    The whole document is rejected on the first violation. Unknown
    top-level fields are ignored.

    Raises:
        MalformedJSONError: Not valid JSON, or not a JSON object.
        InvalidVersionError: ``version`` missing or not a positive integer.
        InvalidSourceError: Bad ``source`` block.
        InvalidViewError: Bad ``view`` block.

    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedJSONError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedJSONError("Config must be an object")

    version = data.get("version")
    # bool is an int subclass; true/false are not versions
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise InvalidVersionError("Missing or invalid version")

    return SelectionDefinition(
        version=version,
        source=_parse_source(data.get("source")),
        view=_parse_view(data.get("view")),
    )


def try_parse_selection(content: str) -> ParseResult:
    """Parse a selection definition, returning a tagged result instead of raising."""
    try:
        config = parse_selection(content)
    except ConfigError as e:
        return ParseResult(success=False, error=e)
    return ParseResult(success=True, config=config)


def _coerce_filter(item: PropertyFilter | Mapping[str, Any]) -> PropertyFilter:
    if isinstance(item, PropertyFilter):
        return item
    return PropertyFilter(
        property=item["property"], operator=item["operator"], value=item["value"]
    )


def _get_or_default(data: Mapping[str, Any], key: str, default: Any) -> Any:
    value = data.get(key)
    return default if value is None else value


def merge_with_defaults(partial: Mapping[str, Any]) -> SelectionDefinition:
    """Fill every absent field of a partial definition from the defaults.

    Field-by-field; an explicit ``None`` counts as absent. A present
    ``filters`` list replaces the default list wholesale. Values that are
    present are taken as-is (no validation).
    """
    source = partial.get("source") or {}
    view = partial.get("view") or {}
    default_source = DEFAULT_SELECTION.source
    default_view = DEFAULT_SELECTION.view

    filters = source.get("filters")
    return SelectionDefinition(
        version=_get_or_default(partial, "version", DEFAULT_SELECTION.version),
        source=SourceConfig(
            folder=_get_or_default(source, "folder", default_source.folder),
            filters=(
                tuple(_coerce_filter(f) for f in filters)
                if filters is not None
                else default_source.filters
            ),
        ),
        view=ViewConfig(
            show_completed=_get_or_default(view, "showCompleted", default_view.show_completed),
            sort_by=_get_or_default(view, "sortBy", default_view.sort_by),
            sort_direction=_get_or_default(
                view, "sortDirection", default_view.sort_direction
            ),
        ),
    )


# =============================================================================
# Application settings
# =============================================================================


def _parse_bool_setting(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise SettingsError(f"'{key}' must be true or false, got {value!r}")
    return value


def _parse_settings(
    data: dict[str, Any],
    vault_root: Path,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Build Settings from parsed YAML data and environment overrides."""
    if env is None:
        env = os.environ

    engine_command = env.get("TASKBASE_ENGINE_COMMAND") or data.get("engine_command")
    if engine_command is not None and not isinstance(engine_command, str):
        raise SettingsError("'engine_command' must be a string")

    debounce_ms = data.get("debounce_ms", 500)
    if (
        not isinstance(debounce_ms, int)
        or isinstance(debounce_ms, bool)
        or debounce_ms < 0
    ):
        raise SettingsError(f"'debounce_ms' must be a non-negative integer, got {debounce_ms!r}")

    engine_timeout = data.get("engine_timeout", 30.0)
    if not isinstance(engine_timeout, (int, float)) or isinstance(engine_timeout, bool):
        raise SettingsError("'engine_timeout' must be a number")
    if engine_timeout <= 0:
        raise SettingsError("'engine_timeout' must be positive")

    log_level = str(data.get("log_level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise SettingsError(f"Unknown log_level: {log_level!r}")

    return Settings(
        vault_root=vault_root,
        engine_command=engine_command,
        engine_timeout=float(engine_timeout),
        debounce_ms=debounce_ms,
        log_level=log_level,
        show_task_count=_parse_bool_setting(data, "show_task_count", True),
        show_full_path=_parse_bool_setting(data, "show_full_path", False),
    )
