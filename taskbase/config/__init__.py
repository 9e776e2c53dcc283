"""Configuration management for taskbase.

Two kinds of configuration live here:
- Selection definitions (.taskbase files): which tasks to show and how.
- Application settings: vault root, engine command, debounce interval.

The main entry points are:
- parse_selection() / try_parse_selection(): Validate a .taskbase document
- serialize_selection(): Canonical JSON for a definition
- get_settings(): Get the global settings instance
- reset_settings(): Clear the cached settings
"""

from __future__ import annotations

from .io import (
    load_selection,
    load_settings,
    save_selection,
    save_settings,
    selection_to_dict,
    serialize_selection,
)
from .models import (
    DEFAULT_SELECTION,
    FILTER_OPERATORS,
    SELECTION_SUFFIX,
    SORT_DIRECTIONS,
    PropertyFilter,
    SelectionDefinition,
    Settings,
    SourceConfig,
    ViewConfig,
)
from .parsers import (
    ParseResult,
    expand_path,
    get_default_vault_root,
    get_settings_path,
    merge_with_defaults,
    parse_selection,
    try_parse_selection,
)

# Singleton settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Loads settings on first call, returns cached instance thereafter.
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings
    _settings = None


__all__ = [
    "DEFAULT_SELECTION",
    "FILTER_OPERATORS",
    "SELECTION_SUFFIX",
    "SORT_DIRECTIONS",
    "ParseResult",
    "PropertyFilter",
    "SelectionDefinition",
    "Settings",
    "SourceConfig",
    "ViewConfig",
    "expand_path",
    "get_default_vault_root",
    "get_settings",
    "get_settings_path",
    "load_selection",
    "load_settings",
    "merge_with_defaults",
    "parse_selection",
    "reset_settings",
    "save_selection",
    "save_settings",
    "selection_to_dict",
    "serialize_selection",
    "try_parse_selection",
]
