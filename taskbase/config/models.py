"""Configuration dataclass models for taskbase."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Supported filter operators
FILTER_OPERATORS: tuple[str, ...] = ("=", "!=", "<", "<=", ">", ">=", "contains")

# Supported group sort directions
SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")

# Extension used for saved selection definitions
SELECTION_SUFFIX = ".taskbase"


@dataclass(frozen=True)
class PropertyFilter:
    """A single page-level property filter.

    ``property`` is a frontmatter field or an implicit field prefixed with
    ``$`` (``$tags``, ``$mtime``...). ``value`` is kept as the raw string and
    only interpreted when the query is compiled.
    """

    property: str
    operator: str
    value: str


@dataclass(frozen=True)
class SourceConfig:
    """Which pages to pull tasks from."""

    folder: str | None = None
    filters: tuple[PropertyFilter, ...] = ()


@dataclass(frozen=True)
class ViewConfig:
    """Display options."""

    show_completed: bool = False
    sort_by: str = "file"  # file, mtime, ctime or a property name
    sort_direction: str = "desc"


@dataclass(frozen=True)
class SelectionDefinition:
    """A complete saved selection (.taskbase file)."""

    version: int = 1
    source: SourceConfig = field(default_factory=SourceConfig)
    view: ViewConfig = field(default_factory=ViewConfig)


DEFAULT_SELECTION = SelectionDefinition()


@dataclass
class Settings:
    """Application settings (``<vault>/.taskbase/config.yaml``)."""

    vault_root: Path
    engine_command: str | None = None  # External query program
    engine_timeout: float = 30.0  # Seconds before a query is abandoned
    debounce_ms: int = 500  # Quiet interval before re-aggregating
    log_level: str = "INFO"
    show_task_count: bool = True  # Per-file task counts in group headers
    show_full_path: bool = False  # Full vault path instead of file name

    @property
    def taskbase_dir(self) -> Path:
        return self.vault_root / ".taskbase"

    @property
    def log_file(self) -> Path:
        return self.taskbase_dir / "taskbase.log"

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0
