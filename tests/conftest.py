"""Shared fixtures for taskbase tests."""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from taskbase import config as config_module
from taskbase.cli import utils as cli_utils_module
from taskbase.config import Settings
from taskbase.engine.base import Engine
from taskbase.errors import QueryError
from taskbase.storage import VaultStore

EXAMPLE_SELECTION = {
    "version": 1,
    "source": {
        "folder": "Projects",
        "filters": [{"property": "status", "operator": "=", "value": "active"}],
    },
    "view": {"showCompleted": False, "sortBy": "file", "sortDirection": "desc"},
}


class FakeEngine(Engine):
    """In-memory stand-in for the external query engine."""

    def __init__(self, records: list[Any] | None = None, initialized: bool = True):
        super().__init__()
        self.records = records if records is not None else []
        self.queries: list[str] = []
        self.error: str | None = None
        self.delay = 0.0
        self.initialized = initialized

    def _execute(self, query: str) -> list[Any]:
        self.queries.append(query)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise QueryError(self.error, query)
        return self.records


def task_record(
    path: str,
    line: int,
    text: str,
    completed: bool = False,
    parent_line: int = -1,
    children: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Engine-style result record for a task."""
    return {
        "$file": path,
        "$line": line,
        "$completed": completed,
        "$text": text,
        "$parentLine": parent_line,
        "$elements": children or [],
    }


def list_record(path: str, line: int, text: str, parent_line: int = -1) -> dict[str, Any]:
    """Engine-style result record for a plain list item."""
    return {
        "$file": path,
        "$line": line,
        "$text": text,
        "$parentLine": parent_line,
        "$elements": [],
    }


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Create a temporary vault directory with a .taskbase folder."""
    root = tmp_path / "vault"
    root.mkdir()
    (root / ".taskbase").mkdir()
    return root


@pytest.fixture
def store(vault: Path) -> VaultStore:
    return VaultStore(vault)


@pytest.fixture
def create_note(vault: Path) -> Callable[[str, str], Path]:
    """Factory to write a markdown document into the vault."""

    def _create(rel_path: str, content: str) -> Path:
        path = vault / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        return path

    return _create


@pytest.fixture
def selection_file(vault: Path) -> Path:
    """A valid .taskbase file inside the vault."""
    path = vault / "Active.taskbase"
    path.write_text(json.dumps(EXAMPLE_SELECTION), encoding="utf-8")
    return path


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def temp_settings(vault: Path) -> Generator[Settings]:
    yield Settings(vault_root=vault, debounce_ms=10)
    config_module.reset_settings()


@pytest.fixture
def mock_settings(temp_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Make get_settings() return temp_settings everywhere it is imported."""
    config_module.reset_settings()
    monkeypatch.setattr(config_module, "_settings", temp_settings)
    monkeypatch.setattr(config_module, "get_settings", lambda: temp_settings)
    monkeypatch.setattr(cli_utils_module, "get_settings", lambda: temp_settings)
    return temp_settings


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
