"""CLI integration tests for taskbase."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from taskbase.cli import cli
from taskbase.cli.watch import run_watch
from taskbase.config import Settings, load_selection
from taskbase.core.view import ViewStatus

from .conftest import FakeEngine, task_record

# Note: cli_runner and mock_settings fixtures are defined in conftest.py


class TestMainCommand:
    """Tests for main command group."""

    def test_version(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "taskbase" in result.output

    def test_help(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("validate", "query", "init", "show", "toggle", "watch"):
            assert command in result.output


class TestValidateCommand:
    def test_valid(self, cli_runner: CliRunner, selection_file: Path):
        result = cli_runner.invoke(cli, ["validate", str(selection_file)])

        assert result.exit_code == 0
        assert "OK" in result.output
        assert "1 filter(s)" in result.output

    def test_invalid(self, cli_runner: CliRunner, vault: Path):
        path = vault / "bad.taskbase"
        path.write_text('{"version": 1, "source": {"filters": "x"}, "view": {}}')

        result = cli_runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_missing_file(self, cli_runner: CliRunner, vault: Path):
        result = cli_runner.invoke(cli, ["validate", str(vault / "nope.taskbase")])

        assert result.exit_code != 0


class TestQueryCommand:
    def test_prints_query(self, cli_runner: CliRunner, selection_file: Path):
        result = cli_runner.invoke(cli, ["query", str(selection_file)])

        assert result.exit_code == 0
        assert result.output.splitlines()[0] == (
            '@task and childof(@page and path("Projects") and status = "active")'
            " and $completed = false"
        )

    def test_explain(self, cli_runner: CliRunner, selection_file: Path):
        result = cli_runner.invoke(cli, ["query", "--explain", str(selection_file)])

        assert result.exit_code == 0
        assert "Queries tasks" in result.output
        assert "Excludes completed tasks" in result.output


class TestInitCommand:
    def test_creates_defaults(self, cli_runner: CliRunner, vault: Path):
        path = vault / "All.taskbase"

        result = cli_runner.invoke(cli, ["init", str(path)])

        assert result.exit_code == 0
        definition = load_selection(path)
        assert definition.source.folder is None
        assert definition.source.filters == ()
        assert definition.view.sort_direction == "desc"
        assert json.loads(path.read_text())["version"] == 1

    def test_with_options(self, cli_runner: CliRunner, vault: Path):
        path = vault / "Work.taskbase"

        result = cli_runner.invoke(
            cli,
            [
                "init",
                str(path),
                "--folder",
                "Work",
                "--filter",
                "status",
                "=",
                "active",
                "--filter",
                "tags",
                "contains",
                "#urgent",
                "--show-completed",
                "--sort-direction",
                "asc",
            ],
        )

        assert result.exit_code == 0
        definition = load_selection(path)
        assert definition.source.folder == "Work"
        assert [(f.property, f.operator, f.value) for f in definition.source.filters] == [
            ("status", "=", "active"),
            ("tags", "contains", "#urgent"),
        ]
        assert definition.view.show_completed is True
        assert definition.view.sort_direction == "asc"

    def test_refuses_overwrite(self, cli_runner: CliRunner, selection_file: Path):
        before = selection_file.read_text()

        result = cli_runner.invoke(cli, ["init", str(selection_file)])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert selection_file.read_text() == before

    def test_force_overwrites(self, cli_runner: CliRunner, selection_file: Path):
        result = cli_runner.invoke(cli, ["init", "--force", str(selection_file)])

        assert result.exit_code == 0
        assert load_selection(selection_file).source.folder is None

    def test_rejects_unknown_operator(self, cli_runner: CliRunner, vault: Path):
        path = vault / "x.taskbase"

        result = cli_runner.invoke(cli, ["init", str(path), "--filter", "a", "~", "b"])

        assert result.exit_code != 0
        assert not path.exists()


class TestToggleCommands:
    """Tests for toggle/done/undo."""

    def test_toggle(self, cli_runner: CliRunner, mock_settings: Settings, create_note):
        path = create_note("Projects/a.md", "- [ ] one\n- [x] two\n")

        result = cli_runner.invoke(cli, ["toggle", "Projects/a.md", "0", "1"])

        assert result.exit_code == 0
        assert "Completed" in result.output
        assert "Reopened" in result.output
        assert path.read_text() == "- [x] one\n- [ ] two\n"

    def test_toggle_partial_failure(
        self, cli_runner: CliRunner, mock_settings: Settings, create_note
    ):
        path = create_note("a.md", "- [ ] one\nplain\n")

        result = cli_runner.invoke(cli, ["toggle", "a.md", "1", "0"])

        assert result.exit_code == 1
        assert "Failed" in result.output
        assert path.read_text() == "- [x] one\nplain\n"

    def test_toggle_missing_file(self, cli_runner: CliRunner, mock_settings: Settings):
        result = cli_runner.invoke(cli, ["toggle", "missing.md", "0"])

        assert result.exit_code == 1
        assert "Failed" in result.output

    def test_toggle_undecodable_file(
        self, cli_runner: CliRunner, mock_settings: Settings, vault: Path, create_note
    ):
        (vault / "bad.md").write_bytes(b"- [ ] \xff\xfe")
        good = create_note("good.md", "- [ ] ok")

        bad_result = cli_runner.invoke(cli, ["toggle", "bad.md", "0"])
        good_result = cli_runner.invoke(cli, ["done", "good.md", "0"])

        assert bad_result.exit_code == 1
        assert bad_result.exception is None or isinstance(bad_result.exception, SystemExit)
        assert "Failed" in bad_result.output
        assert good_result.exit_code == 0
        assert good.read_text() == "- [x] ok"

    def test_done_and_undo(self, cli_runner: CliRunner, mock_settings: Settings, create_note):
        path = create_note("a.md", "- [ ] one")

        result = cli_runner.invoke(cli, ["done", "a.md", "0"])
        assert result.exit_code == 0
        assert path.read_text() == "- [x] one"

        result = cli_runner.invoke(cli, ["done", "a.md", "0"])
        assert result.exit_code == 0
        assert "Unchanged" in result.output

        result = cli_runner.invoke(cli, ["undo", "a.md", "0"])
        assert result.exit_code == 0
        assert path.read_text() == "- [ ] one"

    def test_done_out_of_range(self, cli_runner: CliRunner, mock_settings: Settings, create_note):
        create_note("a.md", "- [ ] one")

        result = cli_runner.invoke(cli, ["done", "a.md", "3"])

        assert result.exit_code == 1

    def test_vault_option(self, cli_runner: CliRunner, tmp_path: Path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "n.md").write_text("- [ ] x")

        result = cli_runner.invoke(cli, ["--vault", str(other), "done", "n.md", "0"])

        assert result.exit_code == 0
        assert (other / "n.md").read_text() == "- [x] x"


class TestShowCommand:
    def test_show(
        self,
        cli_runner: CliRunner,
        mock_settings: Settings,
        selection_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        child = task_record("Projects/alpha.md", 1, "Child", parent_line=0)
        engine = FakeEngine(
            [task_record("Projects/alpha.md", 0, "Parent", children=[child]), child]
        )
        monkeypatch.setattr("taskbase.cli.tasks.start_engine", lambda s, c=None: engine)

        result = cli_runner.invoke(cli, ["show", str(selection_file)])

        assert result.exit_code == 0
        assert "alpha" in result.output
        assert "Parent" in result.output
        assert "Child" in result.output
        assert "2 tasks in 1 files" in result.output
        assert engine.subscriber_count("update") == 0

    def test_show_empty(
        self,
        cli_runner: CliRunner,
        mock_settings: Settings,
        selection_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setattr(
            "taskbase.cli.tasks.start_engine", lambda s, c=None: FakeEngine([])
        )

        result = cli_runner.invoke(cli, ["show", str(selection_file)])

        assert result.exit_code == 0
        assert "No tasks found" in result.output

    def test_show_query_error(
        self,
        cli_runner: CliRunner,
        mock_settings: Settings,
        selection_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ):
        engine = FakeEngine()
        engine.error = "engine exploded"
        monkeypatch.setattr("taskbase.cli.tasks.start_engine", lambda s, c=None: engine)

        result = cli_runner.invoke(cli, ["show", str(selection_file)])

        assert result.exit_code == 1
        assert "engine exploded" in result.output

    def test_show_without_engine(
        self, cli_runner: CliRunner, mock_settings: Settings, selection_file: Path
    ):
        result = cli_runner.invoke(cli, ["show", str(selection_file)])

        assert result.exit_code == 1
        assert "No query engine configured" in result.output


class TestRunWatch:
    def test_renders_and_follows_updates(
        self, mock_settings: Settings, selection_file: Path, capsys: pytest.CaptureFixture
    ):
        engine = FakeEngine([task_record("Projects/a.md", 0, "First")])

        async def main():
            stop = asyncio.Event()

            async def drive():
                await asyncio.sleep(0.05)
                engine.records = [task_record("Projects/b.md", 0, "Second")]
                engine.notify_updated()
                await asyncio.sleep(0.1)
                stop.set()

            driver = asyncio.create_task(drive())
            view = await run_watch(engine, mock_settings, selection_file, clear=False, stop=stop)
            await driver
            return view

        view = asyncio.run(main())

        out = capsys.readouterr().out
        assert "First" in out
        assert "Second" in out
        assert view.status is ViewStatus.READY
        assert engine.subscriber_count("update") == 0
