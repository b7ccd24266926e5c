"""Tests for the madcoord command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from madcoord.cli import create_parser, run_cli
from tests.utils import FakeRunner


@pytest.fixture
def cli(runner: FakeRunner, repo: Path):
    def invoke(*args: str) -> int:
        return run_cli(["-C", str(repo), *args], runner=runner)

    return invoke


class TestParser:
    def test_subcommands(self) -> None:
        parser = create_parser()
        parsed = parser.parse_args(["create", "feat/x", "Build", "the", "thing"])
        assert parsed.command == "create"
        assert parsed.task == ["Build", "the", "thing"]

    def test_log_level_choices(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["log", "fatal", "msg"])

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_cli([]) == 1
        assert "usage: madcoord" in capsys.readouterr().out


class TestCommands:
    def test_create_and_status(self, cli, capsys: pytest.CaptureFixture[str], repo: Path) -> None:
        assert cli("create", "feat/x", "Implement", "login") == 0
        assert (repo / "worktrees" / "feat-x" / ".agent-task").is_file()
        assert "Worktree created" in capsys.readouterr().out

        assert cli("status", "--json", "--no-commits") == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total"] == 1
        assert data["rows"][0]["task"] == "Implement login"

    def test_duplicate_create_fails(self, cli, capsys: pytest.CaptureFixture[str]) -> None:
        cli("create", "feat/x", "task")
        assert cli("create", "feat/x", "task") == 1
        assert "already exists" in capsys.readouterr().err

    def test_transitions(self, cli, repo: Path) -> None:
        cli("create", "feat/x", "task")
        root = repo / "worktrees" / "feat-x"
        assert cli("error", "feat-x", "Lint", "failed") == 0
        assert (root / ".agent-error").read_text() == "Lint failed\n"
        assert cli("blocked", "feat-x", "waiting") == 0
        assert cli("done", "feat-x", "all", "good") == 0
        assert not (root / ".agent-error").exists()
        assert not (root / ".agent-blocked").exists()

    def test_unknown_workspace(self, cli, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli("done", "nope", "x") == 1
        assert "Workspace not found: nope" in capsys.readouterr().err

    def test_read_task(self, cli, capsys: pytest.CaptureFixture[str]) -> None:
        cli("create", "feat/x", "Use [brackets] safely")
        capsys.readouterr()
        assert cli("read-task", "feat-x") == 0
        out = capsys.readouterr().out
        assert "# Branch: feat/x" in out
        assert "Use [brackets] safely" in out

    def test_merge_requires_done(self, cli, runner: FakeRunner) -> None:
        cli("create", "feat/x", "task")
        assert cli("merge", "feat-x") == 1
        cli("done", "feat-x", "ok")
        assert cli("merge", "feat-x") == 0
        assert runner.commands("git", "merge") == [["git", "merge", "--no-ff", "--no-edit", "feat/x"]]

    def test_cleanup(self, cli, repo: Path) -> None:
        cli("create", "feat/x", "task")
        assert cli("cleanup", "feat-x") == 1
        assert cli("cleanup", "feat-x", "--force") == 0
        assert not (repo / "worktrees" / "feat-x").exists()

    def test_test_command(self, cli, runner: FakeRunner, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cli("create", "feat/x", "task")
        assert cli("test", "feat-x") == 0
        assert "No checks detected" in capsys.readouterr().out

        (repo / "worktrees" / "feat-x" / "requirements.txt").write_text("")
        runner.on("pytest", exit_code=1, stdout="1 failed")
        assert cli("test", "feat-x") == 1
        assert (repo / "worktrees" / "feat-x" / ".agent-error").is_file()

    def test_dashboard(self, cli, capsys: pytest.CaptureFixture[str]) -> None:
        cli("create", "feat/x", "task")
        cli("done", "feat-x", "ok")
        capsys.readouterr()
        assert cli("dashboard") == 0
        assert "Merge feat-x" in capsys.readouterr().out

    def test_log(self, cli, repo: Path) -> None:
        assert cli("log", "warn", "Wave", "2", "--context", '{"wave": 2}') == 0
        record = json.loads((repo / ".mad-logs.jsonl").read_text().splitlines()[-1])
        assert record["level"] == "warn"
        assert record["message"] == "Wave 2"
        assert record["context"] == {"wave": 2}

    def test_log_rejects_bad_context(self, cli) -> None:
        assert cli("log", "info", "x", "--context", "[1, 2]") == 1
        assert cli("log", "info", "x", "--context", "{oops") == 1

    def test_not_a_repository(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        runner = FakeRunner(tmp_path)
        runner.on("git", "rev-parse", "--show-toplevel", exit_code=128, stderr="fatal: not a git repository")
        assert run_cli(["-C", str(tmp_path), "status"], runner=runner) == 2
        assert "Not a git repository" in capsys.readouterr().err
