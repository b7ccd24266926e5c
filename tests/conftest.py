"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from madcoord.config import reset_config
from madcoord.config.schema import WorkspaceConfig
from madcoord.events import EventLog
from madcoord.vcs import GitClient
from madcoord.workspace import WorkspaceManager
from tests.utils import FakeRunner


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user config and env overrides out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("MAD_LOG", raising=False)
    monkeypatch.delenv("MAD_STRICT", raising=False)
    reset_config()


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def runner(repo: Path) -> FakeRunner:
    return FakeRunner(repo)


@pytest.fixture
def git(runner: FakeRunner, repo: Path) -> GitClient:
    return GitClient(runner, repo)


@pytest.fixture
def events(repo: Path) -> EventLog:
    return EventLog(repo / ".mad-logs.jsonl")


@pytest.fixture
def manager(git: GitClient, events: EventLog) -> WorkspaceManager:
    return WorkspaceManager(git, WorkspaceConfig(manage_gitignore=False), events)
