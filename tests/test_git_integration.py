"""End-to-end tests against a real git repository."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from madcoord import Coordinator, FileAction, MergeStatus, NotAGitRepository, WorkspaceState
from madcoord.config import Config
from madcoord.config.schema import WorkspaceConfig

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(cwd: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return completed.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    _git(root, "init", "-q")
    _git(root, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(root, "config", "user.email", "test@example.com")
    _git(root, "config", "user.name", "Test")
    _git(root, "config", "commit.gpgsign", "false")
    (root / "app.py").write_text("print('hello')\n")
    _git(root, "add", "app.py")
    _git(root, "commit", "-q", "-m", "initial")
    return root


@pytest.fixture
def coord(git_repo: Path) -> Coordinator:
    return Coordinator.open(git_repo, config=Config(workspace=WorkspaceConfig()))


def _commit_in(worktree: Path, filename: str, content: str) -> None:
    (worktree / filename).write_text(content)
    _git(worktree, "add", filename)
    _git(worktree, "commit", "-q", "-m", f"edit {filename}")


class TestRealGit:
    def test_not_a_repository(self, tmp_path: Path) -> None:
        with pytest.raises(NotAGitRepository):
            Coordinator.open(tmp_path)

    def test_full_lifecycle(self, coord: Coordinator, git_repo: Path) -> None:
        result = coord.create("feat/greeting", "Change the greeting")
        assert result.success, result.message
        worktree = git_repo / "worktrees" / "feat-greeting"
        assert (worktree / ".agent-task").is_file()
        assert ".agent-task" in (git_repo / ".gitignore").read_text()
        assert _git(git_repo, "log", "-1", "--format=%s") == "chore: add MAD agent files to gitignore"

        coord.register("impl", "implementer", workspace="feat-greeting", allowed_paths=["/*.py"])
        assert coord.authorize("impl", FileAction(str(worktree / "app.py"))).allowed

        _commit_in(worktree, "app.py", "print('hi')\n")
        summary = coord.status()
        assert summary.rows[0].commits == 1
        assert summary.rows[0].state is WorkspaceState.IN_PROGRESS

        assert coord.merge("feat-greeting").status is MergeStatus.DENIED

        coord.mark_done("feat-greeting", "Greeting changed")
        merged = coord.merge("feat-greeting")
        assert merged.status is MergeStatus.MERGED, merged.message
        assert (git_repo / "app.py").read_text() == "print('hi')\n"
        assert len(_git(git_repo, "log", "-1", "--format=%P").split()) == 2

        removed = coord.remove("feat-greeting")
        assert removed.success, removed.message
        assert not worktree.exists()
        assert "impl" not in coord.registry
        assert _git(git_repo, "branch", "--list", "feat/greeting")

    def test_conflict_is_aborted(self, coord: Coordinator, git_repo: Path) -> None:
        assert coord.create("feat/a", "edit app").success
        worktree = git_repo / "worktrees" / "feat-a"
        _commit_in(worktree, "app.py", "print('from branch')\n")
        _commit_in(git_repo, "app.py", "print('from main')\n")

        coord.mark_done("feat-a", "done")
        result = coord.merge("feat-a")
        assert result.status is MergeStatus.CONFLICT
        assert "app.py" in result.output
        assert _git(git_repo, "status", "--porcelain") == ""
        assert (git_repo / "app.py").read_text() == "print('from main')\n"

    def test_existing_branch_reused(self, coord: Coordinator, git_repo: Path) -> None:
        _git(git_repo, "branch", "fix/old")
        result = coord.create("fix/old", "continue")
        assert result.success, result.message
        assert _git(git_repo / "worktrees" / "fix-old", "rev-parse", "--abbrev-ref", "HEAD") == "fix/old"
