"""Git commands consumed by the coordinator.

Each method maps to one git invocation and hands back the CommandResult
unchanged. Callers decide what a failure means; nothing here raises for a
non-zero exit except discover(), which has no sensible fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from madcoord.logging import get_logger
from madcoord.terminal.protocol import CommandRunner
from madcoord.terminal.result import CommandResult

_log = get_logger("vcs")

DEFAULT_BRANCH = "main"


@dataclass
class NotAGitRepository(Exception):
    """Raised when the working directory is not inside a git repository."""

    cwd: str
    detail: str = ""

    def __str__(self) -> str:
        return f"Not a git repository or git not found: {self.cwd} ({self.detail})"


class GitClient:
    """Thin wrapper over the git CLI for one repository."""

    def __init__(self, runner: CommandRunner, repo_root: str | Path) -> None:
        self._runner = runner
        self._root = str(repo_root)

    @property
    def repo_root(self) -> Path:
        return Path(self._root)

    def _git(self, *args: str, cwd: str | Path | None = None) -> CommandResult:
        return self._runner.run(["git", *args], cwd=str(cwd) if cwd else self._root)

    @classmethod
    def discover(cls, runner: CommandRunner, cwd: str | Path) -> GitClient:
        """Create a client for the repository containing ``cwd``.

        Raises:
            NotAGitRepository: If git cannot resolve a top-level directory.
        """
        result = runner.run(["git", "rev-parse", "--show-toplevel"], cwd=str(cwd))
        if not result.success or not result.stdout.strip():
            raise NotAGitRepository(cwd=str(cwd), detail=result.error)
        root = result.stdout.strip().replace("\\", "/")
        return cls(runner, root)

    def current_branch(self) -> str:
        """Name of the checked-out branch of the main tree, "main" if detached."""
        result = self._git("symbolic-ref", "--short", "HEAD")
        if result.success and result.stdout.strip():
            return result.stdout.strip()
        _log.debug("symbolic-ref failed, assuming %s: %s", DEFAULT_BRANCH, result.error)
        return DEFAULT_BRANCH

    def branch_exists(self, branch: str) -> bool:
        return self._git("rev-parse", "--verify", "--quiet", branch).success

    def worktree_add(
        self, path: str | Path, branch: str, base: str | None = None
    ) -> CommandResult:
        """Attach ``branch`` at ``path``; create it from ``base`` when given."""
        if base is None:
            return self._git("worktree", "add", str(path), branch)
        return self._git("worktree", "add", "-b", branch, str(path), base)

    def worktree_remove(self, path: str | Path) -> CommandResult:
        return self._git("worktree", "remove", str(path), "--force")

    def worktree_prune(self) -> CommandResult:
        return self._git("worktree", "prune")

    def merge_no_ff(self, branch: str) -> CommandResult:
        """Merge ``branch`` into the current branch with an explicit merge commit."""
        return self._git("merge", "--no-ff", "--no-edit", branch)

    def merge_abort(self) -> CommandResult:
        return self._git("merge", "--abort")

    def commit_paths(self, message: str, *paths: str) -> CommandResult:
        """Stage ``paths`` and commit them on the current branch."""
        added = self._git("add", "--", *paths)
        if not added.success:
            return added
        return self._git("commit", "-m", message, "--", *paths)

    def commits_ahead(self, worktree: str | Path, base: str) -> int | None:
        """Number of commits on the worktree's HEAD that ``base`` lacks."""
        result = self._git("rev-list", "--count", f"{base}..HEAD", cwd=worktree)
        if not result.success:
            return None
        try:
            return int(result.stdout.strip())
        except ValueError:
            return None
