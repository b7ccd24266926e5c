"""Workspace lifecycle: create, transition, remove.

Workspaces live under ``<repo>/<directory>/<name>`` where ``name`` is the
branch with ``/`` replaced by ``-``. State transitions write sentinel
files only; git is touched by create() and remove(), and both report git
failures as WorkspaceResult values instead of raising.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from filelock import FileLock, Timeout

from madcoord.config.schema import WorkspaceConfig
from madcoord.logging import get_logger
from madcoord.workspace import sentinels
from madcoord.workspace.schema import Workspace, WorkspaceNotFound, WorkspaceResult

if TYPE_CHECKING:
    from madcoord.events import EventLog
    from madcoord.vcs.git import GitClient

_log = get_logger("workspace")

GITIGNORE_MARKER = "# MAD agent files (never commit)"
GITIGNORE_COMMIT_MESSAGE = "chore: add MAD agent files to gitignore"


def name_for(branch: str) -> str:
    """Directory name for a branch: ``feat/auth-login`` -> ``feat-auth-login``."""
    return branch.strip().replace("/", "-").replace("\\", "-")


def is_valid_name(name: str) -> bool:
    """A single path component naming a workspace directory."""
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


class WorkspaceManager:
    """Creates, transitions and removes workspaces.

    The manager keeps no in-memory state: every query reads the
    filesystem, so any process pointed at the same repository sees the
    same workspaces.
    """

    def __init__(
        self,
        git: GitClient,
        config: WorkspaceConfig | None = None,
        events: EventLog | None = None,
    ) -> None:
        self._git = git
        self._config = config or WorkspaceConfig()
        self._events = events
        self._dir = git.repo_root / self._config.directory

    @property
    def directory(self) -> Path:
        """Directory holding all workspaces."""
        return self._dir

    def path_for(self, name: str) -> Path:
        return self._dir / name

    def exists(self, name: str) -> bool:
        return is_valid_name(name) and self.path_for(name).is_dir()

    def get(self, name: str) -> Workspace:
        """Load a workspace by name.

        Raises:
            WorkspaceNotFound: If no such workspace directory exists.
        """
        path = self.path_for(name)
        if not is_valid_name(name) or not path.is_dir():
            raise WorkspaceNotFound(name=name, path=str(path))
        return Workspace.load(path)

    def list_workspaces(self) -> list[Workspace]:
        """All workspaces, sorted by name. Plain files in the directory are skipped."""
        if not self._dir.is_dir():
            return []
        return [Workspace.load(p) for p in sorted(self._dir.iterdir()) if p.is_dir()]

    # -------------------------------------------------------------------------
    # Creation and teardown (touch git)
    # -------------------------------------------------------------------------

    def create(self, branch: str, task: str) -> WorkspaceResult:
        """Create a workspace for ``branch`` with an immutable task description.

        Reuses ``branch`` if it already exists, otherwise branches from the
        current integration branch. A workspace with the same name is never
        reused or merged into.
        """
        branch = (branch or "").strip()
        name = name_for(branch)
        if not branch:
            return self._fail("invalid", name, "Branch name cannot be empty")
        if (
            branch.startswith("-")
            or any(c.isspace() for c in branch)
            or ".." in branch
            or not is_valid_name(name)
        ):
            return self._fail("invalid", name, f"Invalid branch name: {branch}")
        if not task or not task.strip():
            return self._fail("invalid", name, "Task description cannot be empty")

        path = self.path_for(name)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return self._fail("git_error", name, f"Error creating workspace directory: {e}")

        try:
            with FileLock(self._dir / ".lock", timeout=30):
                return self._create_locked(branch, name, path, task)
        except Timeout:
            return self._fail("git_error", name, "Timed out waiting for the workspace lock")

    def _create_locked(self, branch: str, name: str, path: Path, task: str) -> WorkspaceResult:
        if path.exists():
            if self._events:
                self._events.warn("Worktree already exists", branch=branch, path=str(path))
            return WorkspaceResult(
                status="exists",
                name=name,
                message=f"Worktree already exists at {path}",
                workspace=Workspace.load(path) if path.is_dir() else None,
            )

        base = self._git.current_branch()
        if self._events:
            self._events.info("Creating worktree", branch=branch, baseBranch=base)

        if self._config.manage_gitignore:
            self.ensure_gitignore()

        if self._git.branch_exists(branch):
            result = self._git.worktree_add(path, branch)
        else:
            result = self._git.worktree_add(path, branch, base)
        if not result.success:
            if self._events:
                self._events.error(
                    "Failed to create git worktree",
                    branch=branch,
                    command=result.command,
                    error=result.error,
                )
            return WorkspaceResult(
                status="git_error",
                name=name,
                message=f"Error creating git worktree: {result.error}",
                output=result.output,
            )

        created = datetime.now(timezone.utc)
        try:
            sentinels.write(path, sentinels.TASK, sentinels.format_task(branch, base, created, task))
        except OSError as e:
            _log.warning("Failed to write task file in %s: %s", path, e)
            if self._events:
                self._events.warn("Failed to write task file", error=str(e))

        if self._events:
            self._events.info("Worktree created successfully", branch=branch, path=str(path))
        return WorkspaceResult(
            status="ok",
            name=name,
            message=f"Worktree created at {path} (branch {branch}, base {base})",
            workspace=Workspace.load(path),
        )

    def remove(self, name: str, force: bool = False) -> WorkspaceResult:
        """Remove a workspace's worktree and prune git's worktree records.

        Refuses unless the workspace is done, or ``force`` is set. The branch
        itself is kept so it can still be merged or inspected.
        """
        path = self.path_for(name)
        if not self.exists(name):
            return self._fail("not_found", name, f"Worktree not found: {path}")

        if not force and not sentinels.has(path, sentinels.DONE):
            return self._fail(
                "refused",
                name,
                f"Worktree {name} is not marked as done. Use force=True to clean up anyway.",
            )

        removed = self._git.worktree_remove(path)
        if not removed.success:
            if self._events:
                self._events.error("Cleanup failed", worktree=name, error=removed.error)
            return WorkspaceResult(
                status="git_error",
                name=name,
                message=f"Cleanup failed: {removed.error}",
                output=removed.output,
            )

        pruned = self._git.worktree_prune()
        if not pruned.success:
            _log.warning("git worktree prune failed: %s", pruned.error)

        if self._events:
            self._events.info("Worktree cleaned up", worktree=name, forced=force)
        return WorkspaceResult(status="ok", name=name, message=f"Cleaned up worktree: {name}")

    def ensure_gitignore(self) -> bool:
        """Add sentinel files and the workspace directory to .gitignore.

        Committed on the current branch so worktrees branched later inherit
        it. Best-effort: failures are logged, not returned.

        Returns:
            True if .gitignore was changed.
        """
        gitignore = self._git.repo_root / ".gitignore"
        try:
            content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
        except OSError as e:
            _log.warning("Cannot read %s: %s", gitignore, e)
            return False
        if ".agent-" in content:
            return False

        lines = ["", GITIGNORE_MARKER, *sentinels.ALL_SENTINELS]
        if self._events is not None:
            lines += [self._events.path.name, self._events.path.name + ".lock"]
        lines += ["", "# Worktrees directory", f"{self._config.directory}/", ""]

        try:
            with open(gitignore, "a", encoding="utf-8") as f:
                if content and not content.endswith("\n"):
                    f.write("\n")
                f.write("\n".join(lines))
        except OSError as e:
            _log.warning("Cannot update %s: %s", gitignore, e)
            return False

        committed = self._git.commit_paths(GITIGNORE_COMMIT_MESSAGE, ".gitignore")
        if not committed.success:
            _log.warning("Could not commit .gitignore: %s", committed.error)
        return True

    # -------------------------------------------------------------------------
    # State transitions (sentinels only)
    # -------------------------------------------------------------------------

    def mark_done(self, name: str, summary: str) -> Workspace:
        """Write the done sentinel and clear errored/blocked.

        Raises:
            WorkspaceNotFound: If the workspace does not exist.
        """
        workspace = self.get(name)
        sentinels.write(workspace.root_path, sentinels.DONE, summary)
        sentinels.clear(workspace.root_path, sentinels.ERRORED, sentinels.BLOCKED)
        if self._events:
            self._events.info("Marked done", worktree=name, summary=summary)
        return workspace

    def mark_blocked(self, name: str, reason: str) -> Workspace:
        """Write the blocked sentinel. An errored sentinel is left in place.

        Raises:
            WorkspaceNotFound: If the workspace does not exist.
        """
        workspace = self.get(name)
        sentinels.write(workspace.root_path, sentinels.BLOCKED, reason)
        if self._events:
            self._events.warn("Marked blocked", worktree=name, reason=reason)
        return workspace

    def mark_errored(self, name: str, details: str) -> Workspace:
        """Write the errored sentinel and clear done.

        Raises:
            WorkspaceNotFound: If the workspace does not exist.
        """
        workspace = self.get(name)
        sentinels.write(workspace.root_path, sentinels.ERRORED, details)
        sentinels.clear(workspace.root_path, sentinels.DONE)
        if self._events:
            self._events.error("Marked errored", worktree=name, details=details.split("\n", 1)[0])
        return workspace

    def read_task(self, name: str) -> str:
        """Raw contents of the task sentinel.

        Raises:
            WorkspaceNotFound: If the workspace or its task file is missing.
        """
        path = self.path_for(name)
        text = sentinels.read(path, sentinels.TASK) if is_valid_name(name) else None
        if text is None:
            raise WorkspaceNotFound(name=name, path=str(path / sentinels.TASK))
        return text

    def _fail(self, status: str, name: str, message: str) -> WorkspaceResult:
        _log.info("Workspace %s: %s", name or "<unnamed>", message)
        if self._events:
            self._events.error(message, worktree=name, status=status)
        return WorkspaceResult(status=status, name=name, message=message)
