"""Merge completed workspaces back into the integration branch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from madcoord.logging import get_logger
from madcoord.workspace import sentinels

if TYPE_CHECKING:
    from madcoord.events import EventLog
    from madcoord.vcs.git import GitClient
    from madcoord.workspace.manager import WorkspaceManager

_log = get_logger("workspace.merge")

_CONFLICT_MARKERS = ("CONFLICT", "Automatic merge failed")


class MergeStatus(Enum):
    MERGED = "merged"
    CONFLICT = "conflict"
    FAILED = "failed"
    DENIED = "denied"  # Precondition not met; git was not invoked
    NOT_FOUND = "not_found"


@dataclass
class MergeResult:
    """Outcome of a merge attempt.

    Attributes:
        status: What happened.
        name: Workspace name.
        branch: Branch that was (or would have been) merged.
        message: One-line summary.
        output: Raw git output; for CONFLICT this lists the conflicting paths.
    """

    status: MergeStatus
    name: str
    branch: str = ""
    message: str = ""
    output: str = ""

    @property
    def success(self) -> bool:
        return self.status is MergeStatus.MERGED

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "name": self.name,
            "branch": self.branch,
            "message": self.message,
            "output": self.output,
        }


class MergeCoordinator:
    """Merges a workspace's branch into the current branch of the main tree.

    Only workspaces carrying the done sentinel are merged, always with
    ``--no-ff`` so each feature keeps its own merge commit and can be
    reverted as one. Conflicts are aborted and handed back untouched;
    resolving them is a conflict-resolver agent's job in its own workspace.
    """

    def __init__(
        self,
        git: GitClient,
        workspaces: WorkspaceManager,
        events: EventLog | None = None,
    ) -> None:
        self._git = git
        self._workspaces = workspaces
        self._events = events

    def merge(self, name: str) -> MergeResult:
        if not self._workspaces.exists(name):
            return MergeResult(
                MergeStatus.NOT_FOUND,
                name,
                message=f"Worktree not found: {self._workspaces.path_for(name)}",
            )

        workspace = self._workspaces.get(name)
        branch = workspace.branch_name
        if not sentinels.has(workspace.root_path, sentinels.DONE):
            return MergeResult(
                MergeStatus.DENIED,
                name,
                branch,
                message=f"Cannot merge: worktree {name} is not marked as done. Complete the task first.",
            )

        result = self._git.merge_no_ff(branch)
        if result.success:
            self._event("info", "Merged worktree", name, branch)
            return MergeResult(
                MergeStatus.MERGED,
                name,
                branch,
                message=f"Successfully merged {branch}",
                output=result.output,
            )

        output = result.output or result.error
        if any(marker in output for marker in _CONFLICT_MARKERS):
            aborted = self._git.merge_abort()
            if not aborted.success:
                _log.warning("git merge --abort failed after conflict on %s: %s", branch, aborted.error)
            self._event("warn", "Merge conflict", name, branch)
            return MergeResult(
                MergeStatus.CONFLICT,
                name,
                branch,
                message=f"Merge conflict detected while merging {branch}; merge aborted",
                output=output,
            )

        self._event("error", "Merge failed", name, branch)
        return MergeResult(
            MergeStatus.FAILED,
            name,
            branch,
            message=f"Merge failed: {result.error}",
            output=output,
        )

    def _event(self, level: str, message: str, name: str, branch: str) -> None:
        if self._events is not None:
            self._events.log(level, message, {"worktree": name, "branch": branch})  # type: ignore[arg-type]
