"""Data schemas for workspaces and lifecycle results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from madcoord.workspace import sentinels


class WorkspaceState(Enum):
    """Task state, derived from sentinel presence."""

    IN_PROGRESS = "in-progress"
    DONE = "done"
    BLOCKED = "blocked"
    ERRORED = "errored"

    @classmethod
    def from_root(cls, root: Path) -> WorkspaceState:
        """Classify a workspace directory (done > blocked > errored > in-progress)."""
        return _STATE_BY_SENTINEL.get(sentinels.terminal_sentinel(root), cls.IN_PROGRESS)


_STATE_BY_SENTINEL: dict[str | None, WorkspaceState] = {
    sentinels.DONE: WorkspaceState.DONE,
    sentinels.BLOCKED: WorkspaceState.BLOCKED,
    sentinels.ERRORED: WorkspaceState.ERRORED,
}


@dataclass
class Workspace:
    """An isolated worktree bound to its own branch.

    Everything except ``name`` and ``root_path`` comes from the task
    sentinel; ``state`` is re-read from disk on every access.
    """

    name: str
    root_path: Path
    branch_name: str
    base_branch: str | None = None
    created_at: datetime | None = None
    task_description: str = ""

    @classmethod
    def load(cls, root: Path) -> Workspace:
        """Build a Workspace from a directory on disk."""
        text = sentinels.read(root, sentinels.TASK)
        if text is None:
            return cls(name=root.name, root_path=root, branch_name=root.name)
        header = sentinels.parse_task(text)
        return cls(
            name=root.name,
            root_path=root,
            branch_name=header.branch or root.name,
            base_branch=header.base,
            created_at=header.created,
            task_description=header.task,
        )

    @property
    def state(self) -> WorkspaceState:
        return WorkspaceState.from_root(self.root_path)

    @property
    def exists(self) -> bool:
        return self.root_path.is_dir()

    def has(self, sentinel: str) -> bool:
        return sentinels.has(self.root_path, sentinel)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.root_path),
            "branch": self.branch_name,
            "base": self.base_branch,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "state": self.state.value,
            "task": self.task_description,
        }


@dataclass
class WorkspaceNotFound(Exception):
    """Raised when an operation names a workspace that does not exist."""

    name: str
    path: str = ""

    def __str__(self) -> str:
        return f"Workspace not found: {self.name}" + (f" ({self.path})" if self.path else "")


@dataclass
class WorkspaceResult:
    """Outcome of a lifecycle operation that touches git.

    Attributes:
        status: "ok", "invalid", "exists", "not_found", "refused" or "git_error".
        name: Workspace name the operation targeted.
        message: One-line human-readable outcome.
        workspace: The workspace after the operation, when it exists.
        output: Raw git output for failures.
    """

    status: str
    name: str
    message: str
    workspace: Workspace | None = None
    output: str = ""

    @property
    def success(self) -> bool:
        return self.status == "ok"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "name": self.name,
            "message": self.message,
            "workspace": self.workspace.to_dict() if self.workspace else None,
            "output": self.output,
        }
