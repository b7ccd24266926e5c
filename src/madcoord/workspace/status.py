"""Status aggregation over all workspaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from madcoord.workspace import sentinels
from madcoord.workspace.schema import Workspace, WorkspaceState

if TYPE_CHECKING:
    from madcoord.vcs.git import GitClient
    from madcoord.workspace.manager import WorkspaceManager

_DETAIL_SENTINEL = {
    WorkspaceState.DONE: sentinels.DONE,
    WorkspaceState.BLOCKED: sentinels.BLOCKED,
    WorkspaceState.ERRORED: sentinels.ERRORED,
}

TASK_PREVIEW_CHARS = 60


@dataclass
class StatusRow:
    """One workspace in a status report."""

    name: str
    state: WorkspaceState
    branch: str
    task: str  # One-line preview of the task text
    detail: str = ""  # First line of the done/blocked/errored sentinel
    commits: int | None = None  # Commits ahead of the base branch

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "branch": self.branch,
            "task": self.task,
            "detail": self.detail,
            "commits": self.commits,
        }


@dataclass
class StatusSummary:
    """Counts per state plus one row per workspace."""

    total: int = 0
    done: int = 0
    blocked: int = 0
    errored: int = 0
    in_progress: int = 0
    rows: list[StatusRow] = field(default_factory=list)

    def names(self, state: WorkspaceState) -> list[str]:
        return [row.name for row in self.rows if row.state is state]

    def percent(self, count: int) -> int:
        return round(count * 100 / self.total) if self.total else 0

    @property
    def progress(self) -> int:
        """Percentage of workspaces that are done."""
        return self.percent(self.done)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "done": self.done,
            "blocked": self.blocked,
            "errored": self.errored,
            "in_progress": self.in_progress,
            "rows": [row.to_dict() for row in self.rows],
        }


class StatusAggregator:
    """Summarizes sentinel state across every workspace.

    Each workspace is classified by the first sentinel present in the
    order done, blocked, errored; none means in progress. A workspace that
    somehow carries both done and blocked counts as done.
    """

    def __init__(self, workspaces: WorkspaceManager, git: GitClient | None = None) -> None:
        self._workspaces = workspaces
        self._git = git

    def summarize(self, include_commits: bool = True) -> StatusSummary:
        summary = StatusSummary()
        for workspace in self._workspaces.list_workspaces():
            row = self._row(workspace, include_commits)
            summary.rows.append(row)
            summary.total += 1
            if row.state is WorkspaceState.DONE:
                summary.done += 1
            elif row.state is WorkspaceState.BLOCKED:
                summary.blocked += 1
            elif row.state is WorkspaceState.ERRORED:
                summary.errored += 1
            else:
                summary.in_progress += 1
        return summary

    def _row(self, workspace: Workspace, include_commits: bool) -> StatusRow:
        state = workspace.state
        detail = ""
        if state in _DETAIL_SENTINEL:
            detail = sentinels.first_line(workspace.root_path, _DETAIL_SENTINEL[state])

        text = sentinels.read(workspace.root_path, sentinels.TASK)
        if text is None:
            preview = "No task file"
        else:
            preview = sentinels.parse_task(text).summary[:TASK_PREVIEW_CHARS]

        commits = None
        if include_commits and self._git is not None and workspace.base_branch:
            commits = self._git.commits_ahead(workspace.root_path, workspace.base_branch)

        return StatusRow(
            name=workspace.name,
            state=state,
            branch=workspace.branch_name,
            task=preview,
            detail=detail,
            commits=commits,
        )
