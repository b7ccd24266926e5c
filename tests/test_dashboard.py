"""Tests for terminal rendering of status."""

from __future__ import annotations

import io

from rich.console import Console

from madcoord.dashboard import next_actions, progress_bar, render_dashboard, render_status
from madcoord.workspace import StatusRow, StatusSummary, WorkspaceState


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=120, color_system=None), buffer


def _summary() -> StatusSummary:
    rows = [
        StatusRow("feat-a", WorkspaceState.DONE, "feat/a", "task a", "implemented", commits=2),
        StatusRow("feat-b", WorkspaceState.BLOCKED, "feat/b", "task b", "need key"),
        StatusRow("feat-c", WorkspaceState.ERRORED, "feat/c", "task c", "Test FAILED:"),
        StatusRow("feat-d", WorkspaceState.IN_PROGRESS, "feat/d", "task d"),
    ]
    return StatusSummary(total=4, done=1, blocked=1, errored=1, in_progress=1, rows=rows)


class TestProgressBar:
    def test_bounds(self) -> None:
        assert progress_bar(0, width=10) == "░" * 10
        assert progress_bar(100, width=10) == "█" * 10
        assert progress_bar(150, width=10) == "█" * 10

    def test_partial(self) -> None:
        assert progress_bar(50, width=10) == "█" * 5 + "░" * 5


class TestNextActions:
    def test_ordered_by_urgency(self) -> None:
        assert next_actions(_summary()) == [
            "Fix errors in feat-c (spawn a fixer)",
            "Unblock feat-b",
            "Merge feat-a",
        ]

    def test_all_done(self) -> None:
        rows = [StatusRow("feat-a", WorkspaceState.DONE, "feat/a", "t")]
        summary = StatusSummary(total=1, done=1, rows=rows)
        assert next_actions(summary)[-1] == "All tasks complete: merge and clean up"

    def test_empty(self) -> None:
        assert next_actions(StatusSummary()) == []


class TestRender:
    def test_status_table(self) -> None:
        console, buffer = _console()
        render_status(_summary(), console)
        out = buffer.getvalue()
        for name in ("feat-a", "feat-b", "feat-c", "feat-d"):
            assert name in out
        assert "Total: 4 | Done: 1 | In progress: 1 | Blocked: 1 | Errors: 1" in out

    def test_empty_status(self) -> None:
        console, buffer = _console()
        render_status(StatusSummary(), console)
        assert "No active worktrees." in buffer.getvalue()

    def test_dashboard(self) -> None:
        console, buffer = _console()
        render_dashboard(_summary(), console)
        out = buffer.getvalue()
        assert "25%" in out
        assert "Next actions:" in out
        assert "Merge feat-a" in out

    def test_brackets_in_task_and_detail_print_literally(self) -> None:
        rows = [
            StatusRow("feat-api", WorkspaceState.BLOCKED, "feat/api", "Fix the [/api] route", "[bold] stuck"),
            StatusRow("feat-[x]", WorkspaceState.DONE, "feat/[x]", "[/x]"),
        ]
        summary = StatusSummary(total=2, done=1, blocked=1, rows=rows)
        console, buffer = _console()
        render_dashboard(summary, console)
        out = buffer.getvalue()
        assert "Fix the [/api] route" in out
        assert "[bold] stuck" in out
        assert "[/x]" in out
        assert "Merge feat-[x]" in out
