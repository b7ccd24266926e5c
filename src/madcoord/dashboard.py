"""Rich rendering of workspace status for the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from madcoord.workspace import StatusSummary, WorkspaceState

_STATE_STYLE = {
    WorkspaceState.DONE: ("done", "green"),
    WorkspaceState.BLOCKED: ("blocked", "yellow"),
    WorkspaceState.ERRORED: ("errored", "red"),
    WorkspaceState.IN_PROGRESS: ("in progress", "cyan"),
}

BAR_WIDTH = 20


def progress_bar(percent: int, width: int = BAR_WIDTH) -> str:
    """Text bar such as ``██████░░░░`` for a 0-100 percentage."""
    percent = max(0, min(100, percent))
    filled = round(width * percent / 100)
    return "█" * filled + "░" * (width - filled)


def status_table(summary: StatusSummary) -> Table:
    table = Table(title="Worktrees")
    table.add_column("Worktree", style="bold")
    table.add_column("State")
    table.add_column("Commits", justify="right")
    table.add_column("Task")
    table.add_column("Detail", style="dim")

    for row in summary.rows:
        label, color = _STATE_STYLE[row.state]
        table.add_row(
            escape(row.name),
            f"[{color}]{label}[/{color}]",
            "-" if row.commits is None else str(row.commits),
            escape(row.task),
            escape(row.detail) if row.detail else "-",
        )
    return table


def render_status(summary: StatusSummary, console: Console) -> None:
    """Print the worktree table with a one-line count summary."""
    if not summary.total:
        console.print("[dim]No active worktrees.[/dim]")
        return
    console.print(status_table(summary))
    console.print(
        f"Total: {summary.total} | "
        f"[green]Done: {summary.done}[/green] | "
        f"[cyan]In progress: {summary.in_progress}[/cyan] | "
        f"[yellow]Blocked: {summary.blocked}[/yellow] | "
        f"[red]Errors: {summary.errored}[/red]"
    )


def next_actions(summary: StatusSummary) -> list[str]:
    """Suggested follow-ups, most urgent first."""
    actions: list[str] = []
    for name in summary.names(WorkspaceState.ERRORED):
        actions.append(f"Fix errors in {name} (spawn a fixer)")
    for name in summary.names(WorkspaceState.BLOCKED):
        actions.append(f"Unblock {name}")
    for name in summary.names(WorkspaceState.DONE):
        actions.append(f"Merge {name}")
    if summary.total and summary.done == summary.total:
        actions.append("All tasks complete: merge and clean up")
    return actions


def render_dashboard(summary: StatusSummary, console: Console) -> None:
    """Print progress, per-state breakdown, the worktree table and next actions."""
    console.rule("[bold]MAD dashboard[/bold]")
    if not summary.total:
        console.print("[dim]No active worktrees. Create one with `madcoord create`.[/dim]")
        return

    console.print(f"Progress  {progress_bar(summary.progress)}  {summary.progress}%")
    console.print()

    breakdown = Table(show_header=True, box=None)
    breakdown.add_column("State")
    breakdown.add_column("Count", justify="right")
    breakdown.add_column("Share", justify="right")
    for state, count in (
        (WorkspaceState.DONE, summary.done),
        (WorkspaceState.IN_PROGRESS, summary.in_progress),
        (WorkspaceState.BLOCKED, summary.blocked),
        (WorkspaceState.ERRORED, summary.errored),
    ):
        label, color = _STATE_STYLE[state]
        breakdown.add_row(f"[{color}]{label}[/{color}]", str(count), f"{summary.percent(count)}%")
    console.print(breakdown)
    console.print()

    console.print(status_table(summary))

    actions = next_actions(summary)
    if actions:
        console.print()
        console.print("[bold]Next actions:[/bold]")
        for action in actions:
            console.print(f"  - {escape(action)}")
