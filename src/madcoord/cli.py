"""Command-line interface for madcoord."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from madcoord import __version__
from madcoord.events import LEVELS
from madcoord.terminal import CommandRunner
from madcoord.vcs import NotAGitRepository
from madcoord.workspace import MergeStatus, WorkspaceNotFound

if TYPE_CHECKING:
    from madcoord.coordinator import Coordinator

console = Console()
err_console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="madcoord",
        description="Coordinate parallel coding agents in isolated git worktrees",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (can be repeated)",
    )
    parser.add_argument(
        "-C", "--cwd",
        type=Path,
        default=Path("."),
        help="Run as if started in this directory (default: current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    create = subparsers.add_parser("create", help="Create a worktree for a task")
    create.add_argument("branch", help="Branch name, e.g. feat/auth-login")
    create.add_argument("task", nargs="+", help="Task description")

    status = subparsers.add_parser("status", help="Show the state of every worktree")
    status.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    status.add_argument(
        "--no-commits",
        action="store_true",
        help="Skip counting commits ahead of the base branch",
    )

    subparsers.add_parser("dashboard", help="Progress overview with next actions")

    done = subparsers.add_parser("done", help="Mark a worktree as done")
    done.add_argument("name", help="Worktree name")
    done.add_argument("summary", nargs="+", help="What was completed")

    blocked = subparsers.add_parser("blocked", help="Mark a worktree as blocked")
    blocked.add_argument("name", help="Worktree name")
    blocked.add_argument("reason", nargs="+", help="Why the agent cannot continue")

    error = subparsers.add_parser("error", help="Mark a worktree as errored")
    error.add_argument("name", help="Worktree name")
    error.add_argument("details", nargs="+", help="Error details")

    read_task = subparsers.add_parser("read-task", help="Print a worktree's task file")
    read_task.add_argument("name", help="Worktree name")

    test = subparsers.add_parser("test", help="Run lint/build/test checks in a worktree")
    test.add_argument("name", help="Worktree name")

    merge = subparsers.add_parser("merge", help="Merge a done worktree into the current branch")
    merge.add_argument("name", help="Worktree name")

    cleanup = subparsers.add_parser("cleanup", help="Remove a worktree")
    cleanup.add_argument("name", help="Worktree name")
    cleanup.add_argument("--force", action="store_true", help="Remove even if not done")

    log = subparsers.add_parser("log", help="Append a record to the event log")
    log.add_argument("level", choices=LEVELS, help="Event level")
    log.add_argument("message", nargs="+", help="Event message")
    log.add_argument("--context", help="JSON object with extra fields")

    return parser


def run_cli(args: Sequence[str], runner: CommandRunner | None = None) -> int:
    """Run the CLI with the given arguments. Returns the process exit code."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.command is None:
        parser.print_help()
        return 1

    from madcoord.coordinator import Coordinator
    from madcoord.logging import setup_logging

    try:
        coord = Coordinator.open(parsed.cwd, runner=runner)
    except NotAGitRepository as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        return 2

    if parsed.verbose:
        coord.config.logging.verbose = min(parsed.verbose + 1, 4)
    setup_logging(coord.config.logging)

    try:
        return _dispatch(coord, parsed)
    except WorkspaceNotFound as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        return 1


def _dispatch(coord: Coordinator, parsed: argparse.Namespace) -> int:
    from madcoord.dashboard import render_dashboard, render_status

    command = parsed.command

    if command == "create":
        result = coord.create(parsed.branch, " ".join(parsed.task))
        return _report(result.success, result.message, result.output)

    if command == "status":
        summary = coord.status(include_commits=not parsed.no_commits)
        if parsed.json:
            console.print_json(json.dumps(summary.to_dict()))
        else:
            render_status(summary, console)
        return 0

    if command == "dashboard":
        render_dashboard(coord.status(), console)
        return 0

    if command == "done":
        coord.mark_done(parsed.name, " ".join(parsed.summary))
        return _report(True, f"Marked {parsed.name} as done")

    if command == "blocked":
        coord.mark_blocked(parsed.name, " ".join(parsed.reason))
        return _report(True, f"Marked {parsed.name} as blocked")

    if command == "error":
        coord.mark_errored(parsed.name, " ".join(parsed.details))
        return _report(True, f"Marked {parsed.name} as errored")

    if command == "read-task":
        console.print(coord.read_task(parsed.name), markup=False, highlight=False)
        return 0

    if command == "test":
        report = coord.test(parsed.name)
        if not report.ran_any:
            console.print(f"[yellow]No checks detected in {parsed.name}[/yellow]")
            return 0
        for check in report.results:
            mark = "[green]PASS[/green]" if check.success else "[red]FAIL[/red]"
            console.print(f"{mark} {check.label} ({escape(check.command)})")
            if not check.success:
                console.print(check.output, markup=False, highlight=False)
        if report.passed:
            return _report(True, f"All checks passed in {parsed.name}")
        return _report(False, f"Checks failed in {parsed.name}; marked as errored")

    if command == "merge":
        result = coord.merge(parsed.name)
        output = result.output if result.status is MergeStatus.CONFLICT else ""
        return _report(result.success, result.message, output)

    if command == "cleanup":
        result = coord.remove(parsed.name, force=parsed.force)
        return _report(result.success, result.message, result.output)

    if command == "log":
        try:
            context = json.loads(parsed.context) if parsed.context else None
        except json.JSONDecodeError as e:
            return _report(False, f"Invalid --context JSON: {e}")
        if context is not None and not isinstance(context, dict):
            return _report(False, "--context must be a JSON object")
        written = coord.log(parsed.level, " ".join(parsed.message), context)
        return _report(written, "Logged" if written else "Event log is disabled or not writable")

    return 1


def _report(success: bool, message: str, output: str = "") -> int:
    if success:
        console.print(f"[green]{escape(message)}[/green]", highlight=False, soft_wrap=True)
    else:
        err_console.print(f"[red]{escape(message)}[/red]", highlight=False, soft_wrap=True)
    if output:
        console.print(output, markup=False, highlight=False)
    return 0 if success else 1


def main() -> int:
    """Entry point for the madcoord console script."""
    return run_cli(sys.argv[1:])
