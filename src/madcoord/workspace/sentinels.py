"""Sentinel files: the on-disk task-state protocol.

A workspace's state is encoded by which marker files exist in its root:

    .agent-task     written once at creation (header + task text)
    .agent-done     summary; the work is complete
    .agent-blocked  reason; the agent cannot proceed
    .agent-error    diagnostic; checks failed

Presence drives the state machine; contents are for humans. Several files
are used instead of one state file so that each marker can be inspected
(and written by an agent) with plain shell tools. The cost is that writes
are not atomic across markers and two writers race last-write-wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

TASK = ".agent-task"
DONE = ".agent-done"
BLOCKED = ".agent-blocked"
ERRORED = ".agent-error"

ALL_SENTINELS = (TASK, DONE, BLOCKED, ERRORED)

# Classification order when more than one terminal marker is present
TERMINAL_PRIORITY = (DONE, BLOCKED, ERRORED)

_HEADER_TITLE = "# Agent Task"


def has(root: Path, sentinel: str) -> bool:
    return (root / sentinel).is_file()


def write(root: Path, sentinel: str, text: str) -> Path:
    """Write a sentinel, replacing any previous content."""
    path = root / sentinel
    path.write_text(text.rstrip("\n") + "\n", encoding="utf-8")
    return path


def clear(root: Path, *sentinels: str) -> list[str]:
    """Delete sentinels if present. Returns the names actually removed."""
    removed: list[str] = []
    for sentinel in sentinels:
        path = root / sentinel
        if path.is_file():
            path.unlink()
            removed.append(sentinel)
    return removed


def read(root: Path, sentinel: str) -> str | None:
    path = root / sentinel
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8", errors="replace")


def first_line(root: Path, sentinel: str) -> str:
    """First line of a sentinel, empty if missing."""
    text = read(root, sentinel)
    if not text:
        return ""
    return text.split("\n", 1)[0].strip()


def terminal_sentinel(root: Path) -> str | None:
    """The highest-priority terminal sentinel present (done > blocked > errored)."""
    for sentinel in TERMINAL_PRIORITY:
        if has(root, sentinel):
            return sentinel
    return None


@dataclass
class TaskHeader:
    """Parsed contents of the task sentinel."""

    branch: str | None
    base: str | None
    created: datetime | None
    task: str

    @property
    def summary(self) -> str:
        """Task text on one line."""
        return " ".join(self.task.split())


def format_task(branch: str, base: str, created: datetime, task: str) -> str:
    """Render the task sentinel.

    Example:
        # Agent Task
        # Branch: feat/auth-login
        # Created: 2026-01-17T10:00:00+00:00
        # Base: main

        Implement the login form
    """
    return (
        f"{_HEADER_TITLE}\n"
        f"# Branch: {branch}\n"
        f"# Created: {created.isoformat()}\n"
        f"# Base: {base}\n"
        f"\n"
        f"{task.strip()}\n"
    )


def parse_task(text: str) -> TaskHeader:
    """Parse a task sentinel. Missing header fields come back as None.

    The header is the leading run of ``#`` lines; the task text is
    everything after it, so markdown headings inside the task survive.
    """
    fields: dict[str, str] = {}
    lines = text.splitlines()
    body_start = 0
    for index, line in enumerate(lines):
        if not line.startswith("#"):
            body_start = index
            break
        key, sep, value = line[1:].partition(":")
        if sep:
            fields[key.strip().lower()] = value.strip()
    else:
        body_start = len(lines)

    created: datetime | None = None
    if "created" in fields:
        try:
            created = datetime.fromisoformat(fields["created"].replace("Z", "+00:00"))
        except ValueError:
            created = None

    return TaskHeader(
        branch=fields.get("branch"),
        base=fields.get("base"),
        created=created,
        task="\n".join(lines[body_start:]).strip(),
    )
