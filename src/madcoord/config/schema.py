"""Configuration schema dataclasses for madcoord.

Defines the structure of configuration at all levels (system, user, project).
All fields are optional to support partial configs that merge together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path


@dataclass
class ShellDenyConfig:
    """An extra mutation pattern for read-only sessions.

    Appended to the built-in shell denylist. The pattern is a regular
    expression searched in the command text.

    Example config.yaml:
        permissions:
          shell_denylist:
            - pattern: '\\bsed\\s+-i\\b'
              label: in-place edit
    """

    pattern: str
    label: str = "custom rule"


@dataclass
class PermissionsConfig:
    """Agent permission settings.

    Attributes:
        strict_mode: Deny actions from sessions that were never registered.
            Off by default so that unregistered callers keep working.
        exclusive_workspaces: Reject registering a second session bound to a
            workspace that already has one.
        shell_denylist: Extra deny rules for read-only shell commands.
    """

    strict_mode: bool = False
    exclusive_workspaces: bool = True
    shell_denylist: list[ShellDenyConfig] = field(default_factory=list)


@dataclass
class WorkspaceConfig:
    """Workspace (git worktree) layout."""

    directory: str = "worktrees"  # Relative to the repository root
    manage_gitignore: bool = True  # Add sentinel files to .gitignore on first create


@dataclass
class ChecksConfig:
    """Ecosystem check execution limits."""

    timeout: float = 600.0  # Seconds per check command
    output_limit: int = 4000  # Characters of output kept per check


@dataclass
class EventLogConfig:
    """Append-only JSONL event log."""

    enabled: bool = True
    file: str = ".mad-logs.jsonl"  # Relative to the repository root


@dataclass
class Config:
    """Root configuration object.

    All fields use default factories so partial configs work with deep merging.
    """

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    permissions: PermissionsConfig = field(default_factory=PermissionsConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    checks: ChecksConfig = field(default_factory=ChecksConfig)
    events: EventLogConfig = field(default_factory=EventLogConfig)

    # Unknown top-level sections are kept here
    extra: dict[str, Any] = field(default_factory=dict)
