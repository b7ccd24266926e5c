"""Command execution result dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CommandResult:
    """Result of an external command (git, npm, pytest, ...).

    Attributes:
        command: The command that was executed, joined for display.
        exit_code: Process exit code (0 = success), or None on timeout.
        stdout: Captured standard output.
        stderr: Captured standard error.
        status: "ok", "error", or "timeout".
        duration_ms: Execution duration in milliseconds.
    """

    command: str
    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    status: str = "ok"  # "ok", "error", "timeout"
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        """True if command completed with exit code 0."""
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Stdout and stderr joined, stripped."""
        parts = [p.strip() for p in (self.stdout, self.stderr) if p and p.strip()]
        return "\n".join(parts)

    @property
    def error(self) -> str:
        """Best human-readable failure text."""
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.exit_code}"

    def __repr__(self) -> str:
        if self.success:
            return f"<CommandResult ok: {self.command}>"
        return f"<CommandResult {self.status}, exit={self.exit_code}: {self.command}>"
