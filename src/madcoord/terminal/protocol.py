"""Command runner protocol for external collaborators."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from madcoord.terminal.result import CommandResult


class CommandRunner(Protocol):
    """Protocol for running an external command to completion.

    Implementations:
    - SubprocessCommandRunner: local subprocess execution
    - test doubles that script git responses
    """

    def run(
        self,
        args: Sequence[str],
        cwd: str | None = None,
        timeout: float | None = 120.0,
    ) -> CommandResult:
        """Run a command and wait for it.

        Args:
            args: Program and arguments (no shell interpretation).
            cwd: Working directory. If None, uses the runner's default.
            timeout: Timeout in seconds. None means no timeout.

        Returns:
            CommandResult with exit code and captured output. Failures to
            start the program are reported as results, not raised.
        """
        ...
