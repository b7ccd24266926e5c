"""Subprocess-based command runner."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Sequence

from madcoord.logging import TRACE, VERBOSE, get_logger
from madcoord.terminal.result import CommandResult

_log = get_logger("terminal")


class SubprocessCommandRunner:
    """Run commands with subprocess.run, blocking until they finish.

    The coordinator never runs two external commands at once, so a
    synchronous runner is all it needs.
    """

    def __init__(self, default_cwd: str = ".") -> None:
        """Initialize the runner.

        Args:
            default_cwd: Working directory used when a call passes none.
        """
        self._default_cwd = default_cwd

    def run(
        self,
        args: Sequence[str],
        cwd: str | None = None,
        timeout: float | None = 120.0,
    ) -> CommandResult:
        """Run a command and capture its output.

        Args:
            args: Program and arguments.
            cwd: Working directory. Uses default_cwd if None.
            timeout: Timeout in seconds. None for no timeout.

        Returns:
            CommandResult with execution details.
        """
        start_time = time.perf_counter()
        full_command = " ".join(args)
        working_dir = cwd or self._default_cwd
        _log.log(VERBOSE, "Running %s (cwd=%s)", full_command, working_dir)

        try:
            completed = subprocess.run(
                list(args),
                cwd=working_dir,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                command=full_command,
                exit_code=None,
                stdout=_as_text(e.stdout),
                stderr=f"Command timed out after {timeout}s",
                status="timeout",
                duration_ms=_elapsed_ms(start_time),
            )
        except FileNotFoundError:
            return CommandResult(
                command=full_command,
                exit_code=127,  # Standard "command not found" exit code
                stderr=f"Command not found: {args[0]}",
                status="error",
                duration_ms=_elapsed_ms(start_time),
            )
        except PermissionError:
            return CommandResult(
                command=full_command,
                exit_code=126,  # Standard "permission denied" exit code
                stderr=f"Permission denied: {args[0]}",
                status="error",
                duration_ms=_elapsed_ms(start_time),
            )
        except OSError as e:
            return CommandResult(
                command=full_command,
                exit_code=1,
                stderr=f"OS error: {e}",
                status="error",
                duration_ms=_elapsed_ms(start_time),
            )

        result = CommandResult(
            command=full_command,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            status="ok" if completed.returncode == 0 else "error",
            duration_ms=_elapsed_ms(start_time),
        )
        _log.log(
            TRACE,
            "%s exited %d in %.0fms\n%s",
            full_command,
            result.exit_code,
            result.duration_ms,
            result.output,
        )
        return result


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000


def _as_text(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
