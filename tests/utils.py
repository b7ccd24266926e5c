"""Shared test utilities for madcoord tests."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from pathlib import Path

from madcoord.terminal.result import CommandResult


class FakeRunner:
    """Scripted stand-in for SubprocessCommandRunner.

    Records every call. Scripted responses (see ``on``) win over the
    built-in git behavior, which emulates just enough of git for the
    workspace code: the repository top level, the current branch, branch
    lookups, and ``worktree add/remove`` creating and deleting directories.
    """

    def __init__(self, repo_root: Path, branch: str = "main") -> None:
        self.repo_root = repo_root
        self.branch = branch
        self.branches: set[str] = {branch}
        self.calls: list[list[str]] = []
        self.cwds: list[str | None] = []
        self._scripted: list[tuple[tuple[str, ...], CommandResult]] = []

    def on(
        self,
        *prefix: str,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Answer calls starting with ``prefix``. Later scripts win."""
        result = CommandResult(
            command=" ".join(prefix),
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            status="ok" if exit_code == 0 else "error",
        )
        self._scripted.append((prefix, result))

    def run(
        self,
        args: Sequence[str],
        cwd: str | None = None,
        timeout: float | None = 120.0,
    ) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        self.cwds.append(cwd)

        for prefix, result in reversed(self._scripted):
            if tuple(args[: len(prefix)]) == prefix:
                return CommandResult(
                    command=" ".join(args),
                    exit_code=result.exit_code,
                    stdout=result.stdout,
                    stderr=result.stderr,
                    status=result.status,
                )
        return self._default(args)

    def _default(self, args: list[str]) -> CommandResult:
        command = " ".join(args)
        if args[:3] == ["git", "rev-parse", "--show-toplevel"]:
            return CommandResult(command, 0, stdout=f"{self.repo_root}\n")
        if args[:3] == ["git", "symbolic-ref", "--short"]:
            return CommandResult(command, 0, stdout=f"{self.branch}\n")
        if args[:3] == ["git", "rev-parse", "--verify"]:
            return CommandResult(command, 0 if args[-1] in self.branches else 1)
        if args[:3] == ["git", "worktree", "add"]:
            if args[3] == "-b":
                branch, path = args[4], args[5]
            else:
                path, branch = args[3], args[4]
            Path(path).mkdir(parents=True)
            self.branches.add(branch)
            return CommandResult(command, 0, stdout=f"Preparing worktree ({branch})\n")
        if args[:3] == ["git", "worktree", "remove"]:
            shutil.rmtree(args[3], ignore_errors=True)
            return CommandResult(command, 0)
        return CommandResult(command, 0)

    def commands(self, *prefix: str) -> list[list[str]]:
        """Recorded calls starting with ``prefix``."""
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]
