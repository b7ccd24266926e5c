"""Ecosystem checks for a workspace: lint, build and test.

Checks are detected from the files in the workspace root and run through
the CommandRunner. Their exit codes are the only signal used. When any
check fails, the workspace is marked errored (which also clears done).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from madcoord.config.schema import ChecksConfig
from madcoord.logging import get_logger

if TYPE_CHECKING:
    from madcoord.events import EventLog
    from madcoord.terminal.protocol import CommandRunner
    from madcoord.workspace.manager import WorkspaceManager

_log = get_logger("workspace.checks")


@dataclass
class Check:
    """A labelled command to run in the workspace root."""

    label: str
    args: list[str]


@dataclass
class CheckResult:
    label: str
    command: str
    success: bool
    output: str


@dataclass
class CheckReport:
    """Results of every check run against one workspace."""

    name: str
    results: list[CheckResult] = field(default_factory=list)

    @property
    def ran_any(self) -> bool:
        return bool(self.results)

    @property
    def passed(self) -> bool:
        """True when no check failed (vacuously true if none ran)."""
        return all(r.success for r in self.results)

    @property
    def failures(self) -> list[CheckResult]:
        return [r for r in self.results if not r.success]

    def error_details(self) -> str:
        """Text written to the errored sentinel."""
        return "\n\n".join(f"{r.label} FAILED:\n{r.output}" for r in self.failures)


def _npm_scripts(root: Path) -> dict[str, str]:
    try:
        data = json.loads((root / "package.json").read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        _log.warning("Cannot read package.json in %s: %s", root, e)
        return {}
    scripts = data.get("scripts") if isinstance(data, dict) else None
    return scripts if isinstance(scripts, dict) else {}


def detect_checks(root: Path) -> list[Check]:
    """Checks that apply to the project in ``root``, in run order."""
    checks: list[Check] = []

    if (root / "package.json").is_file():
        scripts = _npm_scripts(root)
        if "lint" in scripts:
            checks.append(Check("Lint", ["npm", "run", "lint"]))
        if "build" in scripts:
            checks.append(Check("Build", ["npm", "run", "build"]))
        if "test" in scripts:
            checks.append(Check("Test", ["npm", "test"]))

    if (root / "go.mod").is_file():
        checks.append(Check("Go Build", ["go", "build", "./..."]))
        checks.append(Check("Go Test", ["go", "test", "./..."]))

    if (root / "Cargo.toml").is_file():
        checks.append(Check("Cargo Check", ["cargo", "check"]))
        checks.append(Check("Cargo Test", ["cargo", "test"]))

    if (root / "pyproject.toml").is_file() or (root / "requirements.txt").is_file():
        checks.append(Check("Pytest", ["pytest"]))

    return checks


class WorkspaceChecker:
    """Runs detected checks and records failures as the errored sentinel."""

    def __init__(
        self,
        runner: CommandRunner,
        workspaces: WorkspaceManager,
        config: ChecksConfig | None = None,
        events: EventLog | None = None,
    ) -> None:
        self._runner = runner
        self._workspaces = workspaces
        self._config = config or ChecksConfig()
        self._events = events

    def run(self, name: str) -> CheckReport:
        """Run every applicable check for a workspace.

        Raises:
            WorkspaceNotFound: If the workspace does not exist.
        """
        workspace = self._workspaces.get(name)
        report = CheckReport(name=name)
        limit = self._config.output_limit

        for check in detect_checks(workspace.root_path):
            result = self._runner.run(
                check.args,
                cwd=str(workspace.root_path),
                timeout=self._config.timeout,
            )
            output = result.output or ("" if result.success else result.error)
            if len(output) > limit:
                output = output[:limit] + "\n... (output truncated)"
            report.results.append(
                CheckResult(
                    label=check.label,
                    command=result.command,
                    success=result.success,
                    output=output,
                )
            )

        if not report.passed:
            self._workspaces.mark_errored(name, report.error_details())
        elif self._events is not None:
            self._events.info("Checks passed", worktree=name, checks=len(report.results))
        return report
