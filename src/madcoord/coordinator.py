"""Coordinator: one object wiring the registry, interceptor and workspace services.

The orchestrating process builds a Coordinator for a repository, registers
each agent session it spawns, routes every agent action through
authorize(), and polls status() to decide what to merge next.

Example:
    coord = Coordinator.open(".")
    result = coord.create("feat/api", "Implement the REST endpoints")
    coord.register("agent-1", "implementer", workspace=result.name,
                   allowed_paths=["/backend/**"])
    decision = coord.authorize("agent-1", FileAction("backend/app.py"))
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from madcoord.config import Config, load_config
from madcoord.events import EventLog
from madcoord.logging import get_logger
from madcoord.permissions import (
    Action,
    ActionInterceptor,
    CapabilityRecord,
    Decision,
    PermissionRegistry,
    Role,
    ShellDenylist,
)
from madcoord.terminal import CommandRunner, SubprocessCommandRunner
from madcoord.vcs import GitClient
from madcoord.workspace import (
    CheckReport,
    MergeCoordinator,
    MergeResult,
    StatusAggregator,
    StatusSummary,
    Workspace,
    WorkspaceChecker,
    WorkspaceManager,
    WorkspaceResult,
)

_log = get_logger("coordinator")


class Coordinator:
    """Facade over the permission layer and the workspace services."""

    def __init__(
        self,
        git: GitClient,
        runner: CommandRunner,
        config: Config | None = None,
    ) -> None:
        self.config = config or Config()
        self.runner = runner
        self.git = git

        events_path = git.repo_root / self.config.events.file
        self.events = EventLog(events_path, enabled=self.config.events.enabled)

        self.registry = PermissionRegistry.from_config(self.config.permissions)
        self.interceptor = ActionInterceptor(
            self.registry,
            ShellDenylist.from_config(self.config.permissions),
            self.events,
        )

        self.workspaces = WorkspaceManager(git, self.config.workspace, self.events)
        self.aggregator = StatusAggregator(self.workspaces, git)
        self.merger = MergeCoordinator(git, self.workspaces, self.events)
        self.checker = WorkspaceChecker(runner, self.workspaces, self.config.checks, self.events)

    @classmethod
    def open(
        cls,
        cwd: str | Path = ".",
        runner: CommandRunner | None = None,
        config: Config | None = None,
    ) -> Coordinator:
        """Build a Coordinator for the repository containing ``cwd``.

        Project config is read from the repository root unless ``config``
        is given.

        Raises:
            NotAGitRepository: If ``cwd`` is not inside a git work tree.
        """
        runner = runner or SubprocessCommandRunner(default_cwd=str(cwd))
        git = GitClient.discover(runner, cwd)
        if config is None:
            config = load_config(repo_root=git.repo_root)
        _log.debug("Coordinator opened at %s", git.repo_root)
        return cls(git, runner, config)

    @property
    def repo_root(self) -> Path:
        return self.git.repo_root

    # -------------------------------------------------------------------------
    # Sessions and authorization
    # -------------------------------------------------------------------------

    def register(
        self,
        session_id: str,
        role: Role | str,
        workspace: Workspace | str | None = None,
        allowed_paths: list[str] | None = None,
        denied_paths: list[str] | None = None,
        can_mutate: bool | None = None,
    ) -> CapabilityRecord:
        """Register an agent session, optionally bound to a workspace by name.

        Raises:
            WorkspaceNotFound: If ``workspace`` names no existing workspace.
            RegistrationError: Empty session id or an exclusive binding conflict.
            ValueError: Unknown role.
        """
        bound = self.workspaces.get(workspace) if isinstance(workspace, str) else workspace
        record = self.registry.register(
            session_id,
            role,
            bound_workspace=bound,
            allowed_paths=allowed_paths,
            denied_paths=denied_paths,
            can_mutate=can_mutate,
        )
        self.events.info(
            "Session registered",
            session=session_id,
            role=record.role.value,
            worktree=bound.name if bound else None,
        )
        return record

    def unregister(self, session_id: str) -> CapabilityRecord | None:
        record = self.registry.unregister(session_id)
        if record is not None:
            self.events.info("Session unregistered", session=session_id)
        return record

    def authorize(self, session_id: str, action: Action) -> Decision:
        return self.interceptor.authorize(session_id, action)

    def intercept_tool(self, session_id: str, tool: str, args: dict[str, Any]) -> Decision | None:
        return self.interceptor.intercept_tool(session_id, tool, args)

    # -------------------------------------------------------------------------
    # Workspaces
    # -------------------------------------------------------------------------

    def create(self, branch: str, task: str) -> WorkspaceResult:
        return self.workspaces.create(branch, task)

    def mark_done(self, name: str, summary: str) -> Workspace:
        return self.workspaces.mark_done(name, summary)

    def mark_blocked(self, name: str, reason: str) -> Workspace:
        return self.workspaces.mark_blocked(name, reason)

    def mark_errored(self, name: str, details: str) -> Workspace:
        return self.workspaces.mark_errored(name, details)

    def read_task(self, name: str) -> str:
        return self.workspaces.read_task(name)

    def test(self, name: str) -> CheckReport:
        return self.checker.run(name)

    def merge(self, name: str) -> MergeResult:
        return self.merger.merge(name)

    def remove(self, name: str, force: bool = False) -> WorkspaceResult:
        """Remove a workspace and drop every session bound to it."""
        result = self.workspaces.remove(name, force=force)
        if result.success:
            for record in self.registry.sessions_for(name):
                self.unregister(record.session_id)
        return result

    def status(self, include_commits: bool = True) -> StatusSummary:
        return self.aggregator.summarize(include_commits=include_commits)

    def log(self, level: str, message: str, context: dict[str, Any] | None = None) -> bool:
        """Append an arbitrary record to the event log."""
        return self.events.log(level, message, context)  # type: ignore[arg-type]
