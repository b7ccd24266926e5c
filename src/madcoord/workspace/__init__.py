"""Isolated workspaces (git worktrees) and their sentinel-file state machine."""

from madcoord.workspace import sentinels
from madcoord.workspace.checks import (
    Check,
    CheckReport,
    CheckResult,
    WorkspaceChecker,
    detect_checks,
)
from madcoord.workspace.manager import WorkspaceManager, name_for
from madcoord.workspace.merge import MergeCoordinator, MergeResult, MergeStatus
from madcoord.workspace.schema import (
    Workspace,
    WorkspaceNotFound,
    WorkspaceResult,
    WorkspaceState,
)
from madcoord.workspace.status import StatusAggregator, StatusRow, StatusSummary

__all__ = [
    "Check",
    "CheckReport",
    "CheckResult",
    "MergeCoordinator",
    "MergeResult",
    "MergeStatus",
    "StatusAggregator",
    "StatusRow",
    "StatusSummary",
    "Workspace",
    "WorkspaceChecker",
    "WorkspaceManager",
    "WorkspaceNotFound",
    "WorkspaceResult",
    "WorkspaceState",
    "detect_checks",
    "name_for",
    "sentinels",
]
