"""madcoord: permission and workspace coordination for parallel coding agents."""

__version__ = "0.1.0"

# Public API
from madcoord.config import Config, get_config, load_config
from madcoord.coordinator import Coordinator
from madcoord.events import EventLog
from madcoord.permissions import (
    ActionInterceptor,
    Allow,
    CapabilityRecord,
    Deny,
    FileAction,
    PermissionDenied,
    PermissionRegistry,
    ReadAction,
    RegistrationError,
    Role,
    ShellAction,
    ShellDenylist,
    make_guarded_open,
)
from madcoord.terminal import CommandResult, CommandRunner, SubprocessCommandRunner
from madcoord.vcs import GitClient, NotAGitRepository
from madcoord.workspace import (
    CheckReport,
    MergeCoordinator,
    MergeResult,
    MergeStatus,
    StatusAggregator,
    StatusSummary,
    Workspace,
    WorkspaceChecker,
    WorkspaceManager,
    WorkspaceNotFound,
    WorkspaceResult,
    WorkspaceState,
)

__all__ = [
    # Main entry point
    "Coordinator",
    # Config
    "Config",
    "load_config",
    "get_config",
    # Permissions
    "ActionInterceptor",
    "Allow",
    "CapabilityRecord",
    "Deny",
    "FileAction",
    "PermissionDenied",
    "PermissionRegistry",
    "ReadAction",
    "RegistrationError",
    "Role",
    "ShellAction",
    "ShellDenylist",
    "make_guarded_open",
    # Workspaces
    "CheckReport",
    "MergeCoordinator",
    "MergeResult",
    "MergeStatus",
    "StatusAggregator",
    "StatusSummary",
    "Workspace",
    "WorkspaceChecker",
    "WorkspaceManager",
    "WorkspaceNotFound",
    "WorkspaceResult",
    "WorkspaceState",
    # Collaborators
    "CommandResult",
    "CommandRunner",
    "EventLog",
    "GitClient",
    "NotAGitRepository",
    "SubprocessCommandRunner",
]
