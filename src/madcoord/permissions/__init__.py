"""Agent permission model.

Capability records per session, path-glob ownership, a shell-command
mutation tripwire, and the interceptor that applies them to every action.
"""

from madcoord.permissions.glob import match_any, matches, normalize
from madcoord.permissions.interceptor import (
    ActionInterceptor,
    action_from_tool,
    make_guarded_open,
    root_command,
)
from madcoord.permissions.registry import PermissionRegistry
from madcoord.permissions.schema import (
    Action,
    Allow,
    CapabilityRecord,
    Decision,
    Deny,
    FileAction,
    PermissionDenied,
    ReadAction,
    RegistrationError,
    Role,
    ShellAction,
)
from madcoord.permissions.shell import ShellDenylist, ShellDenyRule

__all__ = [
    "Action",
    "ActionInterceptor",
    "Allow",
    "CapabilityRecord",
    "Decision",
    "Deny",
    "FileAction",
    "PermissionDenied",
    "PermissionRegistry",
    "ReadAction",
    "RegistrationError",
    "Role",
    "ShellAction",
    "ShellDenyRule",
    "ShellDenylist",
    "action_from_tool",
    "make_guarded_open",
    "match_any",
    "matches",
    "normalize",
    "root_command",
]
