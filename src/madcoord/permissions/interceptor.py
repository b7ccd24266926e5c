"""The single checkpoint every agent action passes through.

The agent execution engine calls authorize() (or intercept_tool() with a
raw tool call) before running an action and only runs what comes back as
Allow, using the action carried by the Allow since shell commands may have
been rewritten.
"""

from __future__ import annotations

import shlex
from typing import TYPE_CHECKING, Any

from madcoord.logging import TRACE, get_logger
from madcoord.permissions.registry import PermissionRegistry
from madcoord.permissions.schema import (
    Action,
    Allow,
    Decision,
    Deny,
    FileAction,
    PermissionDenied,
    ReadAction,
    ShellAction,
)
from madcoord.permissions.shell import ShellDenylist

if TYPE_CHECKING:
    from madcoord.events import EventLog

_log = get_logger("permissions.interceptor")

# Tool names used by agent engines, mapped to action kinds
_FILE_TOOLS = {"write": "create", "create": "create", "edit": "modify", "modify": "modify", "patch": "patch", "multiedit": "modify"}
_SHELL_TOOLS = {"bash", "shell", "exec"}
_READ_TOOLS = {"read", "view", "glob", "grep", "list", "ls"}


def action_from_tool(tool: str, args: dict[str, Any]) -> Action | None:
    """Translate a raw tool call into an Action.

    Returns:
        The Action, or None if the tool is not one the interceptor knows.
    """
    name = tool.lower()
    if name in _FILE_TOOLS:
        path = args.get("filePath") or args.get("file_path") or args.get("path") or ""
        return FileAction(path=str(path), kind=_FILE_TOOLS[name])  # type: ignore[arg-type]
    if name in _SHELL_TOOLS:
        return ShellAction(command=str(args.get("command", "")))
    if name in _READ_TOOLS:
        return ReadAction(path=str(args.get("filePath") or args.get("path") or ""))
    return None


class ActionInterceptor:
    """Authorizes, rejects or rewrites agent actions.

    Denials are returned as Deny values carrying the specific path, pattern
    or command rule; nothing raises out of authorize().
    """

    def __init__(
        self,
        registry: PermissionRegistry,
        denylist: ShellDenylist | None = None,
        events: EventLog | None = None,
    ) -> None:
        self.registry = registry
        self.denylist = denylist or ShellDenylist()
        self._events = events

    def authorize(self, session_id: str, action: Action) -> Decision:
        """Decide whether ``session_id`` may perform ``action``."""
        if isinstance(action, ReadAction):
            decision: Decision = Allow(action)
        elif isinstance(action, FileAction):
            decision = self.registry.check_file_action(session_id, action)
        elif isinstance(action, ShellAction):
            decision = self._check_shell(session_id, action)
        else:
            decision = Deny("unsupported action", type(action).__name__)

        if isinstance(decision, Deny):
            _log.info("Denied %s for %s: %s", type(action).__name__, session_id, decision)
            if self._events is not None:
                self._events.warn(
                    "Action denied",
                    session=session_id,
                    action=type(action).__name__,
                    reason=decision.reason,
                    detail=decision.detail,
                )
        else:
            _log.log(TRACE, "Allowed %s for %s: %s", type(action).__name__, session_id, decision.action)
        return decision

    def intercept_tool(self, session_id: str, tool: str, args: dict[str, Any]) -> Decision | None:
        """Authorize a raw tool call.

        Returns:
            The decision, or None for tools the interceptor does not govern.
        """
        action = action_from_tool(tool, args)
        if action is None:
            return None
        return self.authorize(session_id, action)

    def _check_shell(self, session_id: str, action: ShellAction) -> Decision:
        record = self.registry.get(session_id)
        if record is None:
            if self.registry.strict_mode:
                return Deny("session not registered", session_id)
            return Allow(action)

        if not record.can_mutate:
            found = self.denylist.check(action.command)
            if found is not None:
                return Deny("mutating command", f"{found} in read-only session ({record.role.value})")

        if record.bound_workspace is not None:
            return Allow(ShellAction(command=root_command(str(record.bound_workspace.root_path), action.command)))
        return Allow(action)


def root_command(root: str, command: str) -> str:
    """Prefix ``command`` with a cd into ``root``. Already-rooted commands are unchanged."""
    prefix = f"cd {shlex.quote(root)} && "
    if command.startswith(prefix):
        return command
    return prefix + command


def make_guarded_open(interceptor: ActionInterceptor, session_id: str) -> Any:
    """Create a permission-checked wrapper around the built-in open().

    Opening for write, append, create or update is authorized as a
    FileAction first; reads pass straight through.
    """
    import builtins

    original_open = builtins.open

    def guarded_open(file: Any, mode: str = "r", *args: Any, **kwargs: Any) -> Any:
        """Permission-checked open() wrapper.

        Raises:
            PermissionDenied: If the session may not write the file.
        """
        if any(c in mode for c in "wax+") and not isinstance(file, int):
            path = file.decode() if isinstance(file, bytes) else str(file)
            kind = "create" if "x" in mode else "modify"
            decision = interceptor.authorize(session_id, FileAction(path=path, kind=kind))
            if isinstance(decision, Deny):
                raise PermissionDenied(session_id=session_id, target=path, reason=str(decision))
        return original_open(file, mode, *args, **kwargs)

    return guarded_open
