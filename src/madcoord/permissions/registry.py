"""Per-session capability registry.

The registry is an ordinary object owned by the coordinator and handed to
the ActionInterceptor. It is never a module-level global, so two
coordinators (or two tests) never share sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from madcoord.logging import get_logger
from madcoord.permissions.glob import match_any, normalize
from madcoord.permissions.schema import (
    Allow,
    CapabilityRecord,
    Decision,
    Deny,
    FileAction,
    RegistrationError,
    Role,
)

if TYPE_CHECKING:
    from madcoord.config.schema import PermissionsConfig
    from madcoord.workspace.schema import Workspace

_log = get_logger("permissions.registry")


@dataclass
class PermissionRegistry:
    """Maps session ids to capability records and decides file mutations.

    Attributes:
        strict_mode: When False (default) a session with no record is
            treated as unrestricted, so callers that never register keep
            working. When True such sessions are denied.
        exclusive_workspaces: Refuse to bind a workspace to a second session.
    """

    strict_mode: bool = False
    exclusive_workspaces: bool = True
    _records: dict[str, CapabilityRecord] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: PermissionsConfig | None) -> PermissionRegistry:
        if config is None:
            return cls()
        return cls(
            strict_mode=config.strict_mode,
            exclusive_workspaces=config.exclusive_workspaces,
        )

    def register(
        self,
        session_id: str,
        role: Role | str,
        bound_workspace: Workspace | None = None,
        allowed_paths: list[str] | None = None,
        denied_paths: list[str] | None = None,
        can_mutate: bool | None = None,
    ) -> CapabilityRecord:
        """Create (or replace) the capability record for a session.

        Args:
            session_id: Agent session identifier.
            role: Agent role; decides mutability unless can_mutate is given.
            bound_workspace: Workspace that roots the session's shell commands.
            allowed_paths: Owned glob patterns. None means unrestricted,
                an empty list means no paths at all.
            denied_paths: Patterns refused even if also allowed.
            can_mutate: Explicit override of the role default.

        Raises:
            RegistrationError: Empty session id, or the workspace is already
                bound to another session while exclusive_workspaces is set.
        """
        if not session_id or not session_id.strip():
            raise RegistrationError(session_id=session_id, message="session id cannot be empty")

        parsed_role = Role.parse(role)

        if bound_workspace is not None and self.exclusive_workspaces:
            for other in self.sessions_for(bound_workspace.name):
                if other.session_id != session_id:
                    raise RegistrationError(
                        session_id=session_id,
                        message=(
                            f"workspace '{bound_workspace.name}' is already bound "
                            f"to session '{other.session_id}'"
                        ),
                    )

        record = CapabilityRecord(
            session_id=session_id,
            role=parsed_role,
            can_mutate=parsed_role.can_mutate if can_mutate is None else can_mutate,
            allowed_paths=list(allowed_paths) if allowed_paths is not None else None,
            denied_paths=list(denied_paths or []),
            bound_workspace=bound_workspace,
        )
        if session_id in self._records:
            _log.debug("Replacing capability record for %s", session_id)
        self._records[session_id] = record
        _log.info(
            "Registered session %s as %s (mutate=%s, workspace=%s)",
            session_id,
            parsed_role.value,
            record.can_mutate,
            bound_workspace.name if bound_workspace else None,
        )
        return record

    def unregister(self, session_id: str) -> CapabilityRecord | None:
        """Drop a session's record. Returns the removed record, if any."""
        record = self._records.pop(session_id, None)
        if record is not None:
            _log.info("Unregistered session %s", session_id)
        return record

    def get(self, session_id: str) -> CapabilityRecord | None:
        return self._records.get(session_id)

    def sessions_for(self, workspace_name: str) -> list[CapabilityRecord]:
        """Records bound to the named workspace."""
        return [
            r
            for r in self._records.values()
            if r.bound_workspace is not None and r.bound_workspace.name == workspace_name
        ]

    def list_records(self) -> list[CapabilityRecord]:
        return list(self._records.values())

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def check_file_action(self, session_id: str, action: FileAction) -> Decision:
        """Decide a file mutation for a session.

        Order: unknown session (fail open unless strict), read-only role,
        denied_paths (deny wins), allowed_paths ownership, then allow.
        """
        record = self._records.get(session_id)
        if record is None:
            if self.strict_mode:
                return Deny("session not registered", session_id)
            return Allow(action)

        if not record.can_mutate:
            return Deny("role is read-only", f"{record.role.value} cannot {action.kind} {action.path}")

        target = self.scoped_path(record, action.path)

        denied_by = match_any(target, record.denied_paths)
        if denied_by is not None:
            return Deny("path explicitly denied", f"{action.path} matches {denied_by}")

        if record.allowed_paths is not None and match_any(target, record.allowed_paths) is None:
            owned = ", ".join(record.allowed_paths) or "no paths"
            return Deny("path outside ownership", f"{action.path} (allowed: {owned})")

        return Allow(action)

    @staticmethod
    def scoped_path(record: CapabilityRecord, path: str) -> str:
        """Path as matched against the record's patterns.

        Absolute paths inside the bound workspace become workspace-relative,
        so ``/backend/**`` refers to ``<workspace>/backend``.
        """
        normalized = normalize(path)
        if record.bound_workspace is None:
            return normalized
        root = normalize(str(record.bound_workspace.root_path))
        if normalized == root:
            return "/"
        if normalized.startswith(root + "/"):
            return normalized[len(root):]
        return normalized
