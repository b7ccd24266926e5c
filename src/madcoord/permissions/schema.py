"""Data types for agent permissions: roles, capability records, actions, decisions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Literal, Union

if TYPE_CHECKING:
    from madcoord.workspace.schema import Workspace


class Role(Enum):
    """Agent roles. The role decides whether a session may mutate files."""

    COORDINATOR = "coordinator"
    ANALYST = "analyst"
    PLANNER = "planner"
    IMPLEMENTER = "implementer"
    TESTER = "tester"
    REVIEWER = "reviewer"
    SECURITY_AUDITOR = "security-auditor"
    FIXER = "fixer"
    CONFLICT_RESOLVER = "conflict-resolver"

    @property
    def can_mutate(self) -> bool:
        """Default mutability for the role."""
        return self in MUTATING_ROLES

    @classmethod
    def parse(cls, value: str | Role) -> Role:
        """Accept an enum member or its value ("security-auditor", "fixer", ...)."""
        if isinstance(value, Role):
            return value
        normalized = value.strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(r.value for r in cls)
            raise ValueError(f"Unknown role '{value}' (expected one of: {valid})") from None


# The coordinator delegates all code edits, so it is read-only like the reviewers
MUTATING_ROLES = frozenset({
    Role.IMPLEMENTER,
    Role.FIXER,
    Role.CONFLICT_RESOLVER,
})


@dataclass
class CapabilityRecord:
    """Authorization profile of one agent session.

    Attributes:
        session_id: Session the record belongs to.
        role: Agent role.
        can_mutate: Whether file-mutating actions are permitted at all.
        allowed_paths: Glob patterns the session owns. None means
            unrestricted; an empty list means no paths.
        denied_paths: Glob patterns that are always refused.
        bound_workspace: Workspace that roots the session's shell actions.
    """

    session_id: str
    role: Role
    can_mutate: bool
    allowed_paths: list[str] | None = None
    denied_paths: list[str] = field(default_factory=list)
    bound_workspace: Workspace | None = None

    @property
    def unrestricted(self) -> bool:
        return self.allowed_paths is None

    def to_dict(self) -> dict[str, object]:
        return {
            "session_id": self.session_id,
            "role": self.role.value,
            "can_mutate": self.can_mutate,
            "allowed_paths": self.allowed_paths,
            "denied_paths": self.denied_paths,
            "bound_workspace": self.bound_workspace.name if self.bound_workspace else None,
        }


# =============================================================================
# Actions
# =============================================================================


@dataclass(frozen=True)
class FileAction:
    """A file mutation: create, modify or patch ``path``."""

    path: str
    kind: Literal["create", "modify", "patch"] = "modify"


@dataclass(frozen=True)
class ShellAction:
    """A shell command issued by an agent."""

    command: str


@dataclass(frozen=True)
class ReadAction:
    """A read-only file access. Always permitted."""

    path: str


Action = Union[FileAction, ShellAction, ReadAction]


# =============================================================================
# Decisions
# =============================================================================


@dataclass(frozen=True)
class Allow:
    """Action permitted. ``action`` may be a rewritten copy of the request."""

    action: Action

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Deny:
    """Action refused.

    Attributes:
        reason: Short category ("role is read-only", "path explicitly denied",
            "path outside ownership", "mutating command", "session not registered").
        detail: The specific path, pattern or command rule that caused it.
    """

    reason: str
    detail: str = ""

    @property
    def allowed(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.reason}: {self.detail}" if self.detail else self.reason


Decision = Union[Allow, Deny]


@dataclass
class PermissionDenied(Exception):
    """Raised at a tool boundary when an intercepted action is denied.

    The interceptor itself returns Deny values; wrappers such as
    make_guarded_open turn them into this exception for code that expects
    open() semantics.
    """

    session_id: str
    target: str
    reason: str

    def __str__(self) -> str:
        return f"Access denied for session '{self.session_id}' on '{self.target}': {self.reason}"


@dataclass
class RegistrationError(Exception):
    """Raised when a capability record cannot be registered."""

    session_id: str
    message: str

    def __str__(self) -> str:
        return f"Cannot register session '{self.session_id}': {self.message}"
