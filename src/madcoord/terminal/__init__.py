"""External command execution.

Every collaborator madcoord drives (git, package managers, test runners)
goes through a CommandRunner and comes back as a CommandResult.
"""

from madcoord.terminal.protocol import CommandRunner
from madcoord.terminal.result import CommandResult
from madcoord.terminal.subprocess_runner import SubprocessCommandRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "SubprocessCommandRunner",
]
