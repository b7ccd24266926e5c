"""Shell command denylist for read-only sessions.

A textual tripwire: the command string is scanned for patterns that
indicate mutation (redirection writes, delete, move, copy, directory
creation, package installation, git commit/push). It does not parse shell
semantics and cannot catch obfuscated mutation such as ``python -c`` or
``eval``. Path-based authorization stays the primary control.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from madcoord.logging import get_logger

if TYPE_CHECKING:
    from madcoord.config.schema import PermissionsConfig

_log = get_logger("permissions.shell")


@dataclass
class ShellDenyRule:
    """A mutation pattern and the label reported when it matches."""

    pattern: re.Pattern[str]
    label: str


def _rule(regex: str, label: str) -> ShellDenyRule:
    return ShellDenyRule(pattern=re.compile(regex, re.IGNORECASE), label=label)


# Command words only count at the start of a command: line start or after
# one of ; & | ( { a newline or a backtick
_CMD = r"(?:^\s*|[;&|(`{\n]\s*|\bsudo\s+)"

DEFAULT_RULES: tuple[ShellDenyRule, ...] = (
    _rule(_CMD + r"(?:rm|rmdir|unlink|shred|del|erase|rd)\b", "delete"),
    _rule(_CMD + r"remove-item\b", "delete"),
    _rule(_CMD + r"(?:mv|move|rename|ren)\b", "move"),
    _rule(_CMD + r"move-item\b", "move"),
    _rule(_CMD + r"(?:cp|copy|xcopy|robocopy|rsync|install)\b", "copy"),
    _rule(_CMD + r"copy-item\b", "copy"),
    _rule(_CMD + r"(?:mkdir|md)\b", "directory creation"),
    _rule(_CMD + r"new-item\b", "directory creation"),
    _rule(_CMD + r"(?:touch|truncate|tee|dd)\b", "file write"),
    _rule(r"\bsed\s+(?:-\w*\s+)*-i", "file write"),
    _rule(r"\b(?:npm|pnpm)\s+(?:install|i|add|ci|uninstall|remove|update)\b", "package installation"),
    _rule(r"\byarn\s+(?:add|install|remove|upgrade)\b", "package installation"),
    _rule(r"\bpip3?\s+(?:install|uninstall)\b", "package installation"),
    _rule(r"\b(?:uv|poetry)\s+(?:add|remove|install|sync|pip\s+install)\b", "package installation"),
    _rule(r"\bcargo\s+(?:install|add|remove)\b", "package installation"),
    _rule(r"\bgo\s+(?:get|install|mod\s+tidy)\b", "package installation"),
    _rule(r"\b(?:apt|apt-get|brew|dnf|yum|apk)\s+(?:install|add|remove)\b", "package installation"),
    _rule(r"\bfind\b[^;&|\n]*\s-(?:delete|exec\s+rm)\b", "delete"),
    _rule(r"\bgit\s+(?:-C\s+\S+\s+|-\S+\s+)*(?:commit|push|merge|rebase|reset|checkout|add|rm|mv|cherry-pick)\b", "git mutation"),
)

# Quoted spans are replaced before scanning so that `grep "a > b"` is not a write
_QUOTED = re.compile(r"'[^']*'|\"(?:[^\"\\]|\\.)*\"")

# A redirect operator followed by its target: >, >>, 1>, 2>>, &>, >|
_REDIRECT = re.compile(r"(?<![<>=\-])(?:&|\d)?>>?\|?\s*(&?[^\s;|&<>()]*)")

_HARMLESS_TARGETS = {"/dev/null", "nul", "$null", "/dev/stdout", "/dev/stderr"}


def redirect_targets(command: str) -> list[str]:
    """Targets of output redirections that write to a file.

    Descriptor duplications (``2>&1``) and null devices are not writes.
    """
    scrubbed = _QUOTED.sub("_", command)
    targets: list[str] = []
    for match in _REDIRECT.finditer(scrubbed):
        target = match.group(1)
        if not target or target.startswith("&"):
            continue
        if target.lower() in _HARMLESS_TARGETS:
            continue
        targets.append(target)
    return targets


@dataclass
class ShellDenylist:
    """Scans shell commands for mutation patterns.

    Extra rules from configuration are appended to DEFAULT_RULES; the
    defaults cannot be removed.
    """

    rules: list[ShellDenyRule] = field(default_factory=lambda: list(DEFAULT_RULES))

    @classmethod
    def from_config(cls, config: PermissionsConfig | None) -> ShellDenylist:
        """Build a denylist with the configured extra rules.

        Invalid regular expressions are skipped with a warning.
        """
        rules = list(DEFAULT_RULES)
        if config is None:
            return cls(rules=rules)

        for extra in config.shell_denylist:
            try:
                rules.append(ShellDenyRule(re.compile(extra.pattern, re.IGNORECASE), extra.label))
            except re.error as e:
                _log.warning("Invalid shell denylist pattern '%s': %s", extra.pattern, e)
        return cls(rules=rules)

    def check(self, command: str) -> str | None:
        """Describe the first mutation found in ``command``, or None.

        Returns:
            e.g. "delete (rm)" or "redirection write to out.txt".
        """
        targets = redirect_targets(command)
        if targets:
            return f"redirection write to {targets[0]}"

        scrubbed = _QUOTED.sub("_", command)
        for rule in self.rules:
            match = rule.pattern.search(scrubbed)
            if match:
                word = match.group(0).strip(" \t\n;&|(`{")
                return f"{rule.label} ({word})"
        return None

    def is_mutating(self, command: str) -> bool:
        return self.check(command) is not None

    def list_rules(self) -> list[dict[str, str]]:
        """List rules for inspection."""
        return [{"pattern": r.pattern.pattern, "label": r.label} for r in self.rules]
