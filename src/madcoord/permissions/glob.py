"""Minimal path glob matching.

Only two wildcards exist:
- ``*`` matches any run of characters within one path segment
- ``**`` matches any run of characters across segments, including none

Everything else (``?``, ``[...]``, ``{a,b}``) is literal. Paths and patterns
are normalized the same way before matching, and matching is anchored to
the whole path.
"""

from __future__ import annotations

import posixpath
import re
from functools import lru_cache


def normalize(path: str) -> str:
    """Canonical root-anchored form of a path or pattern.

    Backslashes become ``/``, ``.`` and ``..`` segments are resolved
    lexically, and a single leading ``/`` is added, so ``backend/x.js``,
    ``./backend/x.js`` and ``/backend/x.js`` all compare equal.

    Examples:
        normalize("a\\\\b/./c") -> "/a/b/c"
        normalize("/a/b/../c/") -> "/a/c"
    """
    path = path.replace("\\", "/").strip()
    if not path:
        return "/"
    normalized = posixpath.normpath("/" + path.lstrip("/"))
    # normpath keeps a leading "//" on POSIX
    return "/" + normalized.lstrip("/")


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate a normalized glob into an anchored regex."""
    pattern = normalize(pattern)
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**", i):
            i += 2
            while i < n and pattern[i] == "*":
                i += 1
            at_segment_start = not out or out[-1].endswith("/")
            if i < n and pattern[i] == "/" and at_segment_start:
                # "**/" may match zero segments
                out.append("(?:.*/)?")
                i += 1
            elif i == n and out and out[-1].endswith("/"):
                # trailing "/**" also matches the directory itself
                out[-1] = out[-1][:-1]
                out.append("(?:/.*)?")
            else:
                out.append(".*")
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        else:
            j = i
            while j < n and pattern[j] != "*":
                j += 1
            out.append(re.escape(pattern[i:j]))
            i = j
    return re.compile("".join(out), re.DOTALL)


def matches(path: str, pattern: str) -> bool:
    """True if ``path`` matches ``pattern`` in full.

    Examples:
        matches("a/b/c", "a/**") -> True
        matches("a/b/c", "a/*")  -> False
        matches("a/b", "a/*")    -> True
    """
    return compile_pattern(pattern).fullmatch(normalize(path)) is not None


def match_any(path: str, patterns: list[str] | tuple[str, ...]) -> str | None:
    """Return the first pattern that matches ``path``, or None."""
    for pattern in patterns:
        if matches(path, pattern):
            return pattern
    return None
