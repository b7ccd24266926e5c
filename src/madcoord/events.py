"""Append-only JSONL event log.

Each record is one line: {"timestamp", "level", "message", "context"}.
Writing is best-effort: a failure to log never reaches the caller.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from filelock import FileLock

from madcoord.logging import get_logger

_log = get_logger("events")

EventLevel = Literal["debug", "info", "warn", "error"]

LEVELS: tuple[str, ...] = ("debug", "info", "warn", "error")

# Mirror records into the process logger as well
_LOGGING_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class EventLog:
    """Writes orchestration events to a shared JSONL file.

    Several coordinator processes may append to the same file, so each
    append holds a short FileLock. If the lock or the write fails the
    event is dropped.
    """

    def __init__(self, path: str | Path, enabled: bool = True) -> None:
        self._path = Path(path)
        self._lock_path = self._path.with_name(self._path.name + ".lock")
        self._enabled = enabled

    @property
    def path(self) -> Path:
        return self._path

    def log(
        self,
        level: EventLevel,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> bool:
        """Append one event.

        Returns:
            True if the record was written.
        """
        _log.log(_LOGGING_LEVELS.get(level, logging.INFO), "%s %s", message, context or "")
        if not self._enabled:
            return False

        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": message,
            "context": context,
        }
        try:
            line = json.dumps(record, default=str) + "\n"
            with FileLock(self._lock_path, timeout=2):
                with open(self._path, "a", encoding="utf-8") as f:
                    f.write(line)
        except (OSError, TypeError, ValueError) as e:
            _log.debug("Failed to write event log %s: %s", self._path, e)
            return False
        return True

    def info(self, message: str, **context: Any) -> bool:
        return self.log("info", message, context or None)

    def warn(self, message: str, **context: Any) -> bool:
        return self.log("warn", message, context or None)

    def error(self, message: str, **context: Any) -> bool:
        return self.log("error", message, context or None)

    def read(self) -> list[dict[str, Any]]:
        """All parseable records, oldest first. Malformed lines are skipped."""
        if not self._path.exists():
            return []
        records: list[dict[str, Any]] = []
        with open(self._path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError:
                    _log.debug("Skipping malformed event line: %.80s", line)
        return records
