"""Diagnostic logging for madcoord.

Every module logs to a child of the ``madcoord`` logger obtained with
get_logger(). Two extra levels sit around the standard ones:

    VERBOSE (15)  each external command the coordinator runs
    TRACE (5)     command output, and every allowed permission decision

``--verbose`` / ``logging.verbose`` counts 0-4 map onto error, warning,
info, verbose and trace. Output goes to ``logging.file`` (or MAD_LOG) when
set, otherwise to stderr when it is a terminal. Agent-facing records go
to the JSON-lines event log instead (see madcoord.events).
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from madcoord.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("madcoord")

_LEVEL_MAP = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "VERBOSE": VERBOSE,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)

# Handlers installed by setup_logging(); replaced on the next call
_handlers: list[logging.Handler] = []


class _AreaFormatter(logging.Formatter):
    """``12:00:01 verbose workspace: message``; the area is the logger name
    below ``madcoord``."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(area)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        area = record.name.removeprefix(logger.name).lstrip(".")
        record.area = area or logger.name
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Pick the effective log level; verbose (int) wins over level (str)."""
    if config is None:
        return logging.INFO
    if config.verbose is not None:
        return _VERBOSITY_LEVELS[max(0, min(config.verbose, len(_VERBOSITY_LEVELS) - 1))]
    if config.level:
        return _LEVEL_MAP.get(config.level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(config: LoggingConfig | None = None) -> int:
    """Configure the ``madcoord`` logger and return the level in effect.

    Handlers from a previous call are removed first, so a CLI invocation
    with a different verbosity in the same process takes effect.
    """
    level = resolve_level(config)
    logger.setLevel(level)

    for handler in _handlers:
        logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    log_path = config.file if config and config.file else os.environ.get("MAD_LOG")
    if log_path:
        try:
            _install(logging.FileHandler(os.path.expanduser(log_path), mode="a", encoding="utf-8"), level)
        except OSError as e:
            if sys.stderr.isatty():
                print(f"[madcoord] Failed to open log file: {e}", file=sys.stderr)
                _install(logging.StreamHandler(sys.stderr), level)
    elif sys.stderr.isatty():
        _install(logging.StreamHandler(sys.stderr), level)
    return level


def _install(handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(_AreaFormatter())
    logger.addHandler(handler)
    _handlers.append(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger for one area of madcoord, e.g. ``get_logger("workspace")``.

    Returns the ``madcoord`` logger itself when ``name`` is empty.
    """
    if name:
        return logger.getChild(name)
    return logger
