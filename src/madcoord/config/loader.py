"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Environment variable overrides
- Config caching
- Conversion from dict to typed Config dataclass
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from madcoord.config.merge import merge_configs
from madcoord.config.paths import get_config_paths
from madcoord.config.schema import (
    ChecksConfig,
    Config,
    EventLogConfig,
    LoggingConfig,
    PermissionsConfig,
    ShellDenyConfig,
    WorkspaceConfig,
)
from madcoord.logging import get_logger

_log = get_logger("config")

_cached_config: Config | None = None

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict if missing or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def env_overrides() -> dict[str, Any]:
    """Build a config dict from environment variables (highest priority)."""
    overrides: dict[str, Any] = {}

    log_path = os.environ.get("MAD_LOG")
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    strict = os.environ.get("MAD_STRICT")
    if strict is not None:
        overrides.setdefault("permissions", {})["strict_mode"] = (
            strict.strip().lower() in _TRUE_STRINGS
        )

    return overrides


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass."""
    log_data = data.get("logging", {}) or {}
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
    )

    perm_data = data.get("permissions", {}) or {}
    denylist = [
        ShellDenyConfig(
            pattern=p["pattern"],
            label=p.get("label", "custom rule"),
        )
        for p in perm_data.get("shell_denylist", [])
        if isinstance(p, dict) and p.get("pattern")
    ]
    permissions = PermissionsConfig(
        strict_mode=bool(perm_data.get("strict_mode", False)),
        exclusive_workspaces=bool(perm_data.get("exclusive_workspaces", True)),
        shell_denylist=denylist,
    )

    ws_data = data.get("workspace", {}) or {}
    workspace = WorkspaceConfig(
        directory=ws_data.get("directory", "worktrees"),
        manage_gitignore=bool(ws_data.get("manage_gitignore", True)),
    )

    checks_data = data.get("checks", {}) or {}
    checks = ChecksConfig(
        timeout=float(checks_data.get("timeout", 600.0)),
        output_limit=int(checks_data.get("output_limit", 4000)),
    )

    events_data = data.get("events", {}) or {}
    events = EventLogConfig(
        enabled=bool(events_data.get("enabled", True)),
        file=events_data.get("file", ".mad-logs.jsonl"),
    )

    known_keys = {"logging", "permissions", "workspace", "checks", "events"}
    extra = {k: v for k, v in data.items() if k not in known_keys}

    return Config(
        logging=logging_config,
        permissions=permissions,
        workspace=workspace,
        checks=checks,
        events=events,
        extra=extra,
    )


def load_config(repo_root: str | Path | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Project config ($repo_root/.mad/config.yaml)
    3. User config
    4. System config

    Args:
        repo_root: Repository root for project-level config.
        reload: Force reload even if cached.
    """
    global _cached_config

    if _cached_config is not None and not reload and repo_root is None:
        return _cached_config

    layers: list[dict[str, Any]] = []
    for path in get_config_paths(repo_root):
        data = load_yaml_file(path)
        if data:
            _log.debug("Loaded config from %s", path)
            layers.append(data)

    env_config = env_overrides()
    if env_config:
        layers.append(env_config)

    config = dict_to_config(merge_configs(*layers))

    # Only the global (repo-independent) config is cached
    if repo_root is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Drop the cached config. Used by tests."""
    global _cached_config
    _cached_config = None
