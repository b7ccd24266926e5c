"""Platform-aware configuration path resolution.

Config file locations:
- Windows: %PROGRAMDATA%\\madcoord (system), %APPDATA%\\madcoord (user)
- Unix: /etc/madcoord (system), $XDG_CONFIG_HOME or ~/.config/madcoord (user)
- Project: $repo_root/.mad/
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.yaml"
APP_NAME = "madcoord"
PROJECT_DIR = ".mad"


def get_system_config_path() -> Path | None:
    """System-level config path (may not exist)."""
    if sys.platform == "win32":
        program_data = os.environ.get("PROGRAMDATA")
        if program_data:
            return Path(program_data) / APP_NAME / CONFIG_FILENAME
        return None
    return Path("/etc") / APP_NAME / CONFIG_FILENAME


def get_user_config_path() -> Path | None:
    """User-level config path (may not exist)."""
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME / CONFIG_FILENAME
        return None

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME / CONFIG_FILENAME
    return Path.home() / ".config" / APP_NAME / CONFIG_FILENAME


def get_project_config_path(repo_root: str | Path) -> Path:
    """Project-level config path inside the repository."""
    return Path(repo_root) / PROJECT_DIR / CONFIG_FILENAME


def get_config_paths(repo_root: str | Path | None = None) -> list[Path]:
    """All config paths, lowest priority first.

    Args:
        repo_root: Optional repository root for the project-level config.

    Returns:
        Paths in merge order: system, user, project.
    """
    paths: list[Path] = []

    system_path = get_system_config_path()
    if system_path:
        paths.append(system_path)

    user_path = get_user_config_path()
    if user_path:
        paths.append(user_path)

    if repo_root:
        paths.append(get_project_config_path(repo_root))

    return paths
