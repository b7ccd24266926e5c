"""Configuration management for madcoord.

Hierarchical YAML configuration with:
- System-level config (/etc/madcoord/ or %PROGRAMDATA%)
- User-level config (~/.config/madcoord/ or %APPDATA%)
- Project-level config ($repo_root/.mad/)
- Environment variable overrides (highest priority)

Example usage:
    from madcoord.config import load_config

    config = load_config(repo_root="/path/to/repo")
    print(config.permissions.strict_mode)
"""

from madcoord.config.loader import (
    get_config,
    load_config,
    reset_config,
)
from madcoord.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from madcoord.config.schema import (
    ChecksConfig,
    Config,
    EventLogConfig,
    LoggingConfig,
    PermissionsConfig,
    ShellDenyConfig,
    WorkspaceConfig,
)

__all__ = [
    # Main API
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    # Schema types
    "ChecksConfig",
    "EventLogConfig",
    "LoggingConfig",
    "PermissionsConfig",
    "ShellDenyConfig",
    "WorkspaceConfig",
    # Path utilities
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
