"""Tests for the configuration module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from madcoord.config import (
    Config,
    get_config,
    load_config,
    reset_config,
)
from madcoord.config.loader import dict_to_config, env_overrides
from madcoord.config.merge import deep_merge, merge_configs
from madcoord.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)


class TestDeepMerge:
    """Test the deep merge algorithm."""

    def test_simple_override(self) -> None:
        result = deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        base = {"checks": {"timeout": 600, "output_limit": 4000}}
        result = deep_merge(base, {"checks": {"timeout": 60}})
        assert result["checks"] == {"timeout": 60, "output_limit": 4000}

    def test_none_does_not_override(self) -> None:
        assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}

    def test_list_replaced_not_merged(self) -> None:
        assert deep_merge({"items": [1, 2, 3]}, {"items": [4, 5]}) == {"items": [4, 5]}

    def test_inputs_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}

    def test_merge_configs_multiple(self) -> None:
        result = merge_configs({"a": 1, "b": 2}, {"b": 3}, {}, {"c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}


class TestConfigPaths:
    """Test platform-aware path resolution."""

    def test_windows_paths(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("PROGRAMDATA", "C:\\ProgramData")
        monkeypatch.setenv("APPDATA", "C:\\Users\\Test\\AppData\\Roaming")

        system = get_system_config_path()
        user = get_user_config_path()
        assert system is not None and "ProgramData" in str(system)
        assert user is not None and "AppData" in str(user)
        assert "madcoord" in str(system)

    def test_unix_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        assert get_system_config_path() == Path("/etc/madcoord/config.yaml")

    def test_unix_user_path_xdg(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/home/test/.config-custom")
        assert get_user_config_path() == Path("/home/test/.config-custom/madcoord/config.yaml")

    def test_project_config_path(self) -> None:
        assert get_project_config_path("/home/user/repo") == Path("/home/user/repo/.mad/config.yaml")

    def test_get_config_paths_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        paths = get_config_paths(repo_root="/project")
        assert len(paths) == 3
        assert "etc" in paths[0].parts
        assert "project" in paths[2].parts

    def test_no_project_path_without_root(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        assert len(get_config_paths()) == 2


class TestConfigLoading:
    """Test configuration loading."""

    @pytest.fixture
    def project_dir(self, tmp_path: Path) -> Path:
        config_dir = tmp_path / "project" / ".mad"
        config_dir.mkdir(parents=True)
        return config_dir.parent

    def test_defaults(self, tmp_path: Path) -> None:
        config = load_config(repo_root=tmp_path)
        assert isinstance(config, Config)
        assert config.permissions.strict_mode is False
        assert config.permissions.exclusive_workspaces is True
        assert config.workspace.directory == "worktrees"
        assert config.events.file == ".mad-logs.jsonl"
        assert config.checks.timeout == 600.0

    def test_project_yaml(self, project_dir: Path) -> None:
        (project_dir / ".mad" / "config.yaml").write_text(
            """
permissions:
  strict_mode: true
  shell_denylist:
    - pattern: '\\bterraform\\s+apply\\b'
      label: infrastructure change
    - label: missing pattern is skipped
workspace:
  directory: .worktrees
checks:
  timeout: 90
custom_section:
  key: value
"""
        )
        config = load_config(repo_root=project_dir)
        assert config.permissions.strict_mode is True
        assert [d.label for d in config.permissions.shell_denylist] == ["infrastructure change"]
        assert config.workspace.directory == ".worktrees"
        assert config.checks.timeout == 90.0
        assert config.extra == {"custom_section": {"key": "value"}}

    def test_user_config_layered_under_project(
        self, project_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(sys, "platform", "linux")
        user_dir = tmp_path / "xdg" / "madcoord"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text("checks:\n  timeout: 30\n  output_limit: 100\n")
        (project_dir / ".mad" / "config.yaml").write_text("checks:\n  timeout: 45\n")

        config = load_config(repo_root=project_dir)
        assert config.checks.timeout == 45.0
        assert config.checks.output_limit == 100

    def test_invalid_yaml_uses_defaults(self, project_dir: Path) -> None:
        (project_dir / ".mad" / "config.yaml").write_text("invalid: yaml: :")
        config = load_config(repo_root=project_dir)
        assert config.permissions.strict_mode is False

    def test_env_overrides(self, project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (project_dir / ".mad" / "config.yaml").write_text("permissions:\n  strict_mode: true\n")
        monkeypatch.setenv("MAD_STRICT", "off")
        monkeypatch.setenv("MAD_LOG", "/tmp/mad.log")
        config = load_config(repo_root=project_dir)
        assert config.permissions.strict_mode is False
        assert config.logging.file == "/tmp/mad.log"

    @pytest.mark.parametrize(("value", "expected"), [("1", True), ("YES", True), ("0", False), ("nope", False)])
    def test_strict_env_values(self, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool) -> None:
        monkeypatch.setenv("MAD_STRICT", value)
        assert env_overrides() == {"permissions": {"strict_mode": expected}}

    def test_dict_to_config_empty_sections(self) -> None:
        config = dict_to_config({"logging": None, "permissions": None})
        assert config.logging.level is None
        assert config.permissions.shell_denylist == []

    def test_global_config_cached(self) -> None:
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_repo_config_not_cached(self, project_dir: Path) -> None:
        global_config = get_config()
        load_config(repo_root=project_dir)
        assert get_config() is global_config
