# ABOUTME: Tests for platform mapping and path template expansion
from pathlib import Path

import pytest

from jiramcp.utils.paths import map_platform, resolve_config_path, resolve_path


class TestMapPlatform:
    """Tests for map_platform function."""

    @pytest.mark.parametrize(
        "host, expected",
        [
            ("darwin", "macos"),
            ("win32", "windows"),
            ("Windows", "windows"),
            ("cygwin", "windows"),
            ("linux", "linux"),
            ("freebsd13", "linux"),
            ("", "linux"),
        ],
    )
    def test_maps_host_names(self, host, expected):
        assert map_platform(host) == expected


class TestResolvePath:
    """Tests for resolve_path function."""

    def test_expands_leading_tilde(self):
        result = resolve_path("~/.cursor/mcp.json", platform="linux", env={}, home="/home/dev")
        assert result == "/home/dev/.cursor/mcp.json"

    def test_tilde_only_at_start(self):
        result = resolve_path("/opt/~backup", platform="linux", env={}, home="/home/dev")
        assert result == "/opt/~backup"

    def test_expands_home_tokens(self):
        assert resolve_path("$HOME/a", platform="linux", env={}, home="/h") == "/h/a"
        assert resolve_path("%HOME%/a", platform="windows", env={}, home="C:/h") == "C:/h/a"

    def test_expands_unix_variables(self):
        env = {"XDG_CONFIG_HOME": "/home/dev/.config"}
        result = resolve_path("$XDG_CONFIG_HOME/zed/settings.json", platform="linux", env=env, home="/h")
        assert result == "/home/dev/.config/zed/settings.json"

    def test_unknown_unix_variable_expands_to_empty(self):
        result = resolve_path("$NOT_SET_ANYWHERE/mcp.json", platform="macos", env={}, home="/h")
        assert result == "/mcp.json"

    def test_expands_windows_variables(self):
        env = {"APPDATA": "C:\\Users\\dev\\AppData\\Roaming", "USERPROFILE": "C:\\Users\\dev"}
        result = resolve_path(
            "%APPDATA%\\Claude\\claude_desktop_config.json",
            platform="windows",
            env=env,
            home="C:\\Users\\dev",
        )
        assert result == "C:\\Users\\dev\\AppData\\Roaming\\Claude\\claude_desktop_config.json"

    def test_windows_variables_are_case_insensitive(self):
        env = {"LOCALAPPDATA": "C:\\Local"}
        result = resolve_path("%localappdata%\\tool", platform="windows", env=env, home="C:\\h")
        assert result == "C:\\Local\\tool"

    def test_missing_windows_variable_expands_to_empty(self):
        result = resolve_path("%APPDATA%\\Claude", platform="windows", env={}, home="C:\\h")
        assert result == "\\Claude"

    def test_windows_does_not_expand_unix_variables(self):
        result = resolve_path("$FOO\\bar", platform="windows", env={"FOO": "x"}, home="C:\\h")
        assert result == "$FOO\\bar"

    def test_defaults_to_process_home(self, home):
        result = resolve_path("~/.claude.json", platform="linux", env={})
        assert result == f"{home}/.claude.json"


class TestResolveConfigPath:
    """Tests for resolve_config_path function."""

    def test_relative_template_anchored_at_project_dir(self, tmp_path: Path):
        result = resolve_config_path(".mcp.json", platform="linux", project_dir=tmp_path, env={})
        assert result == tmp_path / ".mcp.json"

    def test_absolute_template_ignores_project_dir(self, tmp_path: Path):
        result = resolve_config_path(
            "~/.claude.json",
            platform="linux",
            project_dir=tmp_path / "elsewhere",
            env={},
            home=str(tmp_path),
        )
        assert result == tmp_path / ".claude.json"

    def test_relative_template_defaults_to_cwd(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = resolve_config_path(".cursor/mcp.json", platform="linux", env={})
        assert result == Path.cwd() / ".cursor" / "mcp.json"
