# Tests for installer settings and cache locations
import stat
import sys
from pathlib import Path

import pytest

from jiramcp.config import (
    CACHE_FILE_NAME,
    CACHE_TTL,
    DEFAULT_REMOTE_URL,
    DEFAULT_RETRIES,
    TIMEOUT,
    ensure_cache_dir,
    get_cache_dir,
    get_cache_file,
    get_remote_url,
)


def test_fetch_defaults():
    """Test fetch tuning constants."""
    assert CACHE_TTL == 60
    assert TIMEOUT == 10
    assert DEFAULT_RETRIES == 3


def test_remote_url_default(monkeypatch):
    monkeypatch.delenv("JIRA_MCP_REGISTRY_URL", raising=False)
    assert get_remote_url() == DEFAULT_REMOTE_URL
    assert DEFAULT_REMOTE_URL.startswith("https://")


def test_remote_url_override(monkeypatch):
    monkeypatch.setenv("JIRA_MCP_REGISTRY_URL", "https://mirror.example/mcp-conf.json")
    assert get_remote_url() == "https://mirror.example/mcp-conf.json"


def test_cache_dir_default(monkeypatch, tmp_path):
    """Test cache dir lives under ~/.cache/jira-mcp."""
    monkeypatch.delenv("JIRA_MCP_CACHE_DIR", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))

    assert get_cache_dir() == tmp_path / ".cache" / "jira-mcp"
    assert get_cache_file() == tmp_path / ".cache" / "jira-mcp" / CACHE_FILE_NAME


def test_cache_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("JIRA_MCP_CACHE_DIR", str(tmp_path / "custom"))
    assert get_cache_file() == tmp_path / "custom" / "mcp-conf.json"


def test_ensure_cache_dir_creates_directory(tmp_path):
    """Test creating the cache directory."""
    target = tmp_path / "a" / "b"
    result = ensure_cache_dir(target)

    assert result == target
    assert result.is_dir()
    # Idempotent
    assert ensure_cache_dir(target) == target


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_ensure_cache_dir_owner_only(tmp_path):
    target = ensure_cache_dir(tmp_path / "cache")
    assert stat.S_IMODE(target.stat().st_mode) == 0o700


def test_ensure_cache_dir_uses_env(monkeypatch, tmp_path):
    monkeypatch.setenv("JIRA_MCP_CACHE_DIR", str(tmp_path / "env-cache"))
    assert ensure_cache_dir() == Path(tmp_path / "env-cache")
    assert (tmp_path / "env-cache").is_dir()
