# ABOUTME: Shared fixtures for jiramcp tests
# ABOUTME: Sample catalog, registry, credentials and an isolated HOME
import copy
from pathlib import Path

import pytest

from jiramcp.fetcher import parse_catalog
from jiramcp.models import Credentials, DetectionResult
from jiramcp.registry import ClientRegistry

STDIO_SCHEMA = {"command": "string", "args": "string[]", "env": "object"}
LOCAL_SCHEMA = {"type": "string", "command": "string[]", "environment": "object"}

SAMPLE_CATALOG = {
    "version": "1.2.0",
    "lastUpdated": "2026-01-15",
    "clients": {
        "claude-code": {
            "name": "Claude Code",
            "vendor": "Anthropic",
            "description": "Agentic coding in the terminal",
            "configLocations": {
                "macos": {"user": "~/.claude.json", "project": ".mcp.json"},
                "linux": {"user": "~/.claude.json", "project": ".mcp.json"},
                "windows": {"user": "%USERPROFILE%\\.claude.json", "project": ".mcp.json"},
            },
            "configFormat": {"wrapperKey": "mcpServers", "serverSchema": STDIO_SCHEMA},
            "scopes": ["user", "project"],
            "transportSupport": ["stdio", "http"],
            "cli": {"commands": "claude mcp add"},
        },
        "claude-desktop": {
            "name": "Claude Desktop",
            "vendor": "Anthropic",
            "configLocations": {
                "macos": {"user": "~/Library/Application Support/Claude/claude_desktop_config.json"},
                "linux": {"user": "~/.config/Claude/claude_desktop_config.json"},
                "windows": {"user": "%APPDATA%\\Claude\\claude_desktop_config.json"},
            },
            "configFormat": {"wrapperKey": "mcpServers", "serverSchema": STDIO_SCHEMA},
            "scopes": ["user"],
            "transportSupport": ["stdio"],
        },
        "cursor": {
            "name": "Cursor",
            "configLocations": {
                "macos": {"global": "~/.cursor/mcp.json", "project": ".cursor/mcp.json"},
                "linux": {"global": "~/.cursor/mcp.json", "project": ".cursor/mcp.json"},
                "windows": {"global": "%USERPROFILE%\\.cursor\\mcp.json", "project": ".cursor/mcp.json"},
            },
            "configFormat": {"wrapperKey": "mcpServers", "serverSchema": STDIO_SCHEMA},
            "scopes": ["global", "project"],
            "transportSupport": ["stdio", "sse"],
        },
        "opencode": {
            "name": "OpenCode",
            "configLocations": {
                "macos": {"global": "~/.config/opencode/opencode.json"},
                "linux": {"global": "~/.config/opencode/opencode.json"},
            },
            "configFormat": {"wrapperKey": "mcp", "serverSchema": LOCAL_SCHEMA},
            "scopes": ["global"],
            "transportSupport": ["stdio"],
        },
        "codex-cli": {
            "name": "Codex CLI",
            "vendor": "OpenAI",
            "configLocations": {
                "macos": {"user": "~/.codex/config.toml"},
                "linux": {"user": "~/.codex/config.toml"},
            },
            "configFormat": {
                "wrapperKey": "mcp_servers",
                "serverSchema": STDIO_SCHEMA,
                "format": "toml",
            },
            "scopes": ["user"],
            "transportSupport": ["stdio"],
            "cli": {"commands": "codex mcp add"},
        },
        "vscode-copilot": {
            "name": "Copilot",
            "vendor": "GitHub",
            "configLocations": {
                "macos": {"project": ".vscode/mcp.json"},
                "linux": {"project": ".vscode/mcp.json"},
            },
            "configFormat": {"wrapperKey": "servers", "serverSchema": STDIO_SCHEMA},
            "scopes": ["project"],
            "transportSupport": ["stdio", "http"],
        },
    },
}


@pytest.fixture
def catalog_payload() -> dict:
    """Fresh deep copy of the sample catalog payload."""
    return copy.deepcopy(SAMPLE_CATALOG)


@pytest.fixture
def registry(catalog_payload) -> ClientRegistry:
    return ClientRegistry(parse_catalog(catalog_payload))


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(base_url="https://x", username="u", password="p")


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """Isolated home directory used for ~ and $HOME expansion."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    return home_dir


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def make_tool():
    """Build a DetectionResult for a registry client without probing the host."""

    def _make(registry: ClientRegistry, name: str) -> DetectionResult:
        descriptor = registry.get(name)
        return DetectionResult(
            id=name,
            display_name=descriptor.display_name,
            config_paths=(),
            primary_path=None,
            detected=True,
            descriptor=descriptor,
        )

    return _make
