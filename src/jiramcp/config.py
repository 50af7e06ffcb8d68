# Installer settings and cache locations for jiramcp
import os
from pathlib import Path

# ABOUTME: Remote catalog of MCP client descriptors
DEFAULT_REMOTE_URL = "https://raw.githubusercontent.com/khanglvm/aic/main/mcp/mcp-conf.json"

# ABOUTME: Fetch tuning (seconds); backoff doubles per attempt: 1s, 2s, 4s
CACHE_TTL = 60.0
TIMEOUT = 10.0
DEFAULT_RETRIES = 3
BACKOFF_BASE = 1.0

USER_AGENT = "jira-mcp-installer"

# ABOUTME: What gets written into each client's config
PACKAGE_NAME = "@khanglvm/jira-mcp"
SERVER_KEY = "jira"

# ABOUTME: Sibling backups kept per target config file
MAX_BACKUPS = 5

CACHE_FILE_NAME = "mcp-conf.json"


def get_remote_url() -> str:
    """Return the catalog URL.

    ABOUTME: JIRA_MCP_REGISTRY_URL overrides the built-in URL
    """
    return os.environ.get("JIRA_MCP_REGISTRY_URL") or DEFAULT_REMOTE_URL


def get_cache_dir() -> Path:
    """Return the per-user cache directory.

    ABOUTME: ~/.cache/jira-mcp unless JIRA_MCP_CACHE_DIR is set
    ABOUTME: Does not create the directory
    """
    override = os.environ.get("JIRA_MCP_CACHE_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cache" / "jira-mcp"


def get_cache_file() -> Path:
    """Return the path of the on-disk catalog cache."""
    return get_cache_dir() / CACHE_FILE_NAME


def ensure_cache_dir(cache_dir: Path | None = None) -> Path:
    """Create the cache directory if it doesn't exist.

    ABOUTME: Created owner-only (0o700)

    Args:
        cache_dir: Directory to create, defaults to get_cache_dir()

    Returns:
        Path to the cache directory (guaranteed to exist)
    """
    directory = cache_dir if cache_dir is not None else get_cache_dir()
    directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    return directory
