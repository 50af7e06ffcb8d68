# Platform mapping and path template expansion
import os
import re
import sys
from collections.abc import Mapping
from pathlib import Path

from jiramcp.models import PlatformKey

# ABOUTME: $HOME and %HOME% in any letter case
HOME_PATTERN = re.compile(r"\$HOME|%HOME%", re.IGNORECASE)

# ABOUTME: Windows-only variables expanded on Windows hosts
WINDOWS_VARS: tuple[str, ...] = ("APPDATA", "USERPROFILE", "LOCALAPPDATA")

# ABOUTME: Unix-style $VAR references (letters and underscores)
UNIX_VAR_PATTERN = re.compile(r"\$([A-Z_]+)", re.IGNORECASE)

_PLATFORM_ALIASES: dict[str, PlatformKey] = {
    "win32": "windows",
    "windows": "windows",
    "cygwin": "windows",
    "darwin": "macos",
    "macos": "macos",
}


def map_platform(host_platform: str) -> PlatformKey:
    """Map a host platform name to a catalog platform key.

    ABOUTME: Accepts sys.platform values and platform.system() names
    ABOUTME: Anything unrecognized is treated as linux

    Examples:
        >>> map_platform("win32")
        'windows'
        >>> map_platform("darwin")
        'macos'
        >>> map_platform("freebsd13")
        'linux'
    """
    return _PLATFORM_ALIASES.get(host_platform.lower(), "linux")


def current_platform() -> PlatformKey:
    """Catalog platform key of the running host."""
    return map_platform(sys.platform)


def resolve_path(
    template: str,
    *,
    platform: PlatformKey | None = None,
    env: Mapping[str, str] | None = None,
    home: str | None = None,
) -> str:
    """Expand a catalog path template into a concrete path string.

    ABOUTME: Best effort, unknown variables expand to "" and never raise
    ABOUTME: platform/env/home default to the running host

    Expansion order:
    1. Leading ~ becomes the home directory
    2. $HOME / %HOME% become the home directory
    3. On windows: %APPDATA%, %USERPROFILE%, %LOCALAPPDATA%
    4. Elsewhere: any other $VAR from the environment

    Args:
        template: Path template from the catalog
        platform: Platform key deciding which variable syntax applies
        env: Environment mapping used for lookups
        home: Home directory to substitute

    Returns:
        Expanded path string (may still be relative)

    Examples:
        >>> resolve_path("~/.cursor/mcp.json", home="/home/dev")
        '/home/dev/.cursor/mcp.json'
    """
    if platform is None:
        platform = current_platform()
    if env is None:
        env = os.environ
    if home is None:
        home = str(Path.home())

    resolved = template
    if resolved.startswith("~"):
        resolved = home + resolved[1:]

    resolved = HOME_PATTERN.sub(lambda _m: home, resolved)

    if platform == "windows":
        for var_name in WINDOWS_VARS:
            pattern = re.compile(re.escape(f"%{var_name}%"), re.IGNORECASE)
            value = env.get(var_name, "")
            resolved = pattern.sub(lambda _m, value=value: value, resolved)
    else:
        resolved = UNIX_VAR_PATTERN.sub(lambda m: env.get(m.group(1), ""), resolved)

    return resolved


def resolve_config_path(
    template: str,
    *,
    platform: PlatformKey | None = None,
    project_dir: Path | None = None,
    env: Mapping[str, str] | None = None,
    home: str | None = None,
) -> Path:
    """Expand a template and anchor relative results at project_dir.

    ABOUTME: Project-scope templates like ".mcp.json" are relative
    ABOUTME: project_dir defaults to the current working directory
    """
    resolved = Path(resolve_path(template, platform=platform, env=env, home=home))
    if resolved.is_absolute():
        return resolved
    base = project_dir if project_dir is not None else Path.cwd()
    return base / resolved
