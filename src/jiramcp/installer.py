# ABOUTME: Batch installer: writes the Jira MCP server entry into client configs
# ABOUTME: Validate scope, resolve path, back up, merge under the wrapper key, write back
# ABOUTME: Failures come back as InstallResult values so one broken tool cannot sink a batch

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from jiramcp.config import PACKAGE_NAME, SERVER_KEY
from jiramcp.models import (
    ClientDescriptor,
    Credentials,
    EntryShape,
    InstallRequest,
    InstallResult,
    PlatformKey,
)
from jiramcp.utils.backup import cleanup_old_backups, create_backup
from jiramcp.utils.config_io import (
    ConfigParseError,
    read_config_document,
    resolve_file_type,
    write_config_document,
)
from jiramcp.utils.paths import current_platform, resolve_config_path
from jiramcp.utils.tasks import gather_with_concurrency
from jiramcp.validation import validate_tool_scope

logger = logging.getLogger(__name__)


def _jira_env(credentials: Credentials) -> dict[str, str]:
    return {
        "JIRA_BASE_URL": credentials.base_url,
        "JIRA_USERNAME": credentials.username,
        "JIRA_PASSWORD": credentials.password,
    }


def build_server_entry(
    shape: EntryShape,
    credentials: Credentials,
    package: str = PACKAGE_NAME,
) -> dict[str, Any]:
    """Build the server entry in the shape a client expects.

    ABOUTME: stdio -> {command, args, env}
    ABOUTME: local -> {type: "local", command: [...], environment}

    Examples:
        >>> build_server_entry("stdio", Credentials("https://x", "u", "p"))["args"]
        ['-y', '@khanglvm/jira-mcp']
    """
    if shape == "local":
        return {
            "type": "local",
            "command": ["npx", "-y", package],
            "environment": _jira_env(credentials),
        }
    return {
        "command": "npx",
        "args": ["-y", package],
        "env": _jira_env(credentials),
    }


def merge_server_entry(
    document: dict[str, Any],
    wrapper_key: str,
    entry: dict[str, Any],
    server_key: str = SERVER_KEY,
) -> dict[str, Any]:
    """Return a copy of document with entry set at document[wrapper_key][server_key].

    ABOUTME: Other top-level keys and other servers are kept as-is
    ABOUTME: An existing server_key entry is replaced, not merged
    """
    merged = dict(document)
    existing = merged.get(wrapper_key)
    if existing is None:
        wrapper: dict[str, Any] = {}
    elif isinstance(existing, dict):
        wrapper = dict(existing)
    else:
        logger.warning(
            f"'{wrapper_key}' is a {type(existing).__name__}, not an object; replacing it"
        )
        wrapper = {}
    wrapper[server_key] = entry
    merged[wrapper_key] = wrapper
    return merged


def resolve_target_path(
    request: InstallRequest,
    scope: str,
    platform: PlatformKey,
    project_dir: Path | None = None,
) -> Path | None:
    """Concrete config file for a tool at a scope, or None if it has none."""
    template = request.registry.path_for_scope(request.tool.id, scope, platform)
    if template is None:
        return None
    return resolve_config_path(template, platform=platform, project_dir=project_dir)


def _backup_target(path: Path, clock: Callable[[], float]) -> str | None:
    """Back up an existing config file and prune old backups. Returns the backup name."""
    if not path.exists():
        return None
    backup_path = create_backup(path, clock=clock)
    cleanup_old_backups(path)
    return backup_path.name


def _write_entry(
    path: Path,
    descriptor: ClientDescriptor,
    credentials: Credentials,
    backup_name: str | None,
) -> None:
    """Merge the server entry into one config file and write it back."""
    file_type = resolve_file_type(path, descriptor.config_format.format)

    try:
        document = read_config_document(path, file_type)
    except ConfigParseError as e:
        logger.warning(f"{e}; overwriting it (original kept in {backup_name})")
        document = {}

    entry = build_server_entry(descriptor.entry_shape, credentials)
    document = merge_server_entry(document, descriptor.config_format.wrapper_key, entry)
    write_config_document(path, document, file_type)
    logger.info(f"Wrote {SERVER_KEY} server to {path}")


async def install_one(
    request: InstallRequest,
    *,
    platform: PlatformKey | None = None,
    project_dir: Path | None = None,
    clock: Callable[[], float] = time.time,
) -> InstallResult:
    """Install the Jira server entry for one tool.

    ABOUTME: Unsupported scope falls back when possible (project -> user)
    ABOUTME: Filesystem errors become a failed InstallResult

    Args:
        request: Tool, scope, credentials and registry
        platform: Platform key for path selection (default: this host)
        project_dir: Base for relative project paths (default: cwd)
        clock: Time source for backup names

    Returns:
        InstallResult describing what happened
    """
    if platform is None:
        platform = current_platform()

    tool = request.tool
    validation = validate_tool_scope(tool, request.scope, request.registry)
    actual_scope = validation.fallback_scope or request.scope
    used_fallback = validation.fallback_scope is not None

    def failed(
        message: str,
        config_path: Path | None = None,
        backup_name: str | None = None,
    ) -> InstallResult:
        return InstallResult(
            tool_id=tool.id,
            tool_name=tool.display_name,
            success=False,
            config_path=config_path,
            actual_scope=actual_scope,
            used_fallback=used_fallback,
            error_message=message,
            backup_name=backup_name,
        )

    if not validation.is_compatible and not used_fallback:
        return failed(f"{tool.display_name} does not support {request.scope} scope")

    if used_fallback:
        logger.warning(validation.warning_message)

    path = resolve_target_path(request, actual_scope, platform, project_dir)
    if path is None:
        return failed(f"No config path available for {actual_scope} scope on {platform}")

    backup_name = None
    try:
        backup_name = await asyncio.to_thread(_backup_target, path, clock)
        await asyncio.to_thread(
            _write_entry, path, tool.descriptor, request.credentials, backup_name
        )
    except (OSError, ValueError) as e:
        logger.warning(f"Install failed for {tool.id}: {e}")
        return failed(str(e), config_path=path, backup_name=backup_name)

    return InstallResult(
        tool_id=tool.id,
        tool_name=tool.display_name,
        success=True,
        config_path=path,
        actual_scope=actual_scope,
        used_fallback=used_fallback,
        backup_name=backup_name,
    )


async def install_many(
    requests: list[InstallRequest],
    *,
    concurrency: int | None = None,
    platform: PlatformKey | None = None,
    project_dir: Path | None = None,
    clock: Callable[[], float] = time.time,
) -> list[InstallResult]:
    """Run installs concurrently and collect one result per request.

    ABOUTME: Never raises; an unexpected exception yields a degraded result
    ABOUTME: Results are in request order, not completion order
    """
    outcomes = await gather_with_concurrency(
        concurrency,
        *(
            install_one(request, platform=platform, project_dir=project_dir, clock=clock)
            for request in requests
        ),
    )

    results: list[InstallResult] = []
    for request, outcome in zip(requests, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Unexpected error installing {request.tool.id}: {outcome!r}")
            results.append(
                InstallResult(
                    tool_id=request.tool.id,
                    tool_name=request.tool.display_name,
                    success=False,
                    config_path=None,
                    actual_scope=request.scope,
                    used_fallback=False,
                    error_message="Unexpected error during installation",
                )
            )
        else:
            results.append(outcome)
    return results
