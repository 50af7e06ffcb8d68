# ABOUTME: Sibling backups for client configuration files.
# ABOUTME: Backup name is <original>.backup.<unix millis>; older ones are pruned per target.
import logging
import re
import shutil
import time
from collections.abc import Callable
from pathlib import Path

from jiramcp.config import MAX_BACKUPS

logger = logging.getLogger(__name__)

BACKUP_MARKER = ".backup."


def backup_path_for(source_path: Path, timestamp_ms: int) -> Path:
    """Return the sibling backup path for a given timestamp."""
    return source_path.with_name(f"{source_path.name}{BACKUP_MARKER}{timestamp_ms}")


def create_backup(
    source_path: Path,
    clock: Callable[[], float] = time.time,
) -> Path:
    """Copy a file to a timestamped sibling before it gets modified.

    ABOUTME: Uses shutil.copy2() to preserve file metadata
    ABOUTME: Bumps the timestamp if a backup with that name already exists

    Args:
        source_path: File to back up
        clock: Returns the current time in seconds

    Returns:
        Path to the created backup file

    Raises:
        FileNotFoundError: If source_path doesn't exist
        OSError: If the copy fails

    Examples:
        >>> create_backup(Path("/home/dev/.cursor/mcp.json")).name
        'mcp.json.backup.1767225600000'
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    timestamp_ms = int(clock() * 1000)
    backup_path = backup_path_for(source_path, timestamp_ms)
    while backup_path.exists():
        timestamp_ms += 1
        backup_path = backup_path_for(source_path, timestamp_ms)

    shutil.copy2(source_path, backup_path)
    logger.debug(f"Backed up {source_path} to {backup_path.name}")

    return backup_path


def list_backups(source_path: Path) -> list[Path]:
    """Return existing backups of source_path, newest first."""
    directory = source_path.parent
    if not directory.is_dir():
        return []

    pattern = re.compile(re.escape(source_path.name + BACKUP_MARKER) + r"(\d+)$")
    found: list[tuple[int, Path]] = []
    try:
        for candidate in directory.iterdir():
            match = pattern.match(candidate.name)
            if match and candidate.is_file():
                found.append((int(match.group(1)), candidate))
    except OSError as e:
        logger.warning(f"Failed to list backups in {directory}: {e}")
        return []

    found.sort(key=lambda item: item[0], reverse=True)
    return [path for _, path in found]


def cleanup_old_backups(source_path: Path, max_backups: int = MAX_BACKUPS) -> list[Path]:
    """Remove old backups of one file, keeping the newest max_backups.

    ABOUTME: Only touches <name>.backup.<digits> siblings of source_path
    ABOUTME: Logs warnings on errors but does not raise exceptions

    Args:
        source_path: The config file whose backups are pruned
        max_backups: Maximum backups to keep (default MAX_BACKUPS)

    Returns:
        List of paths that were deleted
    """
    deleted: list[Path] = []

    for backup in list_backups(source_path)[max_backups:]:
        try:
            backup.unlink()
            deleted.append(backup)
            logger.debug(f"Deleted old backup: {backup}")
        except OSError as e:
            logger.warning(f"Failed to delete old backup {backup}: {e}")

    return deleted
