# ABOUTME: Utility modules for jiramcp
# ABOUTME: Exports path expansion, backups and config file I/O
from jiramcp.utils.backup import cleanup_old_backups, create_backup, list_backups
from jiramcp.utils.config_io import (
    ConfigParseError,
    detect_config_file_type,
    read_config_document,
    write_config_document,
)
from jiramcp.utils.paths import current_platform, map_platform, resolve_config_path, resolve_path

__all__ = [
    "create_backup",
    "list_backups",
    "cleanup_old_backups",
    "ConfigParseError",
    "detect_config_file_type",
    "read_config_document",
    "write_config_document",
    "map_platform",
    "current_platform",
    "resolve_path",
    "resolve_config_path",
]
