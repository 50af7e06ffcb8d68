# Reading and writing client config documents (JSON, YAML, TOML)
import json
from pathlib import Path
from typing import Any

import tomli
import tomli_w
import yaml

from jiramcp.models import CONFIG_FILE_TYPES

_EXTENSION_TYPES = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
}


class ConfigParseError(ValueError):
    """An existing config file could not be parsed as its declared format."""


def detect_config_file_type(path: Path | str) -> str:
    """Detect config file type from its extension.

    ABOUTME: Unknown extensions are treated as json

    Examples:
        >>> detect_config_file_type("~/.codex/config.toml")
        'toml'
        >>> detect_config_file_type("settings.conf")
        'json'
    """
    return _EXTENSION_TYPES.get(Path(path).suffix.lower(), "json")


def resolve_file_type(path: Path, declared: str | None) -> str:
    """Pick the format to use for a target file.

    ABOUTME: Catalog-declared format wins, then the file extension
    """
    if declared in CONFIG_FILE_TYPES:
        return declared
    return detect_config_file_type(path)


def read_config_document(path: Path, file_type: str = "json") -> dict[str, Any]:
    """Read a config file into a dict.

    ABOUTME: Returns empty dict if file doesn't exist
    ABOUTME: Raises ConfigParseError if the content is not a mapping in file_type

    Args:
        path: Config file to read
        file_type: One of json, yaml, toml

    Returns:
        Parsed top-level mapping

    Raises:
        ConfigParseError: If the content cannot be parsed or is not a mapping
        OSError: If the file cannot be read
    """
    if not path.exists():
        return {}

    if file_type == "toml":
        try:
            with open(path, "rb") as f:
                return tomli.load(f)
        except (tomli.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ConfigParseError(f"Invalid TOML in {path}: {e}") from e

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigParseError(f"{path} is not valid UTF-8: {e}") from e
    if not text.strip():
        return {}

    if file_type == "yaml":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid YAML in {path}: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigParseError(f"Invalid JSON in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(f"Expected an object at the top of {path}, got {type(data).__name__}")
    return data


def write_config_document(path: Path, data: dict[str, Any], file_type: str = "json") -> None:
    """Write a config dict back to disk.

    ABOUTME: Creates parent directories if needed
    ABOUTME: JSON uses 2-space indentation, keeps key order, ends with a newline

    Args:
        path: Destination file
        data: Full document to write
        file_type: One of json, yaml, toml
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if file_type == "toml":
        with open(path, "wb") as f:
            tomli_w.dump(data, f)
        return

    if file_type == "yaml":
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        return

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
