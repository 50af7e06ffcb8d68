# Core data models for jiramcp
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

# ABOUTME: Vocabularies shared by the catalog, registry and installer
PlatformKey = Literal["macos", "windows", "linux"]
RequestScope = Literal["user", "project"]
EntryShape = Literal["stdio", "local"]

WRAPPER_KEYS: tuple[str, ...] = (
    "mcpServers",
    "mcp",
    "servers",
    "context_servers",
    "mcp_servers",
)
CONFIG_FILE_TYPES: tuple[str, ...] = ("json", "yaml", "toml")
ENTRY_SHAPES: tuple[str, ...] = ("stdio", "local")


@dataclass(frozen=True)
class ConfigFormat:
    """How a client nests MCP server entries in its config file.

    ABOUTME: wrapper_key is the top-level key holding server entries
    ABOUTME: format is None when the catalog leaves it out (treated as json)
    """
    wrapper_key: str
    server_schema: dict[str, Any] = field(default_factory=dict)
    format: str | None = None


@dataclass(frozen=True)
class ClientDescriptor:
    """One AI tool entry in the remote catalog.

    ABOUTME: Immutable view of a validated catalog entry
    ABOUTME: id is the catalog key, name the human-readable label
    ABOUTME: config_locations maps platform key -> scope key -> path template
    """
    id: str
    name: str
    config_locations: dict[str, dict[str, str]]
    config_format: ConfigFormat
    scopes: tuple[str, ...]
    transport_support: tuple[str, ...]
    vendor: str | None = None
    description: str | None = None
    docs_url: str | None = None
    cli: dict[str, str] = field(default_factory=dict)
    entry_shape: EntryShape = "stdio"

    @property
    def display_name(self) -> str:
        """Vendor-qualified name used in messages."""
        return f"{self.vendor} {self.name}" if self.vendor else self.name


@dataclass(frozen=True)
class RegistryCatalog:
    """A fetched catalog of client descriptors.

    ABOUTME: A new fetch builds a new catalog, never mutates an old one
    ABOUTME: raw keeps the validated payload for persisting to the file cache
    """
    version: str
    last_updated: str
    clients: dict[str, ClientDescriptor]
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass
class CacheEntry:
    """Cached catalog plus its freshness bookkeeping.

    ABOUTME: fetched_at and ttl are seconds on the owning cache's clock
    """
    data: RegistryCatalog
    fetched_at: float
    ttl: float
    etag: str | None = None

    def is_fresh(self, now: float) -> bool:
        return now - self.fetched_at < self.ttl


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of probing the host for one client.

    ABOUTME: config_paths are resolved candidates in declaration order
    ABOUTME: primary_path is None when nothing was found
    """
    id: str
    display_name: str
    config_paths: tuple[Path, ...]
    primary_path: Path | None
    detected: bool
    descriptor: ClientDescriptor


@dataclass(frozen=True)
class ScopeValidationResult:
    tool_id: str
    tool_name: str
    requested_scope: RequestScope
    supported_scopes: tuple[str, ...]
    is_compatible: bool
    fallback_scope: RequestScope | None
    warning_message: str | None


@dataclass(frozen=True)
class Credentials:
    """Jira connection values written into generated server entries."""
    base_url: str
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class InstallRequest:
    """One unit of work for the batch installer.

    ABOUTME: registry is typed loosely to avoid an import cycle
    """
    tool: DetectionResult
    scope: RequestScope
    credentials: Credentials
    registry: Any


@dataclass(frozen=True)
class InstallResult:
    """Result of one install attempt.

    ABOUTME: Failures are data, never exceptions
    """
    tool_id: str
    tool_name: str
    success: bool
    config_path: Path | None
    actual_scope: RequestScope
    used_fallback: bool
    error_message: str | None = None
    backup_name: str | None = None


@dataclass(frozen=True)
class SetupOptions:
    """Validated arguments of the setup command."""
    cli: str
    base_url: str
    username: str
    password: str = field(repr=False)
    scope: RequestScope = "user"

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            base_url=self.base_url,
            username=self.username,
            password=self.password,
        )
