# Read-only client registry built from a fetched catalog
import logging
from typing import TYPE_CHECKING

from jiramcp.models import (
    ClientDescriptor,
    ConfigFormat,
    PlatformKey,
    RegistryCatalog,
    RequestScope,
)
from jiramcp.utils.paths import map_platform

if TYPE_CHECKING:
    from jiramcp.fetcher import CatalogFetcher

logger = logging.getLogger(__name__)

# ABOUTME: Single scope-equivalence table
# ABOUTME: compatible = declared scopes that satisfy a request (validation)
# ABOUTME: path_keys = configLocations keys tried in order (installation)
SCOPE_RULES: dict[str, dict[str, tuple[str, ...]]] = {
    "user": {
        "compatible": ("user", "global"),
        "path_keys": ("user", "global"),
    },
    "project": {
        "compatible": ("project",),
        "path_keys": ("project", "local"),
    },
}


def _platform_key(platform: str) -> PlatformKey:
    return map_platform(platform)


class ClientRegistry:
    """Index of client descriptors keyed by catalog id.

    ABOUTME: Pure lookups, no mutation methods
    ABOUTME: Unknown ids return empty/False/None instead of raising

    Platform arguments accept catalog keys (macos/windows/linux) as well as
    host names such as sys.platform values.
    """

    def __init__(self, catalog: RegistryCatalog) -> None:
        self.catalog = catalog
        self._clients: dict[str, ClientDescriptor] = dict(catalog.clients)

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, name: object) -> bool:
        return name in self._clients

    def get(self, name: str) -> ClientDescriptor | None:
        return self._clients.get(name)

    def all(self) -> list[ClientDescriptor]:
        return list(self._clients.values())

    def names(self) -> list[str]:
        return list(self._clients)

    def by_scope(self, scope: str) -> list[ClientDescriptor]:
        return [client for client in self._clients.values() if scope in client.scopes]

    def detectable_on(self, platform: str) -> list[ClientDescriptor]:
        """Clients with at least one config location on this platform."""
        key = _platform_key(platform)
        return [client for client in self._clients.values() if client.config_locations.get(key)]

    def config_paths(self, name: str, platform: str) -> list[str]:
        """All non-empty path templates for a client on a platform.

        ABOUTME: Declaration order, not sorted
        """
        client = self.get(name)
        if client is None:
            return []
        locations = client.config_locations.get(_platform_key(platform), {})
        return [path for path in locations.values() if isinstance(path, str) and path]

    def path_for_scope(self, name: str, scope: RequestScope, platform: str) -> str | None:
        """Path template used when installing at a requested scope.

        ABOUTME: user tries user then global, project tries project then local

        Examples:
            >>> registry.path_for_scope("claude-code", "project", "linux")
            '.mcp.json'
        """
        client = self.get(name)
        rule = SCOPE_RULES.get(scope)
        if client is None or rule is None:
            return None
        locations = client.config_locations.get(_platform_key(platform), {})
        for path_key in rule["path_keys"]:
            path = locations.get(path_key)
            if path:
                return path
        return None

    def scopes_of(self, name: str) -> tuple[str, ...]:
        client = self.get(name)
        return client.scopes if client is not None else ()

    def supports(self, name: str, scope: str) -> bool:
        """Whether a client declares exactly this scope key."""
        return scope in self.scopes_of(name)

    def is_compatible(self, name: str, scope: RequestScope) -> bool:
        """Whether a request scope is satisfied by any declared equivalent."""
        rule = SCOPE_RULES.get(scope)
        if rule is None:
            return False
        declared = self.scopes_of(name)
        return any(candidate in declared for candidate in rule["compatible"])

    def transports_of(self, name: str) -> tuple[str, ...]:
        client = self.get(name)
        return client.transport_support if client is not None else ()

    def by_transport(self, transport: str) -> list[ClientDescriptor]:
        return [c for c in self._clients.values() if transport in c.transport_support]

    def wrapper_key_of(self, name: str) -> str | None:
        client = self.get(name)
        return client.config_format.wrapper_key if client is not None else None

    def by_wrapper_key(self, wrapper_key: str) -> list[ClientDescriptor]:
        return [
            c for c in self._clients.values() if c.config_format.wrapper_key == wrapper_key
        ]

    def cli_commands_of(self, name: str) -> dict[str, str]:
        client = self.get(name)
        return dict(client.cli) if client is not None else {}

    def has_cli_support(self, name: str) -> bool:
        return bool(self.cli_commands_of(name))

    def config_format_of(self, name: str) -> str:
        """Declared file format, json when the catalog leaves it out."""
        client = self.get(name)
        if client is None or client.config_format.format is None:
            return "json"
        return client.config_format.format

    def search(self, query: str) -> list[ClientDescriptor]:
        """Case-insensitive partial match on id, name or vendor."""
        needle = query.lower()
        return [
            client
            for client in self._clients.values()
            if needle in client.id.lower()
            or needle in client.name.lower()
            or (client.vendor is not None and needle in client.vendor.lower())
        ]

    def metadata(self) -> dict[str, str | int]:
        return {
            "version": self.catalog.version,
            "last_updated": self.catalog.last_updated,
            "client_count": len(self._clients),
        }


async def create_registry(
    fetcher: "CatalogFetcher",
    force_refresh: bool = False,
    timeout: float | None = None,
) -> ClientRegistry:
    """Fetch the catalog and build a registry from it.

    Raises:
        CatalogUnavailableError: If neither network nor file cache is usable
    """
    catalog = await fetcher.fetch(force_refresh=force_refresh, timeout=timeout)
    logger.debug(f"Registry built from catalog {catalog.version} ({len(catalog.clients)} clients)")
    return ClientRegistry(catalog)


def _legacy_descriptor(
    client_id: str,
    name: str,
    paths: dict[str, str],
    wrapper_key: str,
    server_schema: dict[str, str],
    entry_shape: str,
    vendor: str | None = None,
    cli: dict[str, str] | None = None,
) -> ClientDescriptor:
    return ClientDescriptor(
        id=client_id,
        name=name,
        vendor=vendor,
        config_locations={platform: {"user": path} for platform, path in paths.items()},
        config_format=ConfigFormat(wrapper_key=wrapper_key, server_schema=server_schema, format="json"),
        scopes=("user",),
        transport_support=("stdio",),
        cli=cli or {},
        entry_shape=entry_shape,
    )


def builtin_registry() -> ClientRegistry:
    """Registry seeded with the three tools supported before the remote catalog.

    ABOUTME: claude-desktop, claude-code, opencode; user scope only
    ABOUTME: Usable offline, never touches the network or cache
    """
    stdio_schema = {"command": "string", "args": "string[]", "env": "object"}
    local_schema = {"type": "string", "command": "string[]", "environment": "object"}

    clients = [
        _legacy_descriptor(
            "claude-desktop",
            "Claude Desktop",
            {
                "macos": "~/Library/Application Support/Claude/claude_desktop_config.json",
                "windows": "%APPDATA%\\Claude\\claude_desktop_config.json",
                "linux": "~/.config/Claude/claude_desktop_config.json",
            },
            "mcpServers",
            stdio_schema,
            "stdio",
        ),
        _legacy_descriptor(
            "claude-code",
            "Claude Code",
            {
                "macos": "~/.claude.json",
                "windows": "%USERPROFILE%\\.claude.json",
                "linux": "~/.claude.json",
            },
            "mcpServers",
            stdio_schema,
            "stdio",
            cli={"commands": "claude"},
        ),
        _legacy_descriptor(
            "opencode",
            "OpenCode",
            {
                "macos": "~/.config/opencode/oh-my-opencode.json",
                "windows": "%APPDATA%\\opencode\\oh-my-opencode.json",
                "linux": "~/.config/opencode/oh-my-opencode.json",
            },
            "mcp",
            local_schema,
            "local",
            cli={"commands": "opencode"},
        ),
    ]

    catalog = RegistryCatalog(
        version="builtin",
        last_updated="",
        clients={client.id: client for client in clients},
    )
    return ClientRegistry(catalog)
