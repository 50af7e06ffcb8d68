# ABOUTME: Remote catalog fetcher with a memory cache and an on-disk fallback
# ABOUTME: Lookup order: fresh memory entry -> network (retries, backoff) -> file cache -> error
import asyncio
import json
import logging
import os
import time
from collections.abc import Awaitable, Callable
from http.client import HTTPException
from pathlib import Path
from typing import Any
from urllib.error import URLError
from urllib.request import Request, urlopen

from jiramcp.config import (
    BACKOFF_BASE,
    CACHE_TTL,
    DEFAULT_RETRIES,
    TIMEOUT,
    USER_AGENT,
    ensure_cache_dir,
    get_cache_file,
    get_remote_url,
)
from jiramcp.models import (
    CONFIG_FILE_TYPES,
    ENTRY_SHAPES,
    WRAPPER_KEYS,
    CacheEntry,
    ClientDescriptor,
    ConfigFormat,
    RegistryCatalog,
)

logger = logging.getLogger(__name__)

HttpGetter = Callable[[str, float], tuple[str, str | None]]

# asyncio.TimeoutError is only an OSError from Python 3.11 on
NETWORK_ERRORS = (OSError, HTTPException, asyncio.TimeoutError)


class CatalogSchemaError(ValueError):
    """The catalog payload does not match the expected schema."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        details = "\n".join(f"  - {error}" for error in errors)
        super().__init__(f"Invalid MCP config schema:\n{details}")


class CatalogUnavailableError(RuntimeError):
    """Neither the network nor the file cache produced a catalog."""


# ---------------------------------------------------------------------------
# Schema validation
# ---------------------------------------------------------------------------


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _optional_str(entry: dict[str, Any], key: str, where: str, errors: list[str]) -> str | None:
    value = entry.get(key)
    if value is not None and not isinstance(value, str):
        errors.append(f"{where}.{key}: expected string")
        return None
    return value


def _parse_client(key: str, entry: Any, errors: list[str]) -> ClientDescriptor | None:
    """Validate one catalog client and build its descriptor.

    ABOUTME: Appends every problem to errors instead of stopping at the first
    ABOUTME: Returns None if the entry is unusable
    """
    where = f"clients.{key}"
    if not isinstance(entry, dict):
        errors.append(f"{where}: expected object")
        return None

    start = len(errors)

    name = entry.get("name", key)
    if not isinstance(name, str) or not name:
        errors.append(f"{where}.name: expected non-empty string")

    vendor = _optional_str(entry, "vendor", where, errors)
    description = _optional_str(entry, "description", where, errors)
    docs_url = _optional_str(entry, "docsUrl", where, errors)

    locations = entry.get("configLocations")
    config_locations: dict[str, dict[str, str]] = {}
    if not isinstance(locations, dict):
        errors.append(f"{where}.configLocations: expected object")
    else:
        for platform_key, paths in locations.items():
            if not isinstance(paths, dict) or not all(
                isinstance(path, str) for path in paths.values()
            ):
                errors.append(
                    f"{where}.configLocations.{platform_key}: expected mapping of scope to path"
                )
                continue
            config_locations[platform_key] = dict(paths)

    config_format: ConfigFormat | None = None
    fmt = entry.get("configFormat")
    if not isinstance(fmt, dict):
        errors.append(f"{where}.configFormat: expected object")
    else:
        wrapper_key = fmt.get("wrapperKey")
        if wrapper_key not in WRAPPER_KEYS:
            errors.append(
                f"{where}.configFormat.wrapperKey: expected one of {', '.join(WRAPPER_KEYS)}"
            )
        server_schema = fmt.get("serverSchema")
        if not isinstance(server_schema, dict):
            errors.append(f"{where}.configFormat.serverSchema: expected object")
        file_type = fmt.get("format")
        if file_type is not None and file_type not in CONFIG_FILE_TYPES:
            errors.append(
                f"{where}.configFormat.format: expected one of {', '.join(CONFIG_FILE_TYPES)}"
            )
        if len(errors) == start:
            config_format = ConfigFormat(
                wrapper_key=wrapper_key,
                server_schema=dict(server_schema),
                format=file_type,
            )

    scopes = entry.get("scopes")
    if not _is_str_list(scopes):
        errors.append(f"{where}.scopes: expected list of strings")

    transports = entry.get("transportSupport")
    if not _is_str_list(transports):
        errors.append(f"{where}.transportSupport: expected list of strings")

    shape = entry.get("entryShape")
    if shape is not None and shape not in ENTRY_SHAPES:
        errors.append(f"{where}.entryShape: expected one of {', '.join(ENTRY_SHAPES)}")

    if len(errors) > start or config_format is None:
        return None

    # Only string-valued CLI commands are usable for detection
    raw_cli = entry.get("cli")
    cli: dict[str, str] = {}
    if isinstance(raw_cli, dict):
        cli = {k: v for k, v in raw_cli.items() if isinstance(v, str) and v}

    if shape is None:
        shape = "local" if "environment" in config_format.server_schema else "stdio"

    return ClientDescriptor(
        id=key,
        name=name,
        vendor=vendor,
        description=description,
        docs_url=docs_url,
        config_locations=config_locations,
        config_format=config_format,
        scopes=tuple(scopes),
        transport_support=tuple(transports),
        cli=cli,
        entry_shape=shape,
    )


def parse_catalog(payload: Any) -> RegistryCatalog:
    """Validate a raw catalog payload and build a RegistryCatalog.

    ABOUTME: Requires version, lastUpdated and at least one client
    ABOUTME: Each client needs configLocations, configFormat, scopes, transportSupport
    ABOUTME: Unknown extra fields are allowed and kept in raw

    Args:
        payload: Decoded JSON document

    Returns:
        Immutable RegistryCatalog

    Raises:
        CatalogSchemaError: Listing every field that failed validation
    """
    if not isinstance(payload, dict):
        raise CatalogSchemaError(["(root): expected object"])

    errors: list[str] = []

    version = payload.get("version")
    if not isinstance(version, str):
        errors.append("version: expected string")

    last_updated = payload.get("lastUpdated")
    if not isinstance(last_updated, str):
        errors.append("lastUpdated: expected string")

    clients_data = payload.get("clients")
    clients: dict[str, ClientDescriptor] = {}
    if not isinstance(clients_data, dict):
        errors.append("clients: expected object")
    elif not clients_data:
        errors.append("clients: expected at least one client")
    else:
        for key, entry in clients_data.items():
            descriptor = _parse_client(key, entry, errors)
            if descriptor is not None:
                clients[key] = descriptor

    if errors:
        raise CatalogSchemaError(errors)

    return RegistryCatalog(
        version=version,
        last_updated=last_updated,
        clients=clients,
        raw=payload,
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


def http_get(url: str, timeout: float) -> tuple[str, str | None]:
    """GET a URL and return (body, etag).

    ABOUTME: Raises URLError/HTTPError (OSError subclasses) on failure
    ABOUTME: Any non-2xx status or truncated body counts as a failure
    """
    request = Request(
        url,
        headers={
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        },
    )
    with urlopen(request, timeout=timeout) as response:  # noqa: S310
        status = getattr(response, "status", 200)
        if not 200 <= status < 300:
            raise URLError(f"HTTP {status}")
        try:
            body = response.read().decode("utf-8")
        except HTTPException as e:
            raise URLError(f"Incomplete response: {e!r}") from e
        etag = response.headers.get("ETag") or None
    return body, etag


# ---------------------------------------------------------------------------
# Caches
# ---------------------------------------------------------------------------


class MemoryCache:
    """In-process catalog cache with an injectable clock.

    ABOUTME: get() only returns entries younger than their ttl
    """

    def __init__(self, ttl: float = CACHE_TTL, clock: Callable[[], float] = time.time) -> None:
        self.ttl = ttl
        self.clock = clock
        self.entry: CacheEntry | None = None

    def get(self) -> CacheEntry | None:
        """Return the fresh entry, dropping it if it has expired."""
        if self.entry is not None and not self.entry.is_fresh(self.clock()):
            self.entry = None
        return self.entry

    def set(self, catalog: RegistryCatalog, etag: str | None = None) -> CacheEntry:
        self.entry = CacheEntry(data=catalog, etag=etag, fetched_at=self.clock(), ttl=self.ttl)
        return self.entry

    def clear(self) -> None:
        self.entry = None

    def age(self) -> float | None:
        if self.entry is None:
            return None
        return self.clock() - self.entry.fetched_at


class FileCache:
    """Catalog persisted as {data, etag, fetchedAt, ttl} in one JSON file.

    ABOUTME: Written owner-only (0o600) inside an owner-only directory
    ABOUTME: Read and write failures are logged, never raised
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else get_cache_file()

    def exists(self) -> bool:
        return self.path.is_file()

    def write(self, catalog: RegistryCatalog, etag: str | None, ttl: float, fetched_at: float) -> bool:
        """Persist a catalog, replacing any previous cache file.

        ABOUTME: Writes a temp file first, then os.replace() for atomic swap

        Returns:
            True if the cache file was written
        """
        entry = {
            "data": catalog.raw,
            "etag": etag,
            "fetchedAt": int(fetched_at * 1000),
            "ttl": int(ttl * 1000),
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            ensure_cache_dir(self.path.parent)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entry, f, indent=2)
                f.write("\n")
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning(f"Failed to write cache file {self.path}: {e}")
            return False
        return True

    def read(self) -> tuple[RegistryCatalog, str | None] | None:
        """Load the cached catalog and its etag, or None if absent/unusable."""
        if not self.path.is_file():
            return None
        try:
            content = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(content, dict) or not isinstance(content.get("data"), dict):
                logger.warning(f"Ignoring malformed cache file {self.path}")
                return None
            catalog = parse_catalog(content["data"])
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read cache file {self.path}: {e}")
            return None
        etag = content.get("etag")
        return catalog, etag if isinstance(etag, str) else None

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to clear cache file {self.path}: {e}")


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


class CatalogFetcher:
    """Fetches the client catalog through the memory -> network -> file chain.

    ABOUTME: Every collaborator (clock, sleep, HTTP getter, caches) is injectable
    ABOUTME: Not locked: concurrent fetches on one instance are last-writer-wins
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        memory: MemoryCache | None = None,
        file_cache: FileCache | None = None,
        timeout: float = TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        backoff_base: float = BACKOFF_BASE,
        getter: HttpGetter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.url = url if url is not None else get_remote_url()
        self.memory = memory if memory is not None else MemoryCache()
        self.file_cache = file_cache if file_cache is not None else FileCache()
        self.timeout = timeout
        self.retries = retries
        self.backoff_base = backoff_base
        self._get = getter if getter is not None else http_get
        self._sleep = sleep

    async def _fetch_with_retry(self, timeout: float, retries: int) -> tuple[str, str | None]:
        """Try the network up to `retries` times with exponential backoff.

        Each attempt as a whole is bounded by `timeout`; urlopen's own timeout
        only applies to individual socket operations.
        """
        attempts = max(1, retries)
        for attempt in range(attempts):
            try:
                return await asyncio.wait_for(
                    asyncio.to_thread(self._get, self.url, timeout), timeout
                )
            except NETWORK_ERRORS as e:
                if attempt == attempts - 1:
                    raise
                reason = e if str(e) else f"timed out after {timeout:g}s"
                backoff = self.backoff_base * (2 ** attempt)
                logger.warning(
                    f"Fetch attempt {attempt + 1} failed ({reason}), retrying in {backoff:g}s..."
                )
                await self._sleep(backoff)
        raise URLError("All fetch attempts failed")

    async def fetch(
        self,
        force_refresh: bool = False,
        timeout: float | None = None,
        retries: int | None = None,
    ) -> RegistryCatalog:
        """Return the client catalog.

        ABOUTME: timeout=0 disables the network and goes straight to the file cache
        ABOUTME: A file-cache hit may be older than its ttl (availability wins)

        Args:
            force_refresh: Skip the memory cache
            timeout: Per-attempt timeout in seconds (default self.timeout)
            retries: Number of attempts (default self.retries)

        Returns:
            The catalog; a memory hit returns the very same object

        Raises:
            CatalogUnavailableError: If network and file cache both failed
        """
        if not force_refresh:
            entry = self.memory.get()
            if entry is not None:
                logger.debug("Using in-memory catalog cache")
                return entry.data

        self.memory.clear()

        timeout = self.timeout if timeout is None else timeout
        retries = self.retries if retries is None else retries

        if timeout == 0:
            logger.info("Remote fetch disabled, trying file cache")
        else:
            try:
                body, etag = await self._fetch_with_retry(timeout, retries)
                catalog = parse_catalog(json.loads(body))
            except (*NETWORK_ERRORS, ValueError) as e:
                logger.warning(f"Remote fetch failed: {e!r}")
            else:
                entry = self.memory.set(catalog, etag)
                self.file_cache.write(catalog, etag, entry.ttl, entry.fetched_at)
                return catalog

        cached = self.file_cache.read()
        if cached is not None:
            catalog, etag = cached
            logger.warning(f"Using cached configuration from {self.file_cache.path}")
            self.memory.set(catalog, etag)
            return catalog

        raise CatalogUnavailableError(
            "Failed to fetch MCP configuration and no cached data available.\n"
            "Please check your internet connection and try again."
        )

    def clear_cache(self) -> None:
        """Drop the memory entry and delete the cache file."""
        self.memory.clear()
        self.file_cache.clear()

    def cache_status(self) -> dict[str, Any]:
        """Report which caches are populated and the memory entry's age."""
        return {
            "memory": self.memory.entry is not None,
            "file": self.file_cache.exists(),
            "age": self.memory.age(),
        }
