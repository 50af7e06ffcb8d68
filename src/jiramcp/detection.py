# ABOUTME: Detects which catalog clients are installed on this host.
# ABOUTME: CLI presence on PATH wins, then the first existing config path.
import asyncio
import logging
import shutil
from pathlib import Path

from jiramcp.models import ClientDescriptor, DetectionResult, PlatformKey
from jiramcp.registry import ClientRegistry
from jiramcp.utils.paths import current_platform, resolve_config_path
from jiramcp.utils.tasks import gather_with_concurrency

logger = logging.getLogger(__name__)


def command_exists(command: str) -> bool:
    """Check whether an executable is on PATH.

    ABOUTME: Uses shutil.which() for cross-platform command lookup
    ABOUTME: Only the first whitespace-delimited token is checked

    Examples:
        >>> command_exists("claude mcp add")  # checks "claude"
        True
    """
    parts = command.split()
    if not parts:
        return False
    return shutil.which(parts[0]) is not None


def path_exists(path: Path) -> bool:
    """Existence check that treats inaccessible paths as missing."""
    try:
        return path.exists()
    except OSError:
        return False


class ToolDetector:
    """Probes the host for every client the registry can locate.

    ABOUTME: Results are cached per client id until clear_cache()
    ABOUTME: concurrency=None runs every probe at once
    """

    def __init__(
        self,
        registry: ClientRegistry,
        platform: PlatformKey | None = None,
        project_dir: Path | None = None,
        concurrency: int | None = None,
    ) -> None:
        self.registry = registry
        self.platform = platform if platform is not None else current_platform()
        self.project_dir = project_dir
        self.concurrency = concurrency
        self._cache: dict[str, DetectionResult] = {}

    def candidate_paths(self, descriptor: ClientDescriptor) -> tuple[Path, ...]:
        templates = self.registry.config_paths(descriptor.id, self.platform)
        return tuple(
            resolve_config_path(template, platform=self.platform, project_dir=self.project_dir)
            for template in templates
        )

    async def detect_tool(self, descriptor: ClientDescriptor) -> DetectionResult:
        """Detect one client.

        Strategy 1: any CLI command on PATH -> detected, primary = first candidate
        Strategy 2: first existing candidate path -> detected
        Otherwise: not detected, primary_path None
        """
        cached = self._cache.get(descriptor.id)
        if cached is not None:
            return cached

        paths = self.candidate_paths(descriptor)
        primary: Path | None = None
        detected = False

        for command in descriptor.cli.values():
            if await asyncio.to_thread(command_exists, command):
                logger.debug(f"{descriptor.id}: found CLI command '{command.split()[0]}'")
                detected = True
                primary = paths[0] if paths else None
                break

        if not detected:
            for path in paths:
                if await asyncio.to_thread(path_exists, path):
                    logger.debug(f"{descriptor.id}: found config at {path}")
                    detected = True
                    primary = path
                    break

        result = DetectionResult(
            id=descriptor.id,
            display_name=descriptor.display_name,
            config_paths=paths,
            primary_path=primary,
            detected=detected,
            descriptor=descriptor,
        )
        self._cache[descriptor.id] = result
        return result

    async def detect_all(self) -> list[DetectionResult]:
        """Detect every client with config locations on this platform.

        ABOUTME: A probe that raises is logged and left out of the results
        ABOUTME: Result order follows registry order, not completion order
        """
        descriptors = self.registry.detectable_on(self.platform)
        outcomes = await gather_with_concurrency(
            self.concurrency,
            *(self.detect_tool(descriptor) for descriptor in descriptors),
        )

        results: list[DetectionResult] = []
        for descriptor, outcome in zip(descriptors, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Detection failed for {descriptor.id}: {outcome}")
                continue
            results.append(outcome)
        return results

    def clear_cache(self) -> None:
        self._cache.clear()
