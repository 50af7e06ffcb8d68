# CLI interface for jiramcp
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from jiramcp import __version__
from jiramcp.config import TIMEOUT
from jiramcp.detection import ToolDetector
from jiramcp.fetcher import CatalogFetcher, CatalogUnavailableError
from jiramcp.installer import install_many, install_one
from jiramcp.models import Credentials, InstallRequest, InstallResult, SetupOptions
from jiramcp.registry import ClientRegistry, create_registry
from jiramcp.validation import validate_batch_scopes

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config/argument error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3

REQUEST_SCOPES = ("user", "project")


def _add_credential_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-b", "--base-url", "--url",
        dest="base_url",
        help="Jira base URL (e.g. https://jira.example.com)"
    )
    parser.add_argument(
        "-u", "--username",
        help="Jira username"
    )
    parser.add_argument(
        "-p", "--password",
        help="Jira password or API token"
    )
    parser.add_argument(
        "-s", "--scope",
        default="user",
        help="Configuration scope: user (default) or project"
    )


def _add_setup_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c", "--cli",
        help="Target AI tool id (see 'clients')"
    )
    _add_credential_arguments(parser)


def _options_from_namespace(
    ns: argparse.Namespace,
    known_clients: list[str] | None = None,
) -> SetupOptions | None:
    if not ns.cli or not ns.base_url or not ns.username or not ns.password:
        return None
    if ns.scope not in REQUEST_SCOPES:
        return None
    if known_clients is not None and ns.cli not in known_clients:
        return None
    return SetupOptions(
        cli=ns.cli,
        base_url=ns.base_url,
        username=ns.username,
        password=ns.password,
        scope=ns.scope,
    )


def parse_setup_args(
    argv: list[str],
    known_clients: list[str] | None = None,
) -> SetupOptions | None:
    """Parse setup arguments into SetupOptions.

    ABOUTME: Returns None on missing or invalid input, never a partial object
    ABOUTME: Unrecognized tokens are ignored

    Args:
        argv: Arguments after the setup command
        known_clients: Valid --cli values; None accepts any id

    Returns:
        SetupOptions, or None if the arguments are unusable

    Examples:
        >>> parse_setup_args(["-c", "cursor", "-b", "https://x", "-u", "u", "-p", "p"]).scope
        'user'
        >>> parse_setup_args(["-c", "cursor"]) is None
        True
    """
    parser = argparse.ArgumentParser(add_help=False, exit_on_error=False)
    _add_setup_arguments(parser)
    try:
        ns, _unknown = parser.parse_known_args(argv)
    except argparse.ArgumentError:
        return None
    return _options_from_namespace(ns, known_clients)


def _build_fetcher(args: argparse.Namespace) -> CatalogFetcher:
    return CatalogFetcher(timeout=0 if getattr(args, "offline", False) else TIMEOUT)


def _load_registry(args: argparse.Namespace, fetcher: CatalogFetcher) -> ClientRegistry:
    return asyncio.run(create_registry(fetcher, force_refresh=getattr(args, "refresh", False)))


def _print_result(result: InstallResult) -> None:
    if result.success:
        suffix = " (fallback)" if result.used_fallback else ""
        print(f"  {result.tool_name} - {result.actual_scope}{suffix}: {result.config_path}")
        if result.backup_name:
            print(f"    backup: {result.backup_name}")
    else:
        print(f"  {result.tool_name} - failed: {result.error_message}")


def cmd_setup(args: argparse.Namespace) -> int:
    """Execute setup command.

    ABOUTME: Installs the Jira server into a single tool
    ABOUTME: Returns exit code based on the install result
    """
    print(f"jira-mcp-installer setup v{__version__}")

    try:
        registry = _load_registry(args, _build_fetcher(args))

        options = _options_from_namespace(args, registry.names())
        if options is None:
            print("Error: setup requires --cli, --base-url, --username and --password.")
            print(f"       --cli must be one of: {', '.join(registry.names())}")
            print("       --scope must be user or project.")
            return EXIT_CONFIG_ERROR

        descriptor = registry.get(options.cli)
        detector = ToolDetector(registry, project_dir=Path.cwd())
        tool = asyncio.run(detector.detect_tool(descriptor))
        request = InstallRequest(
            tool=tool,
            scope=options.scope,
            credentials=options.credentials,
            registry=registry,
        )
        result = asyncio.run(install_one(request, project_dir=Path.cwd()))

        print()
        _print_result(result)
        return EXIT_SUCCESS if result.success else EXIT_PARTIAL

    except CatalogUnavailableError as e:
        print(f"Error: {e}")
        return EXIT_FATAL
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_install(args: argparse.Namespace) -> int:
    """Execute install command.

    ABOUTME: Detects tools, validates scope, installs into all of them at once
    ABOUTME: Tools without any usable scope are skipped, not failed
    """
    print(f"jira-mcp-installer install v{__version__}")

    if not args.base_url or not args.username or not args.password:
        print("Error: install requires --base-url, --username and --password.")
        return EXIT_CONFIG_ERROR
    if args.scope not in REQUEST_SCOPES:
        print(f"Error: invalid scope '{args.scope}' (expected user or project).")
        return EXIT_CONFIG_ERROR

    credentials = Credentials(
        base_url=args.base_url,
        username=args.username,
        password=args.password,
    )

    try:
        registry = _load_registry(args, _build_fetcher(args))
        detector = ToolDetector(registry, project_dir=Path.cwd(), concurrency=args.concurrency)
        detected = asyncio.run(detector.detect_all())

        if args.tools:
            wanted = [name.strip() for name in args.tools.split(",") if name.strip()]
            by_id = {tool.id: tool for tool in detected}
            unknown = [name for name in wanted if name not in by_id]
            if unknown:
                print(f"Error: unknown tool(s): {', '.join(unknown)}")
                return EXIT_CONFIG_ERROR
            tools = [by_id[name] for name in wanted]
        else:
            tools = [tool for tool in detected if tool.detected]

        if not tools:
            print("No AI tools detected. Use --tools to pick tools explicitly.")
            return EXIT_SUCCESS

        validations = validate_batch_scopes(tools, args.scope, registry)
        requests: list[InstallRequest] = []
        for tool, validation in zip(tools, validations):
            if validation.warning_message:
                print(f"  Warning: {validation.warning_message}")
            if not validation.is_compatible and validation.fallback_scope is None:
                print(f"  Skipping {tool.display_name}")
                continue
            requests.append(
                InstallRequest(
                    tool=tool,
                    scope=args.scope,
                    credentials=credentials,
                    registry=registry,
                )
            )

        print()
        print(f"Installing into {len(requests)} tool(s)...")
        results = asyncio.run(
            install_many(requests, concurrency=args.concurrency, project_dir=Path.cwd())
        )
        for result in results:
            _print_result(result)

        succeeded = sum(1 for r in results if r.success)
        print()
        print(f"Install complete: {succeeded}/{len(results)} tools configured")
        return EXIT_SUCCESS if succeeded == len(results) else EXIT_PARTIAL

    except CatalogUnavailableError as e:
        print(f"Error: {e}")
        return EXIT_FATAL
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_detect(args: argparse.Namespace) -> int:
    """Execute detect command."""
    print(f"jira-mcp-installer detect v{__version__}")
    print()

    try:
        registry = _load_registry(args, _build_fetcher(args))
        detector = ToolDetector(registry, project_dir=Path.cwd())
        results = asyncio.run(detector.detect_all())

        for result in results:
            mark = "x" if result.detected else " "
            location = result.primary_path or "-"
            print(f"  [{mark}] {result.id:<20} {location}")

        found = sum(1 for r in results if r.detected)
        print()
        print(f"Detected: {found}/{len(results)} tool(s)")
        return EXIT_SUCCESS

    except CatalogUnavailableError as e:
        print(f"Error: {e}")
        return EXIT_FATAL
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_clients(args: argparse.Namespace) -> int:
    """Execute clients command."""
    try:
        registry = _load_registry(args, _build_fetcher(args))
        meta = registry.metadata()
        print(f"Catalog {meta['version']} (updated {meta['last_updated']})")
        print()

        for client in registry.all():
            print(f"  {client.id}")
            print(f"    name: {client.display_name}")
            print(f"    scopes: {', '.join(client.scopes) or '-'}")
            print(f"    wrapper: {client.config_format.wrapper_key}")
            print(f"    format: {registry.config_format_of(client.id)}")
            print()

        print(f"Total: {meta['client_count']} client(s)")
        return EXIT_SUCCESS

    except CatalogUnavailableError as e:
        print(f"Error: {e}")
        return EXIT_FATAL
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_cache(args: argparse.Namespace) -> int:
    """Execute cache status / cache clear."""
    fetcher = CatalogFetcher()

    if args.action == "clear":
        fetcher.clear_cache()
        print(f"Cleared catalog cache ({fetcher.file_cache.path})")
        return EXIT_SUCCESS

    status = fetcher.cache_status()
    print(f"Cache file: {fetcher.file_cache.path}")
    print(f"  on disk: {'yes' if status['file'] else 'no'}")
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jira-mcp-installer",
        description="Configure the Jira MCP server in your AI coding tools"
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"jira-mcp-installer v{__version__}"
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use the cached client catalog only"
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore the in-memory catalog cache"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # setup command
    setup_parser = subparsers.add_parser(
        "setup",
        help="Configure a single AI tool"
    )
    _add_setup_arguments(setup_parser)

    # install command
    install_parser = subparsers.add_parser(
        "install",
        help="Configure all detected AI tools"
    )
    _add_credential_arguments(install_parser)
    install_parser.add_argument(
        "--tools",
        help="Comma-separated tool ids (default: all detected tools)"
    )
    install_parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum simultaneous installs (default: unlimited)"
    )

    # detect command
    subparsers.add_parser(
        "detect",
        help="Show which AI tools are installed"
    )

    # clients command
    subparsers.add_parser(
        "clients",
        help="List AI tools known to the catalog"
    )

    # cache command
    cache_parser = subparsers.add_parser(
        "cache",
        help="Inspect or clear the catalog cache"
    )
    cache_parser.add_argument(
        "action",
        choices=["status", "clear"],
        help="status or clear"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Dispatch to command
    if args.command == "setup":
        return cmd_setup(args)
    elif args.command == "install":
        return cmd_install(args)
    elif args.command == "detect":
        return cmd_detect(args)
    elif args.command == "clients":
        return cmd_clients(args)
    elif args.command == "cache":
        return cmd_cache(args)
    else:
        # No command specified, show help
        parser.print_help()
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
