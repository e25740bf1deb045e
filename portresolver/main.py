"""Composition root for the port resolution engine.

This module is the ONLY location that imports both core resolution logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Command-line parsing
- Configuration loading via config module
- Adapter instantiation
- Resolver initialization
- Command dispatch
"""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from portresolver.adapters.cli.commands import CLICommandHandler
from portresolver.adapters.git import GitCheckout
from portresolver.adapters.manifest import (
    ManifestControlFileLoader,
    ManifestFeatureFlagChecker,
)
from portresolver.adapters.registry import BuiltinRegistry, RegistrySet
from portresolver.adapters.versions import JsonVersionDatabase
from portresolver.config import Settings, load_settings
from portresolver.core.baseline_resolver import BaselineResolver
from portresolver.core.errors import FatalResolutionError
from portresolver.core.models import ResolutionContext
from portresolver.core.overlay_resolver import OverlayAndRegistryResolver
from portresolver.core.versioned_resolver import VersionedPortResolver


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.WARNING)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # stdout carries command results, so logs go to stderr
    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="portresolver",
        description="Resolve ports to their control files from overlays, registries and version history.",
    )
    parser.add_argument("--root", dest="vcpkg_root", help="Repository root")
    parser.add_argument(
        "--overlay-ports",
        dest="overlay_ports",
        action="append",
        help="Overlay port directory (repeatable, earlier wins)",
    )
    parser.add_argument("--baseline", help="Commit pinning the baseline document")
    parser.add_argument(
        "--feature-flags",
        dest="feature_flags",
        help="Comma-separated feature flags",
    )
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve the current definition of a port")
    resolve.add_argument("port_name")

    subparsers.add_parser("list", help="List every known port")

    baseline = subparsers.add_parser("baseline", help="Show the default version of a port")
    baseline.add_argument("port_name")

    versions = subparsers.add_parser("versions", help="List the known versions of a port")
    versions.add_argument("port_name")

    show = subparsers.add_parser("show", help="Resolve a specific version of a port")
    show.add_argument("port_name")
    show.add_argument("version", help="Version, optionally with #port-version")

    return parser


def build_context(settings: Settings) -> ResolutionContext:
    """Instantiate adapters and bind them into a resolution context."""
    root = settings.vcpkg_root.resolve()
    loader = ManifestControlFileLoader()
    database = JsonVersionDatabase()

    builtin = BuiltinRegistry(
        ports_dir=root / settings.ports_dir_name,
        loader=loader,
        database=database,
        baseline_file=root / settings.versions_dir_name / "baseline.json",
    )
    checkout = GitCheckout(
        root=root,
        buildtrees_dir=settings.resolved_buildtrees_dir.resolve(),
        git_executable=settings.git_executable,
        timeout_seconds=settings.git_timeout_seconds,
        versions_dir_name=settings.versions_dir_name,
    )

    return ResolutionContext(
        root=root,
        loader=loader,
        registries=RegistrySet(default=builtin),
        database=database,
        checkout=checkout,
        feature_checker=ManifestFeatureFlagChecker(),
        original_cwd=Path.cwd(),
        feature_flags=frozenset(settings.feature_flags),
        versions_dir_name=settings.versions_dir_name,
    )


def build_handler(settings: Settings) -> CLICommandHandler:
    """Wire adapters and resolvers into a CLI command handler.

    Raises:
        OverlayConfigurationError: If a configured overlay path is invalid.
    """
    context = build_context(settings)
    return CLICommandHandler(
        portfiles=OverlayAndRegistryResolver(context, settings.overlay_ports),
        baselines=BaselineResolver(context, settings.baseline),
        versioned=VersionedPortResolver(context),
    )


def execute_command(handler: CLICommandHandler, args: argparse.Namespace) -> dict[str, Any]:
    """Dispatch a parsed command to the handler.

    Raises:
        ValueError: If the command is not recognized.
    """
    if args.command == "resolve":
        return handler.resolve_port(args.port_name)
    elif args.command == "list":
        return handler.list_ports()
    elif args.command == "baseline":
        return handler.get_baseline(args.port_name)
    elif args.command == "versions":
        return handler.list_versions(args.port_name)
    elif args.command == "show":
        return handler.show_version(args.port_name, args.version)
    else:
        raise ValueError(f"Unknown command: {args.command}")


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, wire the application and run one command.

    Returns:
        Process exit code: 0 on success, 1 on an error result.

    Raises:
        FatalResolutionError: On inconsistent or misconfigured sources.
        ValidationError: On invalid configuration.
    """
    args = build_parser().parse_args(argv)

    settings = load_settings(
        vcpkg_root=args.vcpkg_root,
        overlay_ports=args.overlay_ports,
        baseline=args.baseline,
        feature_flags=args.feature_flags,
        debug=args.debug,
    )
    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.debug(f"Using root {settings.vcpkg_root.resolve()}")

    handler = build_handler(settings)
    result = execute_command(handler, args)
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("status") == "success" else 1


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Command succeeded
        1: Error result, invalid configuration or fatal resolution error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        logger.warning("Interrupted by user (SIGINT)")
        sys.exit(130)
    except FatalResolutionError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
