"""CLI entry point for contentdb."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from loguru import logger

from .. import __version__
from ..core.config import Config
from . import commands

DEFAULT_CONFIG_FILES = ("contentdb.yml", "contentdb.yaml")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="contentdb",
        description="Compile content collections into a queryable SQL database",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to the configuration file (default: ./contentdb.yml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=False)

    build_parser = subparsers.add_parser("build", help="Compile all collections")
    build_parser.add_argument(
        "--batch-size",
        type=int,
        help="Documents parsed concurrently per batch (default: 25)",
    )

    dev_parser = subparsers.add_parser("dev", help="Watch content and update the live database")
    dev_parser.add_argument(
        "--poll-interval",
        type=float,
        help="Seconds between filesystem scans (default: 0.5)",
    )

    collections_parser = subparsers.add_parser("collections", help="List resolved collections")
    commands.add_collections_arguments(collections_parser)

    subparsers.add_parser("version", help="Print the integrity version")

    return parser


def configure_logging(verbose: bool) -> None:
    """Route log output to stderr at the requested level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def load_config(path: Path | None) -> Config:
    """Load the configuration file, falling back to environment defaults."""
    if path is not None:
        return Config.from_file(path)
    for name in DEFAULT_CONFIG_FILES:
        candidate = Path.cwd() / name
        if candidate.is_file():
            return Config.from_file(candidate)
    return Config.from_env()


def main() -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)

        if args.command == "build":
            commands.handle_build(args, config)
        elif args.command == "dev":
            commands.handle_dev(args, config)
        elif args.command == "collections":
            commands.handle_collections(args, config)
        elif args.command == "version":
            commands.handle_version(args, config)
        else:
            parser.print_help()

        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
