"""Build commands for contentdb CLI."""

import asyncio

from ... import app
from ...build.integrity import compute_integrity_version
from ...collections.resolver import resolve_collections
from ...core.config import Config


def handle_build(args, config: Config) -> None:
    """Compile all collections into the build directory.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    if args.batch_size:
        config.batch_size = args.batch_size

    result = asyncio.run(app.build(config))
    print(f"✓ Built {len(result.statements)} statements")
    print(f"  Version: {result.version}")
    print(f"  Output:  {result.artifacts.dump.parent}")


def handle_version(args, config: Config) -> None:
    """Print the integrity version of the configured collections."""
    collections = resolve_collections(config.collections, config)
    print(compute_integrity_version(collections))
