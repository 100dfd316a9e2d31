"""Pipeline entry points.

``build`` compiles every collection into the distributable artifacts and
``dev`` keeps a live database in sync with storage. Both take an explicit
``Config``; nothing is discovered or imported implicitly.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from .build.artifacts import BuildArtifacts, write_artifacts
from .build.dump import generate_sql_dump
from .build.integrity import compute_integrity_version
from .build.watch import DevWatcher
from .collections.resolver import resolve_collections
from .core.config import Config
from .sources.storage import create_collections_storage
from .store.database import Database

if TYPE_CHECKING:
    from .sources.registry import DriverRegistry


@dataclass
class BuildResult:
    """Outcome of a full build."""

    version: str
    statements: list[str]
    artifacts: BuildArtifacts


async def build(config: Config, registry: "DriverRegistry | None" = None) -> BuildResult:
    """Compile all collections and write the build artifacts.

    Args:
        config: Project configuration.
        registry: Optional driver registry (defaults to the built-in one).

    Returns:
        Integrity version, statements and written artifact paths.

    Raises:
        ConfigurationError: On invalid declarations.
        SchemaError: On invalid schemas.
        CollectionsMountError: If any collection cannot be mounted.
        ParseError: If any document fails to parse.
    """
    start_time = time.perf_counter()
    collections = resolve_collections(config.collections, config)
    version = compute_integrity_version(collections)

    storage = await create_collections_storage(collections, config, registry)
    try:
        statements = await generate_sql_dump(
            storage, collections, version, config.batch_size
        )
    finally:
        await storage.dispose()

    artifacts = write_artifacts(config.build_path, collections, statements, version)
    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(f"Build {version} complete ({elapsed:.1f}ms)")
    return BuildResult(version=version, statements=statements, artifacts=artifacts)


async def dev(
    config: Config,
    stop: asyncio.Event | None = None,
    registry: "DriverRegistry | None" = None,
) -> None:
    """Run the dev watch loop until ``stop`` is set (or forever).

    The live database at ``config.database_path`` is rebuilt from a full
    dump on start, then updated one document at a time as storage changes.
    """
    collections = resolve_collections(config.collections, config)
    version = compute_integrity_version(collections)
    storage = await create_collections_storage(collections, config, registry)
    database = Database(config.database_path)
    database.connect()

    watcher = DevWatcher(storage, collections, database, config.batch_size)
    try:
        await watcher.start(version)
        logger.info(f"Live database ready at {config.database_path} ({version})")
        await (stop or asyncio.Event()).wait()
    finally:
        await watcher.stop()
        await storage.dispose()
        database.close()
