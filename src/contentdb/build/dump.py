"""Full SQL dump generation.

The dump opens with the DDL of every collection in declaration order,
followed by one INSERT per document, collection by collection in key order. Documents are parsed in fixed-size
batches: every key of a batch is parsed concurrently, batches run one after
another. A final ``_info`` row records the integrity version.
"""

from __future__ import annotations

import asyncio
import time
from typing import Iterator, Sequence, TypeVar

from loguru import logger

from contentdb.collections.resolver import INFO_COLLECTION, info_collection
from contentdb.content.parser import ParsedContentRecord, parse_content
from contentdb.core.types import ResolvedCollection
from contentdb.sources.storage import CollectionsStorage
from contentdb.store.sql import generate_collection_insert

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 25


def chunks(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


async def _parse_batch(
    storage: CollectionsStorage,
    collection: ResolvedCollection,
    keys: Sequence[str],
) -> list[ParsedContentRecord]:
    tasks = [asyncio.create_task(parse_content(storage, collection, key)) for key in keys]
    try:
        # gather keeps input order regardless of completion order
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def generate_sql_dump(
    storage: CollectionsStorage,
    collections: Sequence[ResolvedCollection],
    integrity_version: str,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[str]:
    """Generate the ordered statement list for all collections.

    Args:
        storage: Mounted collections storage.
        collections: Resolved collections, ``_info`` included.
        integrity_version: Version recorded in the ``_info`` row.
        batch_size: Number of keys parsed concurrently.

    Returns:
        SQL statements: all DDL, then inserts, ``_info`` row last.

    Raises:
        ParseError: If any document fails to parse. No partial dump is
            returned.
        StorageError: If a read fails.
    """
    start_time = time.perf_counter()
    info = next((c for c in collections if c.name == INFO_COLLECTION), None)
    tables = list(collections)
    if info is None:
        info = info_collection()
        tables.append(info)

    statements = [c.table_definition for c in tables]
    documents = 0

    for collection in collections:
        if collection is info:
            continue

        keys = await storage.get_keys(collection.name)
        logger.debug(f"Collection '{collection.name}': {len(keys)} document(s)")

        for batch in chunks(keys, batch_size):
            records = await _parse_batch(storage, collection, batch)
            statements.extend(generate_collection_insert(collection, r) for r in records)
            documents += len(records)

    statements.append(
        generate_collection_insert(info, {"id": "version", "version": integrity_version})
    )

    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"Generated dump: {len(collections)} collection(s), {documents} document(s), "
        f"{len(statements)} statement(s) ({elapsed:.1f}ms)"
    )
    return statements
