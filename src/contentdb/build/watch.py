"""Dev watch loop.

Keeps a live database in sync with storage while developing. Each changed
key moves through ``Idle -> ChangeDetected -> Reparsing -> Committed`` and
back to ``Idle``. Changes to the same key that arrive while it is being
reparsed coalesce into one follow-up reparse of the latest content; a
result computed from superseded content is never committed. A failed parse
is logged and discarded, leaving the previously committed row in place.
Every commit replaces a single row inside one transaction, so readers never
see a partially applied change.
"""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Callable, Sequence

from loguru import logger

from contentdb.content.parser import parse_content
from contentdb.core.exceptions import (
    DatabaseError,
    ParseError,
    StorageError,
    StorageKeyError,
)
from contentdb.core.types import ChangeEvent, ChangeType, ResolvedCollection
from contentdb.sources.base import Unwatch
from contentdb.sources.storage import CollectionsStorage, split_key
from contentdb.store.database import Database
from contentdb.store.sql import generate_collection_insert, generate_delete, generate_drop

from .dump import DEFAULT_BATCH_SIZE, generate_sql_dump

KEY_COLUMN = "contentId"

TransitionListener = Callable[[str, "WatchState"], None]


class WatchState(str, Enum):
    """Per-key state of the dev watch loop."""

    IDLE = "idle"
    CHANGE_DETECTED = "change_detected"
    REPARSING = "reparsing"
    COMMITTED = "committed"


class DevWatcher:
    """Applies storage change events to a live database one key at a time.

    Example:
        watcher = DevWatcher(storage, collections, database)
        await watcher.start(version)
        ...
        await watcher.stop()
    """

    def __init__(
        self,
        storage: CollectionsStorage,
        collections: Sequence[ResolvedCollection],
        database: Database,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_transition: TransitionListener | None = None,
    ):
        """Initialize the watcher.

        Args:
            storage: Mounted collections storage to watch.
            collections: Resolved collections, ``_info`` included.
            database: Connected live database.
            batch_size: Batch size for the cold-start dump.
            on_transition: Optional callback receiving every state change.
        """
        self._storage = storage
        self._collections = list(collections)
        self._by_name = {c.name: c for c in collections}
        self._database = database
        self._batch_size = batch_size
        self._on_transition = on_transition

        self._states: dict[str, WatchState] = {}
        self._generations: dict[str, int] = {}
        self._pending: dict[str, ChangeEvent] = {}
        self._workers: dict[str, asyncio.Task] = {}
        self._commit_lock = asyncio.Lock()
        self._unwatch: Unwatch | None = None

    @property
    def running(self) -> bool:
        return self._unwatch is not None

    def state(self, key: str) -> WatchState:
        return self._states.get(key, WatchState.IDLE)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def cold_start(self, integrity_version: str) -> None:
        """Rebuild the live database from a full dump.

        The previous tables are dropped and the dump applied in a single
        transaction.

        Raises:
            ParseError: If any document fails to parse.
            DatabaseError: If the dump cannot be applied.
        """
        start_time = time.perf_counter()
        statements = await generate_sql_dump(
            self._storage, self._collections, integrity_version, self._batch_size
        )
        with self._database.transaction() as db:
            for collection in self._collections:
                db.exec(generate_drop(collection.table_name))
            for statement in statements:
                db.exec(statement)
        elapsed = (time.perf_counter() - start_time) * 1000
        logger.info(f"Live database rebuilt ({elapsed:.1f}ms)")

    async def start(self, integrity_version: str) -> None:
        """Cold start the live database, then begin watching storage."""
        if self.running:
            return
        await self.cold_start(integrity_version)
        self._unwatch = self._storage.watch(self.notify)
        logger.info(f"Watching {len(self._storage.mounts)} mount(s) for changes")

    async def stop(self) -> None:
        """Stop watching and cancel in-flight reparses."""
        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None
        workers = list(self._workers.values())
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        self._workers.clear()
        self._pending.clear()

    async def wait_idle(self) -> None:
        """Wait until every scheduled change has been processed."""
        while self._workers:
            await asyncio.gather(*list(self._workers.values()), return_exceptions=True)

    # =========================================================================
    # Change handling
    # =========================================================================

    def notify(self, event: ChangeEvent) -> None:
        """Record a change event and schedule its processing.

        Must be called from the event loop thread.
        """
        key = event.key
        try:
            name, _ = split_key(key)
        except StorageKeyError:
            logger.warning(f"Ignoring change for malformed key: {key}")
            return
        if name not in self._by_name:
            logger.debug(f"Ignoring change outside known collections: {key}")
            return

        self._generations[key] = self._generations.get(key, 0) + 1
        self._pending[key] = event
        self._transition(key, WatchState.CHANGE_DETECTED)

        if key not in self._workers:
            task = asyncio.get_running_loop().create_task(self._drain(key))
            self._workers[key] = task

    async def _drain(self, key: str) -> None:
        try:
            while key in self._pending:
                event = self._pending.pop(key)
                try:
                    await self._process(event, self._generations[key])
                except Exception:
                    logger.exception(f"Unexpected error applying change to {key}")
                    self._transition(key, WatchState.IDLE)
        finally:
            self._workers.pop(key, None)

    async def _process(self, event: ChangeEvent, generation: int) -> None:
        key = event.key
        collection = self._by_name[split_key(key)[0]]
        self._transition(key, WatchState.REPARSING)

        statements = [generate_delete(collection, KEY_COLUMN, key)]
        if event.type is ChangeType.UPDATE:
            try:
                record = await parse_content(self._storage, collection, key)
            except StorageKeyError:
                # Removed before it could be read
                logger.debug(f"{key} disappeared before reparse, removing")
            except (ParseError, StorageError) as e:
                logger.error(f"Discarding change to {key}: {e}")
                self._transition(key, WatchState.IDLE)
                return
            else:
                statements.append(generate_collection_insert(collection, record))

        if self._generations.get(key) != generation:
            logger.debug(f"Superseded change to {key}, reparsing latest content")
            return

        async with self._commit_lock:
            try:
                with self._database.transaction() as db:
                    for statement in statements:
                        db.exec(statement)
            except DatabaseError as e:
                logger.error(f"Failed to commit change to {key}: {e}")
                self._transition(key, WatchState.IDLE)
                return

        action = "Removed" if len(statements) == 1 else "Updated"
        logger.info(f"{action} {key}")
        self._transition(key, WatchState.COMMITTED)
        if key not in self._pending:
            self._transition(key, WatchState.IDLE)

    def _transition(self, key: str, state: WatchState) -> None:
        self._states[key] = state
        if self._on_transition is not None:
            self._on_transition(key, state)
