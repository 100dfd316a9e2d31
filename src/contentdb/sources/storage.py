"""Collections storage: one namespaced key space over many drivers.

Every collection with a source gets one mount named after the collection.
Global keys have the form ``<collection>/<relative-path>``.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable

from loguru import logger

from contentdb.core.config import Config
from contentdb.core.exceptions import (
    CollectionsMountError,
    ConfigurationError,
    MountError,
    StorageError,
    StorageKeyError,
)
from contentdb.core.types import ChangeEvent, ResolvedCollection, StorageMountOptions

from .base import StorageDriver, Unwatch, WatchCallback
from .registry import DriverRegistry, get_default_registry


def split_key(key: str) -> tuple[str, str]:
    """Split a global key into (collection, relative key)."""
    name, sep, rest = key.partition("/")
    if not sep or not rest:
        raise StorageKeyError(key)
    return name, rest


class CollectionsStorage:
    """Namespaced key-value view over the collection mounts.

    Reads may run concurrently; the storage itself is never written by the
    build pipeline.
    """

    def __init__(self) -> None:
        self._mounts: dict[str, StorageDriver] = {}

    def mount(self, name: str, driver: StorageDriver) -> None:
        if name in self._mounts:
            raise ConfigurationError(f"Mount '{name}' already exists")
        self._mounts[name] = driver
        logger.debug(f"Mounted {type(driver).__name__} at '{name}'")

    def driver(self, name: str) -> StorageDriver | None:
        return self._mounts.get(name)

    @property
    def mounts(self) -> list[str]:
        return list(self._mounts)

    async def get_keys(self, base: str) -> list[str]:
        """List the global keys of one collection, sorted lexicographically.

        Collections without a mount have no keys.
        """
        driver = self._mounts.get(base)
        if driver is None:
            return []
        keys = await driver.get_keys()
        return [f"{base}/{key}" for key in sorted(keys)]

    async def get_item(self, key: str) -> bytes:
        name, relative = split_key(key)
        driver = self._mounts.get(name)
        if driver is None:
            raise StorageKeyError(key)
        return await driver.get_item(relative)

    def watch(self, callback: WatchCallback) -> Unwatch:
        """Subscribe to changes of every mount that supports notification.

        The callback receives events with global keys.
        """
        unwatchers: list[Unwatch] = []
        for name, driver in self._mounts.items():
            watch = getattr(driver, "watch", None)
            if watch is None:
                continue
            unwatch = watch(_prefixed(name, callback))
            if unwatch is None:
                logger.debug(f"Mount '{name}' does not support change notification")
            else:
                unwatchers.append(unwatch)

        def unwatch_all() -> None:
            for unwatch in unwatchers:
                unwatch()

        return unwatch_all

    async def dispose(self) -> None:
        for driver in self._mounts.values():
            await driver.dispose()


def _prefixed(name: str, callback: WatchCallback) -> WatchCallback:
    def forward(event: ChangeEvent) -> None:
        callback(ChangeEvent(event.type, f"{name}/{event.key}"))

    return forward


def generate_storage_mount_options(
    collections: Iterable[ResolvedCollection],
) -> list[StorageMountOptions]:
    """Build mount options for every collection that has a source."""
    from contentdb.collections.resolver import split_glob

    options = []
    for collection in collections:
        source = collection.source
        if source is None:
            continue
        fixed, include = split_glob(source.path)

        if source.repository:
            driver = "repository"
            base = str(Path(source.cwd) / fixed)
        elif source.cwd.startswith(("http://", "https://")):
            driver = "http"
            base = f"{source.cwd}/{fixed}" if fixed else source.cwd
        elif source.cwd.startswith("memory://"):
            driver = "memory"
            base = source.cwd
        else:
            driver = "fs"
            base = str(Path(source.cwd) / fixed)

        options.append(
            StorageMountOptions(
                name=collection.name,
                driver=driver,
                base=base,
                include=include,
                ignore=source.ignore,
                repository=source.repository,
            )
        )
    return options


async def create_collections_storage(
    collections: Iterable[ResolvedCollection],
    config: Config | None = None,
    registry: DriverRegistry | None = None,
) -> CollectionsStorage:
    """Mount every sourced collection.

    All mounts are attempted; failures are collected and raised together so
    several misconfigured collections are reported at once.

    Raises:
        CollectionsMountError: If one or more mounts fail.
    """
    config = config or Config()
    registry = registry or get_default_registry()
    storage = CollectionsStorage()
    failures: list[MountError] = []
    start_time = time.perf_counter()

    for options in generate_storage_mount_options(collections):
        try:
            driver = await registry.create(options, config)
        except (StorageError, ConfigurationError, ValueError, OSError) as e:
            logger.warning(f"Mount failed for '{options.name}': {e}")
            failures.append(MountError(options.name, str(e)))
            continue
        storage.mount(options.name, driver)

    if failures:
        await storage.dispose()
        raise CollectionsMountError(failures)

    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(f"Mounted {len(storage.mounts)} collection(s) in {elapsed:.1f}ms")
    return storage
