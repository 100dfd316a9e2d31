"""Filesystem storage driver.

Serves the files below a base directory that match an include glob,
excluding ignore globs. Change notification polls modification times.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from contentdb.core.exceptions import StorageError, StorageKeyError
from contentdb.core.types import ChangeEvent, ChangeType

from .base import BaseDriver, Unwatch, WatchCallback
from .glob_matcher import GlobMatcher


class FileSystemDriver(BaseDriver):
    """Driver for a local directory tree.

    Example:
        driver = FileSystemDriver(Path("content/blog"), include="**/*.md")
        for key in await driver.get_keys():
            data = await driver.get_item(key)
    """

    def __init__(
        self,
        base_path: Path,
        include: str = "**/*",
        ignore: list[str] | tuple[str, ...] = (),
        poll_interval: float = 0.5,
    ) -> None:
        """Initialize filesystem driver.

        Args:
            base_path: Directory the keys are relative to.
            include: Glob selecting files.
            ignore: Glob exclusions.
            poll_interval: Seconds between change scans while watching.

        Raises:
            StorageError: If the base path is missing or not a directory.
        """
        self._base_path = Path(base_path).resolve()
        self._matcher = GlobMatcher(include, ignore)
        self._poll_interval = poll_interval
        self._tasks: set[asyncio.Task] = set()

        if not self._base_path.exists():
            raise StorageError(f"Directory does not exist: {self._base_path}")
        if not self._base_path.is_dir():
            raise StorageError(f"Path is not a directory: {self._base_path}")

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def get_keys(self) -> list[str]:
        try:
            return await asyncio.to_thread(self._matcher.list_matching_files, self._base_path)
        except OSError as e:
            raise StorageError(f"Failed to list {self._base_path}: {e}") from e

    async def get_item(self, key: str) -> bytes:
        file_path = self._base_path / key
        if not file_path.is_file():
            raise StorageKeyError(key)
        try:
            return await asyncio.to_thread(file_path.read_bytes)
        except PermissionError as e:
            raise StorageError(f"Permission denied reading {file_path}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {file_path}: {e}") from e

    def snapshot(self) -> dict[str, int]:
        """Map every matching key to its nanosecond modification time."""
        state: dict[str, int] = {}
        for key in self._matcher.list_matching_files(self._base_path):
            try:
                state[key] = (self._base_path / key).stat().st_mtime_ns
            except OSError as e:
                # Removed between listing and stat
                logger.debug(f"Could not stat {key}: {e}")
        return state

    def watch(self, callback: WatchCallback) -> Unwatch | None:
        """Poll the tree and report updated and removed keys.

        Changes are reported relative to the tree as it is when this is
        called. Must be called from within a running event loop.
        """
        baseline = self.snapshot()
        task = asyncio.get_running_loop().create_task(self._poll(callback, baseline))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug(f"Watching {self._base_path} every {self._poll_interval}s")
        return task.cancel

    async def dispose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _poll(self, callback: WatchCallback, previous: dict[str, int]) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                current = await asyncio.to_thread(self.snapshot)
            except OSError as e:
                logger.warning(f"Failed to scan {self._base_path}: {e}")
                continue
            for event in diff_snapshots(previous, current):
                callback(event)
            previous = current


def diff_snapshots(previous: dict[str, int], current: dict[str, int]) -> list[ChangeEvent]:
    """Compute change events between two mtime snapshots, in key order."""
    events = []
    for key in sorted(previous.keys() | current.keys()):
        if key not in current:
            events.append(ChangeEvent(ChangeType.REMOVE, key))
        elif previous.get(key) != current[key]:
            events.append(ChangeEvent(ChangeType.UPDATE, key))
    return events
