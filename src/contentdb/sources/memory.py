"""In-memory storage driver."""

from __future__ import annotations

from contentdb.core.exceptions import StorageKeyError
from contentdb.core.types import ChangeEvent, ChangeType

from .base import BaseDriver, Unwatch, WatchCallback


class MemoryDriver(BaseDriver):
    """Dict-backed driver.

    Writes notify watchers synchronously, which makes it convenient for
    programmatic content and for exercising the dev watch loop.
    """

    def __init__(self, items: dict[str, bytes | str] | None = None) -> None:
        self._items: dict[str, bytes] = {}
        self._watchers: list[WatchCallback] = []
        for key, value in (items or {}).items():
            self._items[key] = value.encode() if isinstance(value, str) else value

    async def get_keys(self) -> list[str]:
        return sorted(self._items)

    async def get_item(self, key: str) -> bytes:
        try:
            return self._items[key]
        except KeyError:
            raise StorageKeyError(key) from None

    def set_item(self, key: str, value: bytes | str) -> None:
        self._items[key] = value.encode() if isinstance(value, str) else value
        self._notify(ChangeEvent(ChangeType.UPDATE, key))

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._notify(ChangeEvent(ChangeType.REMOVE, key))

    def watch(self, callback: WatchCallback) -> Unwatch | None:
        self._watchers.append(callback)

        def unwatch() -> None:
            if callback in self._watchers:
                self._watchers.remove(callback)

        return unwatch

    def _notify(self, event: ChangeEvent) -> None:
        for callback in list(self._watchers):
            callback(event)
