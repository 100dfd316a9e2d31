"""Storage driver protocol.

A driver binds one collection's key space to a physical store. Drivers are
structural: anything implementing ``get_keys`` and ``get_item`` qualifies,
``watch`` is an optional capability only the dev loop uses.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from contentdb.core.types import ChangeEvent

# Receives events carrying driver-relative keys
WatchCallback = Callable[[ChangeEvent], None]
Unwatch = Callable[[], None]


@runtime_checkable
class StorageDriver(Protocol):
    """Interface every storage driver implements.

    Example implementation:

        class StaticDriver:
            def __init__(self, items: dict[str, bytes]):
                self._items = items

            async def get_keys(self) -> list[str]:
                return sorted(self._items)

            async def get_item(self, key: str) -> bytes:
                return self._items[key]

            def watch(self, callback: WatchCallback) -> Unwatch | None:
                return None

            async def dispose(self) -> None:
                pass
    """

    async def get_keys(self) -> list[str]:
        """Enumerate driver-relative keys.

        Raises:
            StorageError: If enumeration fails.
        """
        ...

    async def get_item(self, key: str) -> bytes:
        """Read the raw bytes stored under a driver-relative key.

        Raises:
            StorageKeyError: If the key does not exist.
            StorageError: If the read fails.
        """
        ...

    def watch(self, callback: WatchCallback) -> Unwatch | None:
        """Start change notification; None when unsupported."""
        ...

    async def dispose(self) -> None:
        """Release driver resources."""
        ...


class BaseDriver:
    """Optional base class providing defaults for the optional capabilities."""

    def watch(self, callback: WatchCallback) -> Unwatch | None:
        """Default: no change notification."""
        return None

    async def dispose(self) -> None:
        """Default: nothing to release."""
        return None
