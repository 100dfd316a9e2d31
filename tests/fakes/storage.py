"""Fake collections storage with controllable read latency."""

from __future__ import annotations

import asyncio

from contentdb.core.exceptions import StorageKeyError


class RecordingStorage:
    """Storage double that records read concurrency.

    Reads are grouped into waves: a wave starts when a read begins while no
    other read is in flight. With sequential batches every wave is exactly
    one batch.

    Args:
        items: Mapping of global key to document text.
        delays: Optional per-key read delay in seconds.
    """

    def __init__(self, items: dict[str, str], delays: dict[str, float] | None = None):
        self.items = dict(items)
        self.delays = delays or {}
        self.in_flight = 0
        self.max_in_flight = 0
        self.waves: list[list[str]] = []
        self.completion_order: list[str] = []

    async def get_keys(self, base: str) -> list[str]:
        return sorted(k for k in self.items if k.startswith(f"{base}/"))

    async def get_item(self, key: str) -> bytes:
        if self.in_flight == 0:
            self.waves.append([])
        self.waves[-1].append(key)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
            if key not in self.items:
                raise StorageKeyError(key)
            return self.items[key].encode("utf-8")
        finally:
            self.in_flight -= 1
            self.completion_order.append(key)
