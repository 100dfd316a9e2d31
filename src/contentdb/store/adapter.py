"""Execution adapter contract.

The build pipeline only produces SQL text. Anything that runs it, whether
the dev live database or a runtime host, implements this three-operation
protocol.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

Row = Mapping[str, Any]
Params = Sequence[Any]


@runtime_checkable
class DatabaseAdapter(Protocol):
    """Minimal SQL execution surface."""

    def first(self, sql: str, params: Params = ()) -> Row | None:
        """Return the first row of a query, or None when it yields nothing."""
        ...

    def all(self, sql: str, params: Params = ()) -> list[Row]:
        """Return every row of a query."""
        ...

    def exec(self, sql: str) -> None:
        """Execute one statement that returns no rows."""
        ...
