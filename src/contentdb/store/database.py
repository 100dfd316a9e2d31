"""SQLite database connection manager for contentdb."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Sequence

from loguru import logger

from ..core.exceptions import DatabaseError

MEMORY = ":memory:"


class Database:
    """SQLite database connection manager.

    Implements the ``DatabaseAdapter`` protocol (``first``, ``all``,
    ``exec``) on top of a single sqlite3 connection. The connection runs in
    autocommit mode; ``transaction()`` opens an explicit transaction so DDL
    and DML can be applied atomically together.
    """

    def __init__(self, path: Path | str = MEMORY):
        """Initialize database with path.

        Args:
            path: Path to the SQLite database file, or ``":memory:"``.
        """
        self.path = path if path == MEMORY else Path(path)
        self._connection: sqlite3.Connection | None = None
        self._in_transaction = False

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def connect(self) -> None:
        """Open the database connection."""
        try:
            if isinstance(self.path, Path):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(str(self.path), isolation_level=None)
            self._connection.row_factory = sqlite3.Row
        except Exception as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e
        logger.debug(f"Connected to database: {self.path}")

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            try:
                self._connection.close()
            except Exception as e:
                raise DatabaseError(f"Failed to close database: {e}") from e
            finally:
                self._connection = None

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """Context manager for database transactions.

        Every statement executed inside the block is committed together,
        or rolled back together if the block raises.

        Yields:
            This database.

        Raises:
            DatabaseError: If connection is not available or transaction fails.
        """
        connection = self._require_connection()
        if self._in_transaction:
            raise DatabaseError("Nested transactions are not supported")

        connection.execute("BEGIN")
        self._in_transaction = True
        try:
            yield self
            connection.execute("COMMIT")
        except Exception as e:
            connection.execute("ROLLBACK")
            if isinstance(e, DatabaseError):
                raise
            raise DatabaseError(f"Transaction failed: {e}") from e
        finally:
            self._in_transaction = False

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        """Execute a SQL query.

        Args:
            sql: SQL statement to execute.
            params: Parameters for the SQL statement.

        Returns:
            A cursor with the query results.

        Raises:
            DatabaseError: If connection is not available or query fails.
        """
        connection = self._require_connection()
        try:
            return connection.execute(sql, tuple(params))
        except Exception as e:
            raise DatabaseError(f"Query execution failed: {e}") from e

    # =========================================================================
    # Adapter protocol
    # =========================================================================

    def first(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        row = self.execute(sql, params).fetchone()
        return dict(row) if row is not None else None

    def all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return [dict(row) for row in self.execute(sql, params).fetchall()]

    def exec(self, sql: str) -> None:
        self.execute(sql)

    def table_exists(self, name: str) -> bool:
        row = self.first(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
        )
        return row is not None

    def _require_connection(self) -> sqlite3.Connection:
        if not self._connection:
            raise DatabaseError("Database not connected")
        return self._connection
