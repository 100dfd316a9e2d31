"""Tests for the sqlite3 database adapter."""

from pathlib import Path

import pytest

from contentdb.core.exceptions import DatabaseError
from contentdb.store.adapter import DatabaseAdapter
from contentdb.store.database import Database


class TestDatabase:
    """Tests for Database."""

    def test_is_adapter(self, db: Database):
        """Database satisfies the adapter protocol."""
        assert isinstance(db, DatabaseAdapter)

    def test_first_and_all(self, db: Database):
        """first returns one row dict, all returns every row."""
        db.exec("CREATE TABLE t (id INT, name VARCHAR)")
        db.exec("INSERT INTO t (id, name) VALUES (1, 'a')")
        db.exec("INSERT INTO t (id, name) VALUES (2, 'b')")

        assert db.first("SELECT * FROM t WHERE id = ?", (2,)) == {"id": 2, "name": "b"}
        assert db.all("SELECT name FROM t ORDER BY id") == [{"name": "a"}, {"name": "b"}]
        assert db.first("SELECT * FROM t WHERE id = ?", (3,)) is None

    def test_transaction_commits(self, db: Database):
        """Statements in a transaction are committed together."""
        db.exec("CREATE TABLE t (id INT)")
        with db.transaction() as tx:
            tx.exec("INSERT INTO t (id) VALUES (1)")
            tx.exec("INSERT INTO t (id) VALUES (2)")

        assert len(db.all("SELECT * FROM t")) == 2

    def test_transaction_rolls_back_ddl_and_dml(self, db: Database):
        """A failing transaction leaves no trace, DDL included."""
        db.exec("CREATE TABLE t (id INT)")
        db.exec("INSERT INTO t (id) VALUES (1)")

        with pytest.raises(DatabaseError):
            with db.transaction() as tx:
                tx.exec("DROP TABLE t")
                tx.exec("CREATE TABLE t (id INT, extra INT)")
                tx.exec("INSERT INTO missing VALUES (1)")

        assert db.all("SELECT * FROM t") == [{"id": 1}]

    def test_nested_transaction_rejected(self, db: Database):
        """Transactions cannot nest."""
        with pytest.raises(DatabaseError, match="Nested"):
            with db.transaction():
                with db.transaction():
                    pass

    def test_not_connected(self):
        """Queries on a closed database fail."""
        with pytest.raises(DatabaseError, match="not connected"):
            Database().exec("SELECT 1")

    def test_file_database(self, tmp_path: Path):
        """File databases create their parent directory."""
        path = tmp_path / "nested" / "items.db"
        with Database(path) as database:
            database.exec("CREATE TABLE t (id INT)")
            assert database.table_exists("t")
        assert path.exists()

    def test_invalid_sql(self, db: Database):
        """SQL errors surface as DatabaseError."""
        with pytest.raises(DatabaseError, match="Query execution failed"):
            db.exec("SELEKT 1")
