"""Runtime loading of a compiled dump into an execution adapter."""

from __future__ import annotations

import re
import time
from typing import Sequence

from loguru import logger

from contentdb.collections.resolver import INFO_COLLECTION
from contentdb.core.exceptions import ContentError, IntegrityMismatch
from contentdb.store.adapter import DatabaseAdapter
from contentdb.store.sql import generate_drop, quote_identifier

_CREATE_TABLE = re.compile(r'^\s*CREATE\s+TABLE\s+("(?:[^"]|"")+"|[A-Za-z_][A-Za-z0-9_]*)', re.I)
_VERSION_ROW = re.compile(r"VALUES\s*\('version',\s*'((?:[^']|'')*)'\)\s*$", re.I)


def read_installed_version(adapter: DatabaseAdapter) -> str | None:
    """Return the version recorded in the ``_info`` table, if any."""
    try:
        row = adapter.first(
            f"SELECT version FROM {quote_identifier(INFO_COLLECTION)} WHERE id = ?",
            ("version",),
        )
    except ContentError:
        # No _info table yet
        return None
    return row["version"] if row else None


def dump_version(statements: Sequence[str]) -> str | None:
    """Extract the integrity version carried by a dump's final ``_info`` row."""
    for statement in reversed(statements):
        match = _VERSION_ROW.search(statement)
        if match and INFO_COLLECTION in statement:
            return match.group(1).replace("''", "'")
    return None


def dump_tables(statements: Sequence[str]) -> list[str]:
    """Table names created by a dump, in creation order."""
    tables = []
    for statement in statements:
        match = _CREATE_TABLE.match(statement)
        if match:
            name = match.group(1)
            if name.startswith('"'):
                name = name[1:-1].replace('""', '"')
            tables.append(name)
    return tables


def load_database(
    adapter: DatabaseAdapter,
    statements: Sequence[str],
    version: str,
) -> bool:
    """Install a compiled dump unless the adapter already holds it.

    Args:
        adapter: Execution adapter to load into.
        statements: Decompressed dump statements.
        version: Integrity version of the current collection shapes.

    Returns:
        True if the dump was executed, False if the installed data was
        already at ``version``.

    Raises:
        IntegrityMismatch: If the dump was built for different collection
            shapes than ``version`` describes, or the load did not leave
            the expected version behind.
    """
    embedded = dump_version(statements)
    if embedded != version:
        raise IntegrityMismatch(version, embedded)

    installed = read_installed_version(adapter)
    if installed == version:
        logger.debug(f"Database already at version {version}")
        return False

    start_time = time.perf_counter()
    for table in dump_tables(statements):
        adapter.exec(generate_drop(table))
    for statement in statements:
        adapter.exec(statement)

    installed = read_installed_version(adapter)
    if installed != version:
        raise IntegrityMismatch(version, installed)

    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(f"Loaded {len(statements)} statement(s) at version {version} ({elapsed:.1f}ms)")
    return True
