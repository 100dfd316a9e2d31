"""Integrity version of a set of collection shapes."""

from __future__ import annotations

from typing import Iterable

from contentdb.core.types import ResolvedCollection
from contentdb.utils.hashing import short_hash

VERSION_PREFIX = "v1"


def compute_integrity_version(
    collections: Iterable[ResolvedCollection],
    prefix: str = VERSION_PREFIX,
) -> str:
    """Compute ``<prefix>-<hash>`` over the ordered table definitions.

    The DDL carries each table's name, column names, types and defaults, so
    the version changes whenever a table is added, removed, renamed,
    reordered or reshaped. Documents never affect it.
    """
    definitions = "-".join(c.table_definition for c in collections)
    return f"{prefix}-{short_hash(definitions)}"
