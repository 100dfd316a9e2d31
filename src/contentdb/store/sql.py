"""SQL text generation for collection tables.

Only produces statements; execution is left to a database adapter.
"""

from __future__ import annotations

import json
import math
import re
from typing import TYPE_CHECKING, Any, Mapping

from contentdb.schema.fields import Schema

if TYPE_CHECKING:
    from contentdb.core.types import ResolvedCollection

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Words that cannot be used as bare column names
_RESERVED = frozenset(
    {
        "all", "and", "as", "between", "by", "case", "check", "collate", "column",
        "constraint", "create", "default", "delete", "desc", "distinct", "drop",
        "else", "end", "exists", "foreign", "from", "group", "having", "in",
        "index", "insert", "into", "is", "join", "key", "like", "limit", "not",
        "null", "on", "or", "order", "primary", "references", "select", "set",
        "table", "then", "to", "union", "unique", "update", "using", "values",
        "when", "where",
    }
)


def quote_identifier(name: str) -> str:
    """Quote an identifier only when it is not a plain, unreserved name."""
    if _IDENTIFIER.match(name) and name.lower() not in _RESERVED:
        return name
    return '"' + name.replace('"', '""') + '"'


def sql_literal(value: Any) -> str:
    """Render a Python scalar as a SQL literal.

    Args:
        value: None, bool, int, float or str.

    Returns:
        Escaped literal text.

    Raises:
        TypeError: For values with no scalar literal form.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return "NULL"
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    raise TypeError(f"Cannot render {type(value).__name__} as a SQL literal")


def generate_table_definition(
    table_name: str,
    schema: Schema,
    primary_key: str,
) -> str:
    """Build the CREATE TABLE statement for a schema.

    Columns follow the schema's declaration order.

    Args:
        table_name: Target table name.
        schema: Extended schema of the collection.
        primary_key: Column holding the primary key.

    Returns:
        DDL statement text.
    """
    columns = []
    for name, descriptor in schema.items():
        column = f"{quote_identifier(name)} {descriptor.sql_type}"
        if name == primary_key:
            column += " PRIMARY KEY"
        elif descriptor.has_default:
            default = descriptor.default
            if descriptor.is_json:
                default = json.dumps(default, separators=(",", ":"), ensure_ascii=False)
            column += f" DEFAULT {sql_literal(default)}"
        columns.append(column)
    return f"CREATE TABLE {quote_identifier(table_name)} ({', '.join(columns)})"


def generate_collection_insert(
    collection: "ResolvedCollection",
    record: Mapping[str, Any],
) -> str:
    """Build the INSERT statement for one parsed record.

    JSON fields are expected to be encoded text already and are written as
    opaque strings; scalar fields become typed literals. Fields missing from
    the record are written as NULL.

    Args:
        collection: Resolved collection the record belongs to.
        record: Parsed (and validated) record.

    Returns:
        INSERT statement text.
    """
    names = collection.extended_schema.names()
    columns = ", ".join(quote_identifier(n) for n in names)
    values = ", ".join(sql_literal(record.get(n)) for n in names)
    return f"INSERT INTO {quote_identifier(collection.table_name)} ({columns}) VALUES ({values})"


def generate_delete(collection: "ResolvedCollection", key_column: str, key: str) -> str:
    """Build the DELETE statement removing one row by key."""
    return (
        f"DELETE FROM {quote_identifier(collection.table_name)} "
        f"WHERE {quote_identifier(key_column)} = {sql_literal(key)}"
    )


def generate_drop(table_name: str) -> str:
    return f"DROP TABLE IF EXISTS {quote_identifier(table_name)}"
