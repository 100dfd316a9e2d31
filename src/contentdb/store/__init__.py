"""SQL generation and execution adapters."""

from .adapter import DatabaseAdapter
from .database import Database
from .sql import (
    generate_collection_insert,
    generate_delete,
    generate_drop,
    generate_table_definition,
    quote_identifier,
    sql_literal,
)

__all__ = [
    "DatabaseAdapter",
    "Database",
    "generate_collection_insert",
    "generate_delete",
    "generate_drop",
    "generate_table_definition",
    "quote_identifier",
    "sql_literal",
]
