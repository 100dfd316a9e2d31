"""Collection resolution and produced collection descriptions."""

from .info import collections_index, generate_types
from .resolver import (
    BASE_FIELDS,
    INFO_COLLECTION,
    PAGE_STANDARD_FIELDS,
    extend_schema,
    get_table_name,
    info_collection,
    pascal_case,
    resolve_collection,
    resolve_collections,
    resolve_source,
    split_glob,
)

__all__ = [
    "collections_index",
    "generate_types",
    "BASE_FIELDS",
    "INFO_COLLECTION",
    "PAGE_STANDARD_FIELDS",
    "extend_schema",
    "get_table_name",
    "info_collection",
    "pascal_case",
    "resolve_collection",
    "resolve_collections",
    "resolve_source",
    "split_glob",
]
