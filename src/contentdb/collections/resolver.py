"""Collection resolution.

Turns user declarations into ``ResolvedCollection`` objects: extends each
schema with the generated structural fields of its type, derives the table
name and DDL, and resolves the declared source to an absolute location.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable, Mapping

from loguru import logger

from contentdb.core.config import CollectionDeclaration, Config
from contentdb.core.exceptions import ConfigurationError, SchemaError
from contentdb.core.types import (
    CollectionSource,
    CollectionType,
    GeneratedFields,
    ResolvedCollection,
)
from contentdb.schema import fields as f
from contentdb.schema.fields import FieldKind, Schema, schema_from_spec
from contentdb.sources.repository import parse_repository
from contentdb.store.sql import generate_table_definition

INFO_COLLECTION = "_info"

# Fields every document collection gains
BASE_FIELDS: dict[str, f.Field] = {
    "contentId": f.string(),
    "stem": f.string(),
    "extension": f.string(),
    "meta": f.obj(),
}

# Fields only synthesized for page collections
PAGE_GENERATED = ("path", "body")

# Page fields a user may redeclare with a narrower shape
PAGE_STANDARD_FIELDS: dict[str, f.Field] = {
    "title": f.string(default=""),
    "description": f.string(default=""),
    "seo": f.obj(
        {"title": f.string(optional=True), "description": f.string(optional=True)},
        optional=True,
    ),
    "navigation": f.json_field(default=True),
}

INFO_SCHEMA = Schema({"id": f.string(), "version": f.string()})

_GLOB_CHARS = re.compile(r"[*?\[\]{}]")


def resolve_collections(
    declarations: Iterable[CollectionDeclaration] | Mapping[str, Any],
    config: Config | None = None,
) -> list[ResolvedCollection]:
    """Resolve collection declarations.

    The reserved ``_info`` collection is appended after the declared ones.
    Problems with the declarations themselves (names, types, sources) raise
    ``ConfigurationError``; problems with field declarations raise
    ``SchemaError``. A duplicate collection name is a declaration problem.

    Args:
        declarations: Declarations, or a mapping of name to declaration dict.
        config: Configuration used to resolve source locations.

    Returns:
        Resolved collections in declaration order, ``_info`` last.

    Raises:
        ConfigurationError: On duplicate or reserved names, unknown types,
            colliding table names or unresolvable sources.
        SchemaError: On invalid schemas or collisions with generated fields.
    """
    config = config or Config()
    if isinstance(declarations, Mapping):
        declarations = [
            CollectionDeclaration.from_dict(name, data) for name, data in declarations.items()
        ]

    resolved: list[ResolvedCollection] = []
    names: set[str] = set()
    tables: dict[str, str] = {INFO_COLLECTION: INFO_COLLECTION}

    for declaration in declarations:
        name = declaration.name
        if not isinstance(name, str) or not name.strip() or "/" in name:
            raise ConfigurationError(f"Invalid collection name: {name!r}")
        if name == INFO_COLLECTION:
            raise ConfigurationError(f"Collection name '{INFO_COLLECTION}' is reserved")
        if name in names:
            raise ConfigurationError(f"Duplicate collection name: '{name}'")
        names.add(name)

        collection = resolve_collection(declaration, config)
        if collection.table_name in tables:
            raise ConfigurationError(
                f"Collections '{tables[collection.table_name]}' and '{name}' "
                f"both map to table '{collection.table_name}'"
            )
        tables[collection.table_name] = name
        resolved.append(collection)

    resolved.append(info_collection())
    logger.debug(f"Resolved collections: {[c.name for c in resolved]}")
    return resolved


def resolve_collection(declaration: CollectionDeclaration, config: Config) -> ResolvedCollection:
    """Resolve a single (non-reserved) declaration."""
    name = declaration.name
    try:
        ctype = CollectionType(declaration.type)
    except ValueError:
        raise ConfigurationError(
            f"Collection '{name}' has unknown type {declaration.type!r} (expected page or data)"
        )

    if ctype is CollectionType.DATA and declaration.schema is None:
        raise SchemaError(f"Data collection '{name}' must declare a schema")

    schema = schema_from_spec(declaration.schema)
    extended = extend_schema(name, ctype, schema)
    table_name = get_table_name(name)

    raw_field = schema.get("rawbody")
    if raw_field is not None and raw_field.kind is not FieldKind.STRING:
        raise SchemaError(f"Collection '{name}': 'rawbody' must be a string field")

    return ResolvedCollection(
        name=name,
        pascal_name=pascal_case(name),
        type=ctype,
        source=resolve_source(name, declaration.source, config),
        schema=schema,
        extended_schema=extended,
        table_name=table_name,
        table_definition=generate_table_definition(table_name, extended, "contentId"),
        generated_fields=GeneratedFields(
            raw=raw_field is not None,
            body=ctype is CollectionType.PAGE,
            path=ctype is CollectionType.PAGE,
        ),
        json_fields=[n for n, d in extended.items() if d.is_json],
    )


def extend_schema(name: str, ctype: CollectionType, schema: Schema) -> Schema:
    """Append generated fields to a user schema.

    Raises:
        SchemaError: If the user schema declares a generated field.
    """
    reserved = list(BASE_FIELDS)
    if ctype is CollectionType.PAGE:
        reserved.extend(PAGE_GENERATED)
    collisions = [n for n in reserved if n in schema]
    if collisions:
        raise SchemaError(
            f"Collection '{name}' declares generated field(s): {', '.join(collisions)}"
        )

    if ctype is CollectionType.PAGE:
        extra: dict[str, f.Field] = {"path": f.string()}
        extra.update(PAGE_STANDARD_FIELDS)
        extra["body"] = f.json_field()
        schema = schema.extend(extra)
    return schema.extend(BASE_FIELDS)


def get_table_name(name: str) -> str:
    """Derive an identifier-safe table name from a collection name."""
    table = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if table[0].isdigit():
        table = f"_{table}"
    return table


def pascal_case(name: str) -> str:
    parts = [p for p in re.split(r"[^A-Za-z0-9]+", name) if p]
    result = "".join(p[:1].upper() + p[1:] for p in parts)
    if not result or result[0].isdigit():
        result = f"Collection{result}"
    return result


def split_glob(path: str) -> tuple[str, str]:
    """Split a glob into its fixed directory part and the pattern below it.

    ``"blog/**/*.md"`` becomes ``("blog", "**/*.md")``.
    """
    segments = [s for s in path.strip("/").split("/") if s and s != "."]
    fixed: list[str] = []
    for segment in segments:
        if _GLOB_CHARS.search(segment):
            break
        fixed.append(segment)
    rest = segments[len(fixed):]
    if not rest and fixed:
        # A literal file path: mount its directory, match the file name
        rest = [fixed.pop()]
    return "/".join(fixed), "/".join(rest) or "**/*"


def resolve_source(
    name: str,
    source: str | Mapping[str, Any] | CollectionSource | None,
    config: Config,
) -> CollectionSource | None:
    """Resolve a declared source to an absolute CollectionSource.

    Raises:
        ConfigurationError: If the source declaration is malformed.
    """
    if source is None:
        return None
    if isinstance(source, CollectionSource):
        return source
    if isinstance(source, str):
        source = {"path": source}
    if not isinstance(source, Mapping):
        raise ConfigurationError(f"Collection '{name}' has an invalid source: {source!r}")

    path = source.get("path")
    if not isinstance(path, str) or not path.strip():
        raise ConfigurationError(f"Collection '{name}' source is missing 'path'")

    ignore = source.get("ignore") or ()
    if isinstance(ignore, str):
        ignore = (ignore,)
    ignore = tuple(str(i) for i in ignore)

    repository = source.get("repository")
    cwd = source.get("cwd")

    if repository:
        ref = parse_repository(str(repository), config.repository.default_ref)
        snapshot = Path(config.repository.cache_dir).expanduser() / ref.slug
        resolved_cwd = str((snapshot / (cwd or "")).resolve()) if cwd else str(snapshot.resolve())
    elif isinstance(cwd, str) and re.match(r"^(https?|memory)://", cwd):
        resolved_cwd = cwd if cwd.endswith("://") else cwd.rstrip("/")
    elif cwd:
        cwd_path = Path(cwd).expanduser()
        if not cwd_path.is_absolute():
            cwd_path = Path(config.root_dir) / cwd_path
        resolved_cwd = str(cwd_path.resolve())
    else:
        resolved_cwd = str(config.content_path.resolve())

    fixed, _ = split_glob(path)
    prefix = source.get("prefix")
    if prefix is None:
        prefix = "/" + fixed if fixed else "/"

    return CollectionSource(
        cwd=resolved_cwd,
        path=path,
        repository=str(repository) if repository else None,
        prefix=prefix,
        ignore=ignore,
    )


def info_collection() -> ResolvedCollection:
    return ResolvedCollection(
        name=INFO_COLLECTION,
        pascal_name="Info",
        type=CollectionType.DATA,
        source=None,
        schema=INFO_SCHEMA,
        extended_schema=INFO_SCHEMA,
        table_name=INFO_COLLECTION,
        table_definition=generate_table_definition(INFO_COLLECTION, INFO_SCHEMA, "id"),
        generated_fields=GeneratedFields(),
        json_fields=[],
    )
