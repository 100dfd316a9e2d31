"""Content parsing: raw bytes plus storage key to a validated record."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import yaml
from loguru import logger

from contentdb.core.exceptions import ParseError, ValidationError
from contentdb.core.types import CollectionType, ResolvedCollection
from contentdb.schema.validate import validate
from contentdb.sources.storage import split_key

from .frontmatter import FrontmatterError, parse_frontmatter
from .markdown import empty_body, render_markdown, text_body
from .paths import generate_path, split_extension

if TYPE_CHECKING:
    from contentdb.sources.storage import CollectionsStorage

# A parsed record: column name to value, JSON fields already encoded
ParsedContentRecord = dict[str, Any]

MARKDOWN_EXTENSIONS = frozenset({"md", "markdown"})
YAML_EXTENSIONS = frozenset({"yml", "yaml"})
JSON_EXTENSIONS = frozenset({"json"})

# Always computed by the parser, never taken from a document
_BASE_GENERATED = ("contentId", "stem", "extension", "meta")


async def parse_content(
    storage: "CollectionsStorage",
    collection: ResolvedCollection,
    key: str,
) -> ParsedContentRecord:
    """Read one key from storage and parse it.

    Args:
        storage: Collections storage holding the key.
        collection: Collection the key belongs to.
        key: Global storage key.

    Returns:
        Validated record ready for insert generation.

    Raises:
        ParseError: If the document cannot be parsed or validated.
        StorageError: If the read fails.
    """
    logger.debug(f"Processing {key}")
    raw = await storage.get_item(key)
    return parse_document(collection, key, raw)


def parse_document(collection: ResolvedCollection, key: str, raw: bytes) -> ParsedContentRecord:
    """Parse raw document bytes into a validated record.

    Pure given identical inputs.

    Raises:
        ParseError: If the document cannot be parsed or validated.
    """
    _, relative = split_key(key)
    stem, extension = split_extension(relative)
    is_page = collection.type is CollectionType.PAGE

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(key, f"not valid UTF-8: {e}") from e

    body_text: str | None = None
    try:
        if extension in MARKDOWN_EXTENSIONS:
            frontmatter = parse_frontmatter(text)
            data, body_text = frontmatter.data, frontmatter.content
        elif extension in YAML_EXTENSIONS:
            data = _expect_mapping(yaml.safe_load(text))
        elif extension in JSON_EXTENSIONS:
            data = _expect_mapping(json.loads(text))
        elif is_page:
            data = {}
        else:
            raise ParseError(key, f"unsupported extension '.{extension}' for data collection")
    except (FrontmatterError, yaml.YAMLError, json.JSONDecodeError, TypeError) as e:
        raise ParseError(key, e) from e

    schema = collection.extended_schema
    generated = _generated_names(collection)
    candidate: dict[str, Any] = {}
    meta: dict[str, Any] = {}
    for name, value in data.items():
        if name in generated:
            continue
        if name in schema:
            candidate[name] = value
        else:
            meta[name] = value

    if is_page:
        if body_text is not None:
            document = render_markdown(body_text)
            body = document.body
            if candidate.get("title") is None and document.title:
                candidate["title"] = document.title
            if candidate.get("description") is None and document.description:
                candidate["description"] = document.description
        elif extension in YAML_EXTENSIONS | JSON_EXTENSIONS:
            body = empty_body()
        else:
            body = text_body(text)

        candidate["body"] = body
        candidate["path"] = generate_path(
            stem, collection.source.prefix if collection.source else "/"
        )
        seo = candidate.get("seo")
        if seo is None:
            seo = {}
        if isinstance(seo, dict):
            seo.setdefault("title", candidate.get("title"))
            seo.setdefault("description", candidate.get("description"))
            candidate["seo"] = seo

    if collection.generated_fields.raw:
        candidate["rawbody"] = text

    candidate.update(contentId=key, stem=stem, extension=extension, meta=meta)

    try:
        record = validate(schema, candidate)
    except ValidationError as e:
        raise ParseError(key, e) from e

    for name in collection.json_fields:
        if record.get(name) is not None:
            record[name] = json.dumps(record[name], separators=(",", ":"), ensure_ascii=False)

    return record


def _expect_mapping(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"document must be a mapping, got {type(data).__name__}")
    return {str(k): v for k, v in data.items()}


def _generated_names(collection: ResolvedCollection) -> set[str]:
    """Fields the parser fills in itself for this collection."""
    names = set(_BASE_GENERATED)
    if collection.generated_fields.path:
        names.add("path")
    if collection.generated_fields.body:
        names.add("body")
    if collection.generated_fields.raw:
        names.add("rawbody")
    return names
