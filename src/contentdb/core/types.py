"""Type definitions for contentdb."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from contentdb.schema.fields import Schema


class CollectionType(str, Enum):
    """Kind of documents a collection holds."""

    PAGE = "page"
    DATA = "data"


@dataclass(frozen=True)
class CollectionSource:
    """Where a collection's raw documents live.

    Attributes:
        cwd: Absolute base location (directory or URL) the glob is relative to.
        path: Glob selecting documents below ``cwd``.
        repository: Optional remote repository the ``cwd`` lives in.
        prefix: Route prefix for page paths.
        ignore: Glob exclusions.
    """

    cwd: str
    path: str = "**/*"
    repository: str | None = None
    prefix: str | None = None
    ignore: tuple[str, ...] = ()


@dataclass(frozen=True)
class GeneratedFields:
    """Which fields are synthesized rather than authored."""

    raw: bool = False
    body: bool = False
    path: bool = False


@dataclass
class ResolvedCollection:
    """Canonical description of a collection for the build pipeline."""

    name: str
    pascal_name: str
    type: CollectionType
    source: CollectionSource | None
    schema: "Schema"
    extended_schema: "Schema"
    table_name: str
    table_definition: str
    generated_fields: GeneratedFields = field(default_factory=GeneratedFields)
    json_fields: list[str] = field(default_factory=list)

    @property
    def columns(self) -> list[str]:
        """Column names in table order."""
        return list(self.extended_schema.names())

    def info(self) -> "CollectionInfo":
        """Describe this collection for runtime lookup."""
        return CollectionInfo(
            name=self.name,
            pascal_name=self.pascal_name,
            table_name=self.table_name,
            source=self.source,
            type=self.type,
            schema=self.extended_schema.to_json_schema(),
            json_fields=list(self.json_fields),
        )


@dataclass
class CollectionInfo:
    """Serializable collection description (name → table/shape)."""

    name: str
    pascal_name: str
    table_name: str
    source: CollectionSource | None
    type: CollectionType
    schema: dict[str, Any]
    json_fields: list[str]

    def to_dict(self) -> dict[str, Any]:
        source = None
        if self.source is not None:
            source = {
                "cwd": self.source.cwd,
                "path": self.source.path,
                "repository": self.source.repository,
                "prefix": self.source.prefix,
                "ignore": list(self.source.ignore),
            }
        return {
            "name": self.name,
            "pascalName": self.pascal_name,
            "tableName": self.table_name,
            "type": self.type.value,
            "source": source,
            "schema": self.schema,
            "jsonFields": self.json_fields,
        }


@dataclass(frozen=True)
class StorageMountOptions:
    """Driver configuration for one collection mount.

    Attributes:
        name: Collection name the mount is namespaced under.
        driver: Driver tag (``fs``, ``repository``, ``http``, ``memory``).
        base: Driver base location (directory path or URL).
        include: Glob selecting keys below ``base``.
        ignore: Glob exclusions.
        repository: Remote repository reference for snapshot drivers.
        subdir: Directory inside a repository snapshot to mount.
    """

    name: str
    driver: str
    base: str = ""
    include: str = "**/*"
    ignore: tuple[str, ...] = ()
    repository: str | None = None
    subdir: str = ""


class ChangeType(str, Enum):
    """Kind of storage-level change."""

    UPDATE = "update"
    REMOVE = "remove"


@dataclass(frozen=True)
class ChangeEvent:
    """A storage change notification for one global key."""

    type: ChangeType
    key: str
