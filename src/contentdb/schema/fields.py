"""Structural field descriptors for collection schemas.

A schema is an ordered mapping of field name to ``Field``. Descriptors are
plain data, independent of any validation library, so they can be compared,
serialized to JSON schema and mapped to SQL column types.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping

from contentdb.core.exceptions import SchemaError


class FieldKind(str, Enum):
    """Kind tag of a field descriptor."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"
    JSON = "json"


# Kinds stored as a single serialized-text column
JSON_KINDS = frozenset({FieldKind.ARRAY, FieldKind.OBJECT, FieldKind.JSON})

# "array<string>" style declarations
_ARRAY_SHORTHAND = re.compile(r"^array<(.+)>$")

_SQL_TYPES = {
    FieldKind.STRING: "VARCHAR",
    FieldKind.INTEGER: "INT",
    FieldKind.NUMBER: "REAL",
    FieldKind.BOOLEAN: "BOOLEAN",
    FieldKind.DATE: "DATE",
}


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class Field:
    """Descriptor of a single field.

    Attributes:
        kind: Field kind tag.
        optional: Whether the field may be absent.
        default: Value used when absent (MISSING for none).
        items: Item descriptor for arrays.
        fields: Nested shape for objects (None accepts any mapping).
    """

    kind: FieldKind
    optional: bool = False
    default: Any = MISSING
    items: "Field | None" = None
    fields: "Schema | None" = None

    @property
    def is_json(self) -> bool:
        """Whether values are stored as serialized JSON text."""
        return self.kind in JSON_KINDS

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def sql_type(self) -> str:
        return _SQL_TYPES.get(self.kind, "TEXT")

    def to_json_schema(self) -> dict[str, Any]:
        """Describe this field as a JSON schema fragment."""
        if self.kind is FieldKind.ARRAY:
            result: dict[str, Any] = {"type": "array"}
            if self.items is not None:
                result["items"] = self.items.to_json_schema()
        elif self.kind is FieldKind.OBJECT:
            result = {"type": "object"}
            if self.fields is not None:
                result.update(self.fields.to_json_schema())
        elif self.kind is FieldKind.DATE:
            result = {"type": "string", "format": "date"}
        elif self.kind is FieldKind.JSON:
            result = {}
        else:
            result = {"type": self.kind.value}
        if self.has_default:
            result["default"] = self.default
        return result


class Schema:
    """Ordered mapping of field names to descriptors."""

    def __init__(self, fields: Mapping[str, Field] | None = None):
        self._fields: dict[str, Field] = dict(fields or {})

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __getitem__(self, name: str) -> Field:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return list(self._fields.items()) == list(other._fields.items())

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v.kind.value}" for k, v in self._fields.items())
        return f"Schema({inner})"

    def names(self) -> list[str]:
        return list(self._fields)

    def items(self) -> list[tuple[str, Field]]:
        return list(self._fields.items())

    def get(self, name: str) -> Field | None:
        return self._fields.get(name)

    def extend(self, fields: Mapping[str, Field]) -> "Schema":
        """Return a new schema with ``fields`` appended (existing names kept)."""
        merged = dict(self._fields)
        for name, descriptor in fields.items():
            merged.setdefault(name, descriptor)
        return Schema(merged)

    def to_json_schema(self) -> dict[str, Any]:
        """Describe this schema as a JSON schema object."""
        return {
            "properties": {name: f.to_json_schema() for name, f in self._fields.items()},
            "required": [
                name
                for name, f in self._fields.items()
                if not f.optional and not f.has_default
            ],
        }


# =============================================================================
# Builders
# =============================================================================


def string(optional: bool = False, default: Any = MISSING) -> Field:
    return Field(FieldKind.STRING, optional=optional, default=default)


def integer(optional: bool = False, default: Any = MISSING) -> Field:
    return Field(FieldKind.INTEGER, optional=optional, default=default)


def number(optional: bool = False, default: Any = MISSING) -> Field:
    return Field(FieldKind.NUMBER, optional=optional, default=default)


def boolean(optional: bool = False, default: Any = MISSING) -> Field:
    return Field(FieldKind.BOOLEAN, optional=optional, default=default)


def date(optional: bool = False, default: Any = MISSING) -> Field:
    return Field(FieldKind.DATE, optional=optional, default=default)


def array(items: Field | None = None, optional: bool = False, default: Any = MISSING) -> Field:
    return Field(FieldKind.ARRAY, optional=optional, default=default, items=items)


def obj(
    fields: Mapping[str, Field] | None = None,
    optional: bool = False,
    default: Any = MISSING,
) -> Field:
    shape = Schema(fields) if fields is not None else None
    return Field(FieldKind.OBJECT, optional=optional, default=default, fields=shape)


def json_field(optional: bool = False, default: Any = MISSING) -> Field:
    return Field(FieldKind.JSON, optional=optional, default=default)


# =============================================================================
# Declaration parsing
# =============================================================================


def field_from_spec(spec: Any, path: str) -> Field:
    """Build a Field from a declaration value.

    Accepts a kind name (``"string"``, with a trailing ``?`` for optional,
    ``"array<string>"`` for typed arrays),
    a Field instance, or a mapping with ``type``, ``optional``, ``default``,
    ``items`` and ``fields`` keys. Defaults are coerced to the field kind,
    so a YAML date default is stored as its ISO string.

    Args:
        spec: Declaration value.
        path: Dotted field path for error messages.

    Returns:
        Field descriptor.

    Raises:
        SchemaError: If the declaration is not a valid field or its default
            does not fit the kind.
    """
    from .validate import coerce_default

    if isinstance(spec, Field):
        return coerce_default(spec, path)

    if isinstance(spec, str):
        optional = spec.endswith("?")
        kind = spec.rstrip("?").strip()
        match = _ARRAY_SHORTHAND.match(kind)
        if match:
            return Field(
                FieldKind.ARRAY,
                optional=optional,
                items=field_from_spec(match.group(1), f"{path}[]"),
            )
        return Field(_parse_kind(kind, path), optional=optional)

    if not isinstance(spec, Mapping):
        raise SchemaError(f"Field '{path}' must be a kind name or a mapping, got {spec!r}")

    if "type" not in spec:
        raise SchemaError(f"Field '{path}' is missing 'type'")

    kind = _parse_kind(spec["type"], path)
    items = None
    fields = None

    if "items" in spec:
        if kind is not FieldKind.ARRAY:
            raise SchemaError(f"Field '{path}' declares 'items' but is not an array")
        items = field_from_spec(spec["items"], f"{path}[]")

    if "fields" in spec:
        if kind is not FieldKind.OBJECT:
            raise SchemaError(f"Field '{path}' declares 'fields' but is not an object")
        fields = schema_from_spec(spec["fields"], prefix=f"{path}.")

    field = Field(
        kind,
        optional=bool(spec.get("optional", False)),
        default=spec.get("default", MISSING),
        items=items,
        fields=fields,
    )
    return coerce_default(field, path)


def schema_from_spec(spec: Any, prefix: str = "") -> Schema:
    """Build a Schema from a declaration mapping (or pass one through)."""
    if spec is None:
        return Schema()
    if isinstance(spec, Schema):
        return spec
    if not isinstance(spec, Mapping):
        raise SchemaError(f"Schema '{prefix.rstrip('.') or '<root>'}' must be a mapping")

    fields: dict[str, Field] = {}
    for name, value in spec.items():
        if not isinstance(name, str) or not name:
            raise SchemaError(f"Invalid field name {name!r} in '{prefix or '<root>'}'")
        fields[name] = field_from_spec(value, f"{prefix}{name}")
    return Schema(fields)


def _parse_kind(value: Any, path: str) -> FieldKind:
    try:
        return FieldKind(str(value).strip().lower())
    except ValueError:
        kinds = ", ".join(k.value for k in FieldKind)
        raise SchemaError(f"Field '{path}' has unknown type {value!r} (expected one of {kinds})")
