"""Collection schema descriptors and validation."""

from .fields import (
    MISSING,
    Field,
    FieldKind,
    Schema,
    array,
    boolean,
    date,
    field_from_spec,
    integer,
    json_field,
    number,
    obj,
    schema_from_spec,
    string,
)
from .validate import validate

__all__ = [
    "MISSING",
    "Field",
    "FieldKind",
    "Schema",
    "array",
    "boolean",
    "date",
    "integer",
    "json_field",
    "number",
    "obj",
    "string",
    "field_from_spec",
    "schema_from_spec",
    "validate",
]
