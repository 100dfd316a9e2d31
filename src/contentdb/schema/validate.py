"""Validation and coercion of candidate records against a Schema."""

from __future__ import annotations

import dataclasses
import datetime as dt
import math
from typing import Any, Mapping

from contentdb.core.exceptions import FieldError, SchemaError, ValidationError

from .fields import Field, FieldKind, Schema

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}


class _Invalid(Exception):
    def __init__(self, message: str):
        self.message = message


def validate(schema: Schema, candidate: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and coerce a candidate against a schema.

    Keys not declared in the schema are dropped; callers that want to keep
    them must collect them beforehand. Every failure is reported, not just
    the first one.

    Args:
        schema: Schema to validate against.
        candidate: Raw candidate mapping.

    Returns:
        New record with fields in schema order.

    Raises:
        ValidationError: If any field fails validation.
    """
    errors: list[FieldError] = []
    record = _validate_shape(schema, candidate, "", errors)
    if errors:
        raise ValidationError(errors)
    return record


def coerce_default(descriptor: Field, path: str) -> Field:
    """Coerce a declared default to the field's kind.

    YAML-native defaults such as dates become their stored form, so every
    default can be rendered as a column literal.

    Raises:
        SchemaError: If the default does not fit the field.
    """
    if not descriptor.has_default or descriptor.default is None:
        return descriptor
    errors: list[FieldError] = []
    try:
        value = _coerce(descriptor, descriptor.default, path, errors)
    except _Invalid as e:
        errors.append(FieldError(path, e.message))
    if errors:
        reasons = "; ".join(str(e) for e in errors)
        raise SchemaError(f"Field '{path}' has an invalid default: {reasons}")
    return dataclasses.replace(descriptor, default=value)


def _validate_shape(
    schema: Schema,
    candidate: Mapping[str, Any],
    prefix: str,
    errors: list[FieldError],
) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for name, descriptor in schema.items():
        path = f"{prefix}{name}"
        value = candidate.get(name)
        if value is None:
            if descriptor.has_default:
                record[name] = _to_jsonable(descriptor.default)
            elif descriptor.optional:
                record[name] = None
            else:
                errors.append(FieldError(path, "required field is missing"))
            continue
        try:
            record[name] = _coerce(descriptor, value, path, errors)
        except _Invalid as e:
            errors.append(FieldError(path, e.message))
    return record


def _coerce(descriptor: Field, value: Any, path: str, errors: list[FieldError]) -> Any:
    kind = descriptor.kind

    if kind is FieldKind.STRING:
        if isinstance(value, str):
            return value
        if isinstance(value, (dt.date, dt.datetime)):
            return value.isoformat()
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise _Invalid(f"expected string, got {type(value).__name__}")

    if kind is FieldKind.INTEGER:
        if isinstance(value, bool):
            raise _Invalid("expected integer, got bool")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise _Invalid(f"expected integer, got {value!r}")

    if kind is FieldKind.NUMBER:
        if isinstance(value, bool):
            raise _Invalid("expected number, got bool")
        if isinstance(value, (int, float)):
            if isinstance(value, float) and not math.isfinite(value):
                raise _Invalid("expected finite number")
            return value
        if isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise _Invalid(f"expected number, got {value!r}")
            if not math.isfinite(number):
                raise _Invalid("expected finite number")
            return int(number) if number.is_integer() and "." not in value else number
        raise _Invalid(f"expected number, got {type(value).__name__}")

    if kind is FieldKind.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE | _FALSE:
            return value.strip().lower() in _TRUE
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise _Invalid(f"expected boolean, got {value!r}")

    if kind is FieldKind.DATE:
        if isinstance(value, (dt.date, dt.datetime)):
            return value.isoformat()
        if isinstance(value, str):
            text = value.strip()
            for parse in (dt.date.fromisoformat, dt.datetime.fromisoformat):
                try:
                    return parse(text).isoformat()
                except ValueError:
                    continue
        raise _Invalid(f"expected ISO date, got {value!r}")

    if kind is FieldKind.ARRAY:
        if not isinstance(value, (list, tuple)):
            raise _Invalid(f"expected array, got {type(value).__name__}")
        if descriptor.items is None:
            return [_to_jsonable(v) for v in value]
        result = []
        for index, item in enumerate(value):
            item_path = f"{path}[{index}]"
            if item is None:
                if descriptor.items.optional:
                    result.append(None)
                else:
                    errors.append(FieldError(item_path, "item must not be null"))
                continue
            try:
                result.append(_coerce(descriptor.items, item, item_path, errors))
            except _Invalid as e:
                errors.append(FieldError(item_path, e.message))
        return result

    if kind is FieldKind.OBJECT:
        if not isinstance(value, Mapping):
            raise _Invalid(f"expected object, got {type(value).__name__}")
        if descriptor.fields is None:
            return _to_jsonable(value)
        nested = _validate_shape(descriptor.fields, value, f"{path}.", errors)
        for key, extra in value.items():
            if key not in descriptor.fields:
                nested[key] = _to_jsonable(extra)
        return nested

    return _to_jsonable(value)


def _to_jsonable(value: Any) -> Any:
    """Convert YAML-native values (dates, tuples) to JSON-compatible ones."""
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value
