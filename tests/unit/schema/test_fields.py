"""Tests for field descriptors and schema declarations."""

import datetime as dt

import pytest

from contentdb.core.exceptions import SchemaError
from contentdb.schema import fields as f
from contentdb.schema.fields import FieldKind, Schema, field_from_spec, schema_from_spec


class TestFieldFromSpec:
    """Tests for parsing field declarations."""

    def test_kind_name(self):
        """A bare kind name is a required field."""
        field = field_from_spec("integer", "count")
        assert field.kind is FieldKind.INTEGER
        assert not field.optional

    def test_optional_suffix(self):
        """A trailing ? marks the field optional."""
        assert field_from_spec("string?", "subtitle").optional

    def test_array_shorthand(self):
        """array<kind> declares a typed array."""
        field = field_from_spec("array<string>", "tags")
        assert field.kind is FieldKind.ARRAY
        assert field.items.kind is FieldKind.STRING

    def test_mapping_with_nested_fields(self):
        """Mappings describe nested objects with defaults."""
        field = field_from_spec(
            {"type": "object", "fields": {"name": "string", "age": "integer?"}, "optional": True},
            "author",
        )
        assert field.kind is FieldKind.OBJECT
        assert field.optional
        assert field.fields.names() == ["name", "age"]

    def test_default(self):
        """Defaults are kept on the descriptor."""
        field = field_from_spec({"type": "boolean", "default": False}, "draft")
        assert field.has_default
        assert field.default is False

    def test_date_default_becomes_iso_string(self):
        """YAML date defaults are stored in their column form."""
        field = field_from_spec({"type": "date", "default": dt.date(2024, 1, 1)}, "published")
        assert field.default == "2024-01-01"

    def test_default_coerced_to_kind(self):
        """Defaults follow the same coercion as document values."""
        field = field_from_spec({"type": "integer", "default": "3"}, "order")
        assert field.default == 3

    def test_non_scalar_default_on_scalar_field(self):
        """A default that does not fit the kind is a schema error."""
        with pytest.raises(SchemaError, match="invalid default"):
            field_from_spec({"type": "string", "default": {"a": 1}}, "title")

    def test_default_on_descriptor_instance(self):
        """Descriptors passed directly get the same treatment."""
        field = field_from_spec(f.date(default=dt.date(2024, 1, 1)), "published")
        assert field.default == "2024-01-01"

    def test_unknown_kind(self):
        """Unknown kinds are schema errors naming the field."""
        with pytest.raises(SchemaError, match="'title'"):
            field_from_spec("text", "title")

    def test_items_on_non_array(self):
        """items is only valid on arrays."""
        with pytest.raises(SchemaError, match="not an array"):
            field_from_spec({"type": "string", "items": "string"}, "title")

    def test_missing_type(self):
        """Mappings need a type."""
        with pytest.raises(SchemaError, match="missing 'type'"):
            field_from_spec({"optional": True}, "title")


class TestSchema:
    """Tests for the Schema container."""

    def test_declaration_order_kept(self):
        """Names come back in declaration order."""
        schema = schema_from_spec({"b": "string", "a": "integer", "c": "date"})
        assert schema.names() == ["b", "a", "c"]

    def test_extend_keeps_existing(self):
        """extend appends new names and keeps redeclared ones in place."""
        schema = Schema({"title": f.string(optional=True), "tags": f.array()})
        extended = schema.extend({"path": f.string(), "title": f.string()})

        assert extended.names() == ["title", "tags", "path"]
        assert extended["title"].optional

    def test_json_kinds(self):
        """Arrays, objects and json fields are stored as text."""
        assert f.array().is_json
        assert f.obj().is_json
        assert f.json_field().is_json
        assert not f.string().is_json
        assert f.array().sql_type == "TEXT"

    def test_sql_types(self):
        """Scalar kinds map to their column types."""
        assert f.string().sql_type == "VARCHAR"
        assert f.integer().sql_type == "INT"
        assert f.number().sql_type == "REAL"
        assert f.boolean().sql_type == "BOOLEAN"
        assert f.date().sql_type == "DATE"

    def test_to_json_schema(self):
        """JSON schema lists required fields."""
        schema = Schema({"title": f.string(), "draft": f.boolean(default=False)})
        result = schema.to_json_schema()

        assert result["required"] == ["title"]
        assert result["properties"]["draft"] == {"type": "boolean", "default": False}

    def test_rejects_non_mapping(self):
        """A schema must be a mapping."""
        with pytest.raises(SchemaError):
            schema_from_spec(["title"])
