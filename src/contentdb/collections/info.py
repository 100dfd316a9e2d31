"""Collection index and typed shape generation.

Both artifacts are consumed outside the build: the index for runtime lookup
of a collection's table and JSON columns, the stubs for typing queries.
"""

from __future__ import annotations

import json
import keyword
from typing import Any, Sequence

from contentdb.core.types import ResolvedCollection
from contentdb.schema.fields import Field, FieldKind, Schema

from .resolver import pascal_case

_SCALARS = {
    FieldKind.STRING: "str",
    FieldKind.INTEGER: "int",
    FieldKind.NUMBER: "float",
    FieldKind.BOOLEAN: "bool",
    FieldKind.DATE: "str",
    FieldKind.JSON: "Any",
}


def collections_index(collections: Sequence[ResolvedCollection]) -> dict[str, Any]:
    """Map collection name to its runtime description."""
    return {c.name: c.info().to_dict() for c in collections}


def generate_types(collections: Sequence[ResolvedCollection]) -> str:
    """Render a Python module with one ``TypedDict`` per collection.

    Nested object fields with a declared shape get their own ``TypedDict``
    named after the collection and field. Shapes with a field name that is
    not a valid attribute name (``first-name``, ``class``) use the
    functional ``TypedDict("Name", {...})`` form.
    """
    blocks: list[str] = []
    for collection in collections:
        _render_typed_dict(f"{collection.pascal_name}Item", collection.extended_schema, blocks)

    header = [
        '"""Generated collection item types. Do not edit."""',
        "",
        "from typing import Any, Optional, TypedDict",
        "",
    ]
    names = ", ".join(f"{json.dumps(c.name)}: {c.pascal_name}Item" for c in collections)
    footer = ["", f"COLLECTIONS = {{{names}}}", ""]
    return "\n".join(header + ["\n\n".join(blocks)] + footer)


def _render_typed_dict(class_name: str, schema: Schema, blocks: list[str]) -> None:
    entries = []
    for name, descriptor in schema.items():
        annotation = _annotation(class_name, name, descriptor, blocks)
        if descriptor.optional:
            annotation = f"Optional[{annotation}]"
        entries.append((name, annotation))

    if all(_is_attribute_name(name) for name, _ in entries):
        lines = [f"class {class_name}(TypedDict):"]
        lines.extend(f"    {name}: {annotation}" for name, annotation in entries)
        if not entries:
            lines.append("    pass")
    else:
        lines = [f"{class_name} = TypedDict(", f"    {json.dumps(class_name)},", "    {"]
        lines.extend(f"        {json.dumps(name)}: {annotation}," for name, annotation in entries)
        lines.extend(["    },", ")"])
    blocks.append("\n".join(lines) + "\n")


def _is_attribute_name(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def _annotation(owner: str, name: str, descriptor: Field, blocks: list[str]) -> str:
    kind = descriptor.kind
    if kind in _SCALARS:
        return _SCALARS[kind]
    if kind is FieldKind.ARRAY:
        if descriptor.items is None:
            return "list[Any]"
        return f"list[{_annotation(owner, name, descriptor.items, blocks)}]"
    if kind is FieldKind.OBJECT:
        if descriptor.fields is None:
            return "dict[str, Any]"
        nested = f"{owner.removesuffix('Item')}{pascal_case(name)}"
        _render_typed_dict(nested, descriptor.fields, blocks)
        return nested
    return "Any"
