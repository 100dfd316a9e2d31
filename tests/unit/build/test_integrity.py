"""Tests for the integrity version."""

import re

from contentdb.build.integrity import compute_integrity_version
from contentdb.collections.resolver import resolve_collections
from contentdb.core.config import CollectionDeclaration, Config


def _version(config: Config, *names: str, schema=None) -> str:
    declarations = [CollectionDeclaration(n, "page", f"{n}/**", schema) for n in names]
    return compute_integrity_version(resolve_collections(declarations, config))


class TestIntegrityVersion:
    """Tests for compute_integrity_version."""

    def test_format(self, config: Config):
        """The version is a prefix and a short hash."""
        assert re.fullmatch(r"v1-[0-9a-f]{10}", _version(config, "posts"))

    def test_stable(self, config: Config):
        """The same collection shapes give the same version."""
        schema = {"title": "string", "tags": "array<string>?"}
        assert _version(config, "posts", "docs", schema=schema) == _version(
            config, "posts", "docs", schema=schema
        )

    def test_table_set_changes_version(self, config: Config):
        """Adding or renaming a table changes the version."""
        base = _version(config, "posts")

        assert _version(config, "posts", "docs") != base
        assert _version(config, "articles") != base

    def test_order_changes_version(self, config: Config):
        """Reordering tables changes the version."""
        assert _version(config, "posts", "docs") != _version(config, "docs", "posts")

    def test_schema_change_changes_version(self, config: Config):
        """Adding a column or changing its type changes the version."""
        base = _version(config, "posts", schema={"author": "string"})

        assert _version(config, "posts", schema={"author": "string", "email": "string?"}) != base
        assert _version(config, "posts", schema={"author": "integer"}) != base

    def test_source_does_not_change_version(self, config: Config):
        """Where documents come from does not affect the version."""
        schema = {"author": "string"}
        here = resolve_collections([CollectionDeclaration("posts", "page", "posts/**", schema)], config)
        there = resolve_collections(
            [CollectionDeclaration("posts", "page", "elsewhere/**/*.md", schema)], config
        )

        assert compute_integrity_version(here) == compute_integrity_version(there)

    def test_custom_prefix(self, config: Config):
        """A custom prefix is used verbatim."""
        collections = resolve_collections([], config)
        assert compute_integrity_version(collections, prefix="2.0").startswith("2.0-")
