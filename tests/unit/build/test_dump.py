"""Tests for SQL dump generation."""

import pytest

from contentdb.build.dump import chunks, generate_sql_dump
from contentdb.collections.resolver import resolve_collections
from contentdb.core.config import CollectionDeclaration, Config
from contentdb.core.exceptions import ParseError
from tests.fakes import RecordingStorage


def _page(title: str) -> str:
    return f"---\ntitle: {title}\n---\nBody of {title}\n"


class TestChunks:
    """Tests for chunks."""

    def test_sizes(self):
        """53 items split into 25, 25 and 3."""
        assert [len(c) for c in chunks(list(range(53)), 25)] == [25, 25, 3]

    def test_empty(self):
        """No items, no chunks."""
        assert list(chunks([], 25)) == []

    def test_invalid_size(self):
        """The size must be positive."""
        with pytest.raises(ValueError):
            list(chunks([1], 0))


class TestGenerateSqlDump:
    """Tests for generate_sql_dump."""

    @pytest.mark.asyncio
    async def test_batches_preserve_key_order(self, posts):
        """53 keys run as 25, 25, 3 and inserts follow key order."""
        keys = [f"posts/{i:02d}.md" for i in range(53)]
        # Later keys in a batch finish first
        delays = {key: (52 - i) * 0.0005 for i, key in enumerate(keys)}
        storage = RecordingStorage({key: _page(key) for key in keys}, delays)

        statements = await generate_sql_dump(storage, posts, "v1-test")

        assert [len(wave) for wave in storage.waves] == [25, 25, 3]
        assert storage.max_in_flight == 25
        assert storage.completion_order[:25] != keys[:25]

        inserts = [s for s in statements if s.startswith("INSERT INTO posts")]
        assert len(inserts) == 53
        for key, insert in zip(keys, inserts):
            assert f"'{key}'" in insert

    @pytest.mark.asyncio
    async def test_layout(self, posts):
        """All DDL first, then inserts, then the version row."""
        storage = RecordingStorage({"posts/a.md": _page("A")})

        statements = await generate_sql_dump(storage, posts, "v1-test")

        assert statements[0].startswith("CREATE TABLE posts ")
        assert statements[1] == "CREATE TABLE _info (id VARCHAR PRIMARY KEY, version VARCHAR)"
        assert statements[2].startswith("INSERT INTO posts ")
        assert statements[3] == "INSERT INTO _info (id, version) VALUES ('version', 'v1-test')"
        assert len(statements) == 4

    @pytest.mark.asyncio
    async def test_collections_in_declaration_order(self, config: Config):
        """Inserts are grouped by collection in declaration order."""
        collections = resolve_collections(
            [
                CollectionDeclaration("zeta", "data", "zeta/*.yml", {"n": "integer"}),
                CollectionDeclaration("alpha", "data", "alpha/*.yml", {"n": "integer"}),
            ],
            config,
        )
        storage = RecordingStorage(
            {"alpha/a.yml": "n: 1", "zeta/z.yml": "n: 2", "zeta/y.yml": "n: 3"}
        )

        statements = await generate_sql_dump(storage, collections, "v1-test")
        tables = [s.split()[2] for s in statements if s.startswith("INSERT")]

        assert tables == ["zeta", "zeta", "alpha", "_info"]

    @pytest.mark.asyncio
    async def test_deterministic(self, posts):
        """Unchanged storage produces identical dumps."""
        items = {f"posts/{i}.md": _page(str(i)) for i in range(30)}

        first = await generate_sql_dump(RecordingStorage(items), posts, "v1-test")
        second = await generate_sql_dump(RecordingStorage(items), posts, "v1-test")

        assert first == second

    @pytest.mark.asyncio
    async def test_malformed_document_fails(self, config: Config):
        """One invalid document fails the whole dump."""
        collections = resolve_collections(
            [CollectionDeclaration("posts", "page", "posts/**", {"author": "string"})], config
        )
        items = {f"posts/{i:02d}.md": "---\nauthor: me\n---\n" for i in range(30)}
        items["posts/27.md"] = "---\ntitle: no author\n---\n"

        with pytest.raises(ParseError) as exc_info:
            await generate_sql_dump(RecordingStorage(items), collections, "v1-test")

        assert exc_info.value.key == "posts/27.md"

    @pytest.mark.asyncio
    async def test_empty_collection(self, posts):
        """A collection without keys still gets its table."""
        statements = await generate_sql_dump(RecordingStorage({}), posts, "v1-test")

        assert len(statements) == 3
        assert statements[-1].startswith("INSERT INTO _info")

    @pytest.mark.asyncio
    async def test_adds_info_when_missing(self, posts):
        """Collections passed without _info still get the version row."""
        statements = await generate_sql_dump(RecordingStorage({}), posts[:1], "v1-test")

        assert statements[1].startswith("CREATE TABLE _info")
        assert statements[-1].endswith("('version', 'v1-test')")

    @pytest.mark.asyncio
    async def test_custom_batch_size(self, posts):
        """The batch size bounds concurrent reads."""
        items = {f"posts/{i}.md": _page(str(i)) for i in range(10)}
        storage = RecordingStorage(items, {k: 0.001 for k in items})

        await generate_sql_dump(storage, posts, "v1-test", batch_size=4)

        assert [len(w) for w in storage.waves] == [4, 4, 2]
