"""Tests for the collection index and generated types."""

from contentdb.collections.info import collections_index, generate_types
from contentdb.collections.resolver import resolve_collections
from contentdb.core.config import CollectionDeclaration, Config


def _collections(config: Config):
    return resolve_collections(
        [
            CollectionDeclaration(
                "posts",
                "page",
                "posts/**/*.md",
                {
                    "title": "string",
                    "tags": "array<string>",
                    "author": {"type": "object", "fields": {"name": "string"}},
                },
            ),
        ],
        config,
    )


class TestCollectionsIndex:
    """Tests for collections_index."""

    def test_entries(self, config: Config):
        """Each collection maps to its table and JSON fields."""
        index = collections_index(_collections(config))

        assert list(index) == ["posts", "_info"]
        posts = index["posts"]
        assert posts["tableName"] == "posts"
        assert posts["pascalName"] == "Posts"
        assert posts["type"] == "page"
        assert "tags" in posts["jsonFields"]
        assert posts["source"]["path"] == "posts/**/*.md"
        assert "title" in posts["schema"]["properties"]

    def test_info_has_no_source(self, config: Config):
        """_info is schema-only."""
        assert collections_index(_collections(config))["_info"]["source"] is None


class TestGenerateTypes:
    """Tests for generate_types."""

    def test_typed_dicts(self, config: Config):
        """One TypedDict per collection, nested objects get their own."""
        source = generate_types(_collections(config))

        assert "class PostsItem(TypedDict):" in source
        assert "    title: str" in source
        assert "    tags: list[str]" in source
        assert "class PostsAuthor(TypedDict):" in source
        assert "    author: PostsAuthor" in source
        assert "    seo: Optional[dict[str, Any]]" not in source
        assert "class InfoItem(TypedDict):" in source
        assert '"posts": PostsItem' in source

    def test_is_valid_python(self, config: Config):
        """The generated module compiles."""
        compile(generate_types(_collections(config)), "content_types.py", "exec")

    def test_non_identifier_field_names(self, config: Config):
        """Field names that are not attribute names use the functional form."""
        collections = resolve_collections(
            [
                CollectionDeclaration(
                    "people",
                    "data",
                    "people/*",
                    {
                        "first-name": "string",
                        "class": "integer?",
                        "address": {"type": "object", "fields": {"zip-code": "string"}},
                    },
                )
            ],
            config,
        )
        source = generate_types(collections)

        assert 'PeopleItem = TypedDict(\n    "PeopleItem",' in source
        assert '        "first-name": str,' in source
        assert '        "class": Optional[int],' in source
        assert 'PeopleAddress = TypedDict(' in source

        namespace: dict = {}
        exec(compile(source, "content_types.py", "exec"), namespace)
        annotations = namespace["PeopleItem"].__annotations__
        assert annotations["first-name"] is str
        assert "zip-code" in namespace["PeopleAddress"].__annotations__
        assert namespace["COLLECTIONS"]["people"] is namespace["PeopleItem"]
