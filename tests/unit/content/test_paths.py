"""Tests for key and route path helpers."""

import pytest

from contentdb.content.paths import generate_path, split_extension


class TestSplitExtension:
    """Tests for split_extension."""

    def test_split(self):
        """The extension is lowercased without its dot."""
        assert split_extension("2024/Hello.MD") == ("2024/Hello", "md")

    def test_no_extension(self):
        """Files without an extension have an empty one."""
        assert split_extension("LICENSE") == ("LICENSE", "")


class TestGeneratePath:
    """Tests for generate_path."""

    @pytest.mark.parametrize(
        "stem,prefix,expected",
        [
            ("hello", "/", "/hello"),
            ("hello", "/posts", "/posts/hello"),
            ("index", "/posts", "/posts"),
            ("index", "/", "/"),
            ("1.guide/2.install", "/docs", "/docs/guide/install"),
            ("guide/index", "/", "/guide"),
            ("My Page", "/", "/my-page"),
            ("hello", None, "/hello"),
            ("hello", "blog/", "/blog/hello"),
        ],
    )
    def test_paths(self, stem: str, prefix, expected: str):
        """Route paths are normalized and prefixed."""
        assert generate_path(stem, prefix) == expected
