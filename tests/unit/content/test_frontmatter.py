"""Tests for front matter parsing."""

import pytest

from contentdb.content.frontmatter import FrontmatterError, parse_frontmatter


class TestParseFrontmatter:
    """Tests for parse_frontmatter."""

    def test_basic(self):
        """Front matter is split from the body."""
        result = parse_frontmatter("---\ntitle: Hello\ntags: [a, b]\n---\nWorld\n")

        assert result.has_frontmatter
        assert result.data == {"title": "Hello", "tags": ["a", "b"]}
        assert result.content == "World\n"

    def test_no_frontmatter(self):
        """Documents without a block are all body."""
        result = parse_frontmatter("# Title\n\nText")

        assert not result.has_frontmatter
        assert result.data == {}
        assert result.content == "# Title\n\nText"

    def test_empty_block(self):
        """An empty block yields empty data."""
        result = parse_frontmatter("---\n---\nBody")

        assert result.has_frontmatter
        assert result.data == {}
        assert result.content == "Body"

    def test_crlf(self):
        """Windows line endings are accepted."""
        result = parse_frontmatter("---\r\ntitle: Hi\r\n---\r\nBody")
        assert result.data == {"title": "Hi"}
        assert result.content == "Body"

    def test_byte_order_mark(self):
        """A leading BOM is ignored."""
        assert parse_frontmatter("\ufeff---\ntitle: Hi\n---\n").data == {"title": "Hi"}

    def test_invalid_yaml(self):
        """Broken YAML is an error."""
        with pytest.raises(FrontmatterError, match="invalid front matter"):
            parse_frontmatter("---\ntitle: [unclosed\n---\nBody")

    def test_non_mapping(self):
        """A list block is an error."""
        with pytest.raises(FrontmatterError, match="mapping"):
            parse_frontmatter("---\n- a\n- b\n---\nBody")
