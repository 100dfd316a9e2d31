"""Tests for glob matching."""

from pathlib import Path

import pytest

from contentdb.sources.glob_matcher import GlobMatcher, glob_match


class TestGlobMatch:
    """Tests for glob_match."""

    @pytest.mark.parametrize(
        "path,pattern,expected",
        [
            ("a.md", "*.md", True),
            ("dir/a.md", "*.md", False),
            ("dir/a.md", "**/*.md", True),
            ("a.md", "**/*.md", True),
            ("x/y/z.md", "x/**", True),
            ("a.yml", "*.{yml,yaml}", True),
            ("a.json", "*.{yml,yaml}", False),
            ("a1.md", "a?.md", True),
            ("b.md", "[ab].md", True),
            ("c.md", "[!ab].md", True),
        ],
    )
    def test_patterns(self, path: str, pattern: str, expected: bool):
        """Common glob forms behave like shell globs with globstar."""
        assert glob_match(path, pattern) is expected


class TestGlobMatcher:
    """Tests for GlobMatcher."""

    def test_ignore(self):
        """Ignore globs exclude otherwise matching paths."""
        matcher = GlobMatcher("**/*.md", ignore=["drafts/**"])

        assert matcher.matches("docs/readme.md")
        assert not matcher.matches("drafts/wip.md")

    def test_hidden_paths_excluded(self):
        """Dotfiles and dot directories never match."""
        matcher = GlobMatcher("**/*")

        assert not matcher.matches(".hidden.md")
        assert not matcher.matches(".git/config")

    def test_list_matching_files(self, tmp_path: Path):
        """Listing walks the tree and returns sorted relative paths."""
        for rel in ["b.md", "a/c.md", "a/d.txt", ".git/x.md"]:
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x")

        assert GlobMatcher("**/*.md").list_matching_files(tmp_path) == ["a/c.md", "b.md"]
