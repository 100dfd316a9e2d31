"""Glob pattern matching for mount key enumeration.

A file is selected when it matches the include pattern and none of the
ignore patterns. ``**`` spans any number of directories (including none),
``*`` and ``?`` stay within a path segment and ``{a,b}`` alternates.
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path

from loguru import logger


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    i, n = 0, len(pattern)
    out: list[str] = []
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern[i : i + 3] == "**/":
                out.append("(?:.*/)?")
                i += 3
                continue
            if pattern[i : i + 2] == "**":
                out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        elif c == "{":
            end = pattern.find("}", i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                options = pattern[i + 1 : end].split(",")
                out.append("(?:" + "|".join(re.escape(o) for o in options) + ")")
                i = end
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("^" + "".join(out) + "$")


def glob_match(path: str, pattern: str) -> bool:
    """Check whether a relative, slash-separated path matches a glob."""
    return _compile(pattern.lstrip("/")).match(path.replace("\\", "/")) is not None


class GlobMatcher:
    """Match relative paths against one include glob and many ignore globs.

    Example:
        matcher = GlobMatcher("**/*.md", ignore=["drafts/**"])
        matcher.matches("docs/readme.md")  # True
        matcher.matches("drafts/wip.md")   # False
    """

    def __init__(self, include: str = "**/*", ignore: list[str] | tuple[str, ...] = ()) -> None:
        self.include = include or "**/*"
        self.ignore = tuple(ignore)

    def matches(self, path: str) -> bool:
        normalized = path.replace("\\", "/")
        if any(part.startswith(".") for part in normalized.split("/")):
            return False
        if not glob_match(normalized, self.include):
            return False
        return not any(glob_match(normalized, exc) for exc in self.ignore)

    def list_matching_files(self, base_path: Path) -> list[str]:
        """List relative paths of files below ``base_path`` that match.

        Hidden directories are not descended into.

        Returns:
            Sorted relative paths with forward slashes.
        """
        found: list[str] = []
        for root, dirs, files in os.walk(base_path):
            dirs[:] = [d for d in dirs if not d.startswith(".")]
            for name in files:
                rel_path = (Path(root) / name).relative_to(base_path).as_posix()
                if self.matches(rel_path):
                    found.append(rel_path)
                else:
                    logger.trace(f"Not matched: {rel_path}")
        return sorted(found)
