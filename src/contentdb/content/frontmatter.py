"""Front matter parsing.

Splits a YAML block delimited by ``---`` lines from the start of a document.
"""

import re
from dataclasses import dataclass
from typing import Any

import yaml


@dataclass
class FrontmatterResult:
    """Result from parsing YAML front matter.

    Attributes:
        data: Parsed YAML data as dictionary (empty if no front matter).
        content: Document content after the front matter is removed.
        has_frontmatter: Whether front matter was found.
    """

    data: dict[str, Any]
    content: str
    has_frontmatter: bool


# Matches: ---\n<yaml content>\n---\n (an empty block is allowed)
_FRONTMATTER_PATTERN = re.compile(
    r"^---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|$)",
    re.DOTALL | re.MULTILINE,
)


class FrontmatterError(ValueError):
    """Front matter is present but not a valid YAML mapping."""

    pass


def parse_frontmatter(content: str) -> FrontmatterResult:
    """Parse YAML front matter from markdown content.

    Args:
        content: Full markdown document content.

    Returns:
        FrontmatterResult with parsed data and remaining content.

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping.

    Example:
        >>> result = parse_frontmatter('''---
        ... title: My Doc
        ... tags: [python, code]
        ... ---
        ... # Hello World
        ... ''')
        >>> result.data
        {'title': 'My Doc', 'tags': ['python', 'code']}
    """
    content = content.lstrip("\ufeff")
    match = _FRONTMATTER_PATTERN.match(content)
    if not match:
        return FrontmatterResult(data={}, content=content, has_frontmatter=False)

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise FrontmatterError(f"invalid front matter YAML: {e}") from e

    if data is None:
        data = {}
    elif not isinstance(data, dict):
        raise FrontmatterError(
            f"front matter must be a mapping, got {type(data).__name__}"
        )

    return FrontmatterResult(
        data={str(k): v for k, v in data.items()},
        content=content[match.end():],
        has_frontmatter=True,
    )
