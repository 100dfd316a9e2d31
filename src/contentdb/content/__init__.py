"""Content parsing pipeline."""

from .frontmatter import FrontmatterError, FrontmatterResult, parse_frontmatter
from .markdown import MarkdownDocument, render_markdown, slugify
from .parser import ParsedContentRecord, parse_content, parse_document
from .paths import generate_path, split_extension

__all__ = [
    "FrontmatterError",
    "FrontmatterResult",
    "parse_frontmatter",
    "MarkdownDocument",
    "render_markdown",
    "slugify",
    "ParsedContentRecord",
    "parse_content",
    "parse_document",
    "generate_path",
    "split_extension",
]
