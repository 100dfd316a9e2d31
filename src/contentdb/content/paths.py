"""Key and route path helpers."""

from __future__ import annotations

import re
from posixpath import splitext

_ORDER_PREFIX = re.compile(r"^\d+\.")


def split_extension(relative_key: str) -> tuple[str, str]:
    """Split a relative key into its stem and extension (without the dot)."""
    stem, ext = splitext(relative_key)
    return stem, ext.lstrip(".").lower()


def clean_segment(segment: str) -> str:
    """Drop ordering prefixes and normalize a path segment for routing."""
    segment = _ORDER_PREFIX.sub("", segment)
    return re.sub(r"\s+", "-", segment.strip()).lower()


def generate_path(stem: str, prefix: str | None = "/") -> str:
    """Build the route path of a page from its stem.

    ``1.guide/2.install`` with prefix ``/docs`` becomes ``/docs/guide/install``
    and a trailing ``index`` segment resolves to its parent.
    """
    segments = [clean_segment(s) for s in stem.split("/") if s]
    segments = [s for s in segments if s]
    if segments and segments[-1] == "index":
        segments.pop()

    base = "/" + (prefix or "/").strip("/")
    route = "/".join(segments)
    if not route:
        return base
    return f"{base.rstrip('/')}/{route}"
