"""CLI command handlers."""

from .build import handle_build, handle_version
from .collections import add_collections_arguments, handle_collections
from .dev import handle_dev

__all__ = [
    "handle_build",
    "handle_version",
    "add_collections_arguments",
    "handle_collections",
    "handle_dev",
]
