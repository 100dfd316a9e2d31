"""Storage drivers and the collections storage manager."""

from .base import BaseDriver, StorageDriver, Unwatch, WatchCallback
from .filesystem import FileSystemDriver, diff_snapshots
from .glob_matcher import GlobMatcher, glob_match
from .http import HTTPDriver
from .memory import MemoryDriver
from .registry import DriverRegistry, get_default_registry, reset_default_registry
from .repository import RepositoryDriver, RepositoryRef, download_snapshot, parse_repository
from .storage import (
    CollectionsStorage,
    create_collections_storage,
    generate_storage_mount_options,
    split_key,
)

__all__ = [
    "StorageDriver",
    "BaseDriver",
    "WatchCallback",
    "Unwatch",
    "FileSystemDriver",
    "diff_snapshots",
    "GlobMatcher",
    "glob_match",
    "HTTPDriver",
    "MemoryDriver",
    "RepositoryDriver",
    "RepositoryRef",
    "download_snapshot",
    "parse_repository",
    "DriverRegistry",
    "get_default_registry",
    "reset_default_registry",
    "CollectionsStorage",
    "create_collections_storage",
    "generate_storage_mount_options",
    "split_key",
]
