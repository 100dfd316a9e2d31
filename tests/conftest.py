"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
from loguru import logger

from contentdb.collections.resolver import resolve_collections
from contentdb.core.config import CollectionDeclaration, Config, RepositoryConfig
from contentdb.sources.memory import MemoryDriver
from contentdb.sources.registry import reset_default_registry
from contentdb.sources.storage import CollectionsStorage
from contentdb.store.database import Database


@pytest.fixture(autouse=True)
def _fresh_registry():
    """Reset the default driver registry between tests."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Provide an empty content directory."""
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path: Path, content_dir: Path) -> Config:
    """Provide a configuration rooted at a temporary directory."""
    return Config(
        root_dir=tmp_path,
        repository=RepositoryConfig(cache_dir=tmp_path / "cache", token=None),
    )


@pytest.fixture
def db() -> Database:
    """Provide a connected in-memory database."""
    database = Database()
    database.connect()
    yield database
    database.close()


@pytest.fixture
def posts(config: Config):
    """Resolve a single ``posts`` page collection plus ``_info``."""
    return resolve_collections(
        [CollectionDeclaration("posts", "page", "posts/**/*.md", {"title": "string"})],
        config,
    )


@pytest.fixture
def memory_storage() -> tuple[CollectionsStorage, MemoryDriver]:
    """Provide storage with a memory driver mounted at ``posts``."""
    driver = MemoryDriver()
    storage = CollectionsStorage()
    storage.mount("posts", driver)
    return storage, driver


@pytest.fixture
def log_messages() -> list[tuple[str, str]]:
    """Capture (level, message) pairs logged during a test."""
    messages: list[tuple[str, str]] = []
    handler_id = logger.add(
        lambda m: messages.append((m.record["level"].name, m.record["message"])),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
