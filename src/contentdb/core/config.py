"""Configuration management for contentdb."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError


@dataclass
class DevConfig:
    """Development live database configuration."""

    data_dir: str = ".data/content"
    database_name: str = "items.db"
    # Seconds between filesystem change scans
    poll_interval: float = 0.5

    def database_path(self, root_dir: Path) -> Path:
        """Get the live database location for a project root."""
        return Path(root_dir) / self.data_dir / self.database_name


def _default_cache_dir() -> Path:
    """Get default repository snapshot cache directory."""
    cache_dir = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    return cache_dir / "contentdb" / "repositories"


@dataclass
class RepositoryConfig:
    """Remote repository snapshot configuration."""

    cache_dir: Path = field(default_factory=_default_cache_dir)
    # Credential reference, see contentdb.sources.auth
    token: str | None = "$ENV:GITHUB_TOKEN"
    default_ref: str = "main"
    timeout: float = 60.0


@dataclass
class SourcesConfig:
    """HTTP driver configuration."""

    timeout: float = 30.0
    user_agent: str = "contentdb/0.1 (Content Compiler)"
    token: str | None = None
    sitemap: str = "sitemap.xml"


@dataclass
class CollectionDeclaration:
    """A user-declared collection, before resolution.

    Attributes:
        name: Collection name.
        type: ``page`` or ``data``.
        source: Glob string, mapping of source options, or None for
            schema-only collections.
        schema: Mapping of field name to field spec, or a Schema instance.
    """

    name: str
    type: str = "page"
    source: str | dict[str, Any] | None = None
    schema: Any = None

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any] | None) -> "CollectionDeclaration":
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Collection '{name}' must be a mapping")
        return cls(
            name=name,
            type=data.get("type", "page"),
            source=data.get("source"),
            schema=data.get("schema"),
        )


@dataclass
class Config:
    """Main application configuration."""

    root_dir: Path = field(default_factory=Path.cwd)
    content_dir: str = "content"
    build_dir: str = ".contentdb"
    collections: list[CollectionDeclaration] = field(default_factory=list)
    batch_size: int = 25
    dev: DevConfig = field(default_factory=DevConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)

    @property
    def content_path(self) -> Path:
        return Path(self.root_dir) / self.content_dir

    @property
    def build_path(self) -> Path:
        return Path(self.root_dir) / self.build_dir

    @property
    def database_path(self) -> Path:
        return self.dev.database_path(Path(self.root_dir))

    @classmethod
    def from_file(cls, path: Path | str) -> "Config":
        """Load configuration from a YAML file.

        Relative ``root_dir`` values are resolved against the file's directory.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            Config instance.

        Raises:
            ConfigurationError: If the file is missing or malformed.
        """
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        root_dir = Path(data.get("root_dir", "."))
        if not root_dir.is_absolute():
            root_dir = (path.parent / root_dir).resolve()

        collections = data.get("collections") or {}
        if not isinstance(collections, dict):
            raise ConfigurationError("'collections' must be a mapping of name to declaration")

        config = cls(
            root_dir=root_dir,
            content_dir=data.get("content_dir", "content"),
            build_dir=data.get("build_dir", ".contentdb"),
            collections=[
                CollectionDeclaration.from_dict(name, decl)
                for name, decl in collections.items()
            ],
            batch_size=int(data.get("batch_size", 25)),
        )

        dev = data.get("dev") or {}
        config.dev = DevConfig(
            data_dir=dev.get("data_dir", config.dev.data_dir),
            database_name=dev.get("database_name", config.dev.database_name),
            poll_interval=float(dev.get("poll_interval", config.dev.poll_interval)),
        )

        repository = data.get("repository") or {}
        if cache_dir := repository.get("cache_dir"):
            config.repository.cache_dir = Path(cache_dir).expanduser()
        if "token" in repository:
            config.repository.token = repository["token"]
        if ref := repository.get("default_ref"):
            config.repository.default_ref = ref

        sources = data.get("sources") or {}
        if timeout := sources.get("timeout"):
            config.sources.timeout = float(timeout)
        if token := sources.get("token"):
            config.sources.token = token

        return config.apply_env()

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls().apply_env()

    def apply_env(self) -> "Config":
        """Apply environment variable overrides in place."""
        if root := os.environ.get("CONTENTDB_ROOT"):
            self.root_dir = Path(root)

        if build_dir := os.environ.get("CONTENTDB_BUILD_DIR"):
            self.build_dir = build_dir

        if db_path := os.environ.get("CONTENTDB_DEV_DB"):
            db_path = Path(db_path)
            self.dev.data_dir = str(db_path.parent)
            self.dev.database_name = db_path.name

        return self
