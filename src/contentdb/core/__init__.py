"""Core types, configuration and errors for contentdb."""

from .config import (
    CollectionDeclaration,
    Config,
    DevConfig,
    RepositoryConfig,
    SourcesConfig,
)
from .exceptions import (
    CollectionsMountError,
    ConfigurationError,
    ContentError,
    DatabaseError,
    FieldError,
    IntegrityMismatch,
    MountError,
    ParseError,
    SchemaError,
    StorageError,
    StorageKeyError,
    ValidationError,
)
from .types import (
    ChangeEvent,
    ChangeType,
    CollectionInfo,
    CollectionSource,
    CollectionType,
    GeneratedFields,
    ResolvedCollection,
    StorageMountOptions,
)

__all__ = [
    "Config",
    "DevConfig",
    "RepositoryConfig",
    "SourcesConfig",
    "CollectionDeclaration",
    "ContentError",
    "ConfigurationError",
    "SchemaError",
    "MountError",
    "CollectionsMountError",
    "StorageError",
    "StorageKeyError",
    "FieldError",
    "ValidationError",
    "ParseError",
    "IntegrityMismatch",
    "DatabaseError",
    "CollectionType",
    "CollectionSource",
    "GeneratedFields",
    "ResolvedCollection",
    "CollectionInfo",
    "StorageMountOptions",
    "ChangeType",
    "ChangeEvent",
]
