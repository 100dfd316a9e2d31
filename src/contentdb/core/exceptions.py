"""Custom exceptions for contentdb."""

from __future__ import annotations

from dataclasses import dataclass


class ContentError(Exception):
    """Base exception for all contentdb errors."""

    pass


class ConfigurationError(ContentError):
    """Collection declarations or options are invalid."""

    pass


class SchemaError(ContentError):
    """A collection schema has an invalid shape."""

    pass


class MountError(ContentError):
    """A storage driver could not be constructed for a collection."""

    def __init__(self, collection: str, reason: str):
        """Initialize exception with the failing collection.

        Args:
            collection: Name of the collection whose mount failed.
            reason: Human readable failure reason.
        """
        self.collection = collection
        self.reason = reason
        super().__init__(f"Cannot mount collection '{collection}': {reason}")


class CollectionsMountError(MountError):
    """One or more collections failed to mount.

    Each failing collection is reported independently so several
    misconfigurations surface together.
    """

    def __init__(self, errors: list[MountError]):
        self.errors = errors
        super().__init__(
            ", ".join(e.collection for e in errors),
            "; ".join(f"{e.collection}: {e.reason}" for e in errors),
        )


class StorageError(ContentError):
    """Storage read failed."""

    pass


class StorageKeyError(StorageError):
    """Storage key does not exist."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Storage key not found: {key}")


@dataclass(frozen=True)
class FieldError:
    """A single validation failure at a field path."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationError(ContentError):
    """Candidate record does not satisfy its schema."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__("; ".join(str(e) for e in errors))


class ParseError(ContentError):
    """A document could not be parsed into a record."""

    def __init__(self, key: str, cause: Exception | str):
        """Initialize exception with key and cause.

        Args:
            key: Storage key of the offending document.
            cause: Underlying exception or message.
        """
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to parse {key}: {cause}")


class IntegrityMismatch(ContentError):
    """Loaded artifact does not match the current collection shapes."""

    def __init__(self, expected: str, actual: str | None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Integrity version mismatch: expected {expected!r}, found {actual!r}"
        )


class DatabaseError(ContentError):
    """Database operation failed."""

    pass
