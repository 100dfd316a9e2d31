"""Credential resolution for remote drivers.

Credential references in configuration use a URI-like format:
- $ENV:VAR_NAME - Read from environment variable
- $KEYRING:key - Read from the system keyring (service "contentdb")
- literal value - Use the value directly (not recommended for secrets)
"""

from __future__ import annotations

import os

from loguru import logger

from contentdb.core.exceptions import ConfigurationError

KEYRING_SERVICE = "contentdb"


class CredentialNotFoundError(ConfigurationError):
    """Credential could not be found."""

    def __init__(self, key: str, provider: str):
        self.key = key
        self.provider = provider
        super().__init__(f"Credential '{key}' not found in {provider}")


def _from_keyring(key: str) -> str | None:
    import keyring
    from keyring.errors import KeyringError

    try:
        return keyring.get_password(KEYRING_SERVICE, key)
    except KeyringError as e:
        logger.warning(f"Failed to read from keyring: {e}")
        return None


class CredentialResolver:
    """Resolves credential references to actual values.

    Example:
        resolver = CredentialResolver()
        token = resolver.resolve("$ENV:GITHUB_TOKEN", required=False)
    """

    def resolve(self, reference: str | None, required: bool = True) -> str | None:
        """Resolve a credential reference to its value.

        Args:
            reference: Credential reference string or literal value.
            required: If True, raise error when credential not found.

        Returns:
            Resolved credential value, or None if not found and not required.

        Raises:
            CredentialNotFoundError: If required=True and credential not found.
        """
        if not reference:
            if required:
                raise CredentialNotFoundError("(empty)", "none")
            return None

        if not reference.startswith("$"):
            return reference

        provider, sep, key = reference[1:].partition(":")
        if not sep:
            logger.warning(f"Malformed credential reference: {reference}")
            return reference

        provider = provider.upper()
        if provider == "ENV":
            value = os.environ.get(key)
        elif provider == "KEYRING":
            value = _from_keyring(key)
        else:
            logger.warning(f"Unknown credential provider: {provider}")
            value = None

        if value is None and required:
            raise CredentialNotFoundError(key, provider)
        return value


def auth_headers(token_reference: str | None, resolver: CredentialResolver | None = None) -> dict[str, str]:
    """Build a bearer Authorization header from an optional reference."""
    token = (resolver or CredentialResolver()).resolve(token_reference, required=False)
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}
