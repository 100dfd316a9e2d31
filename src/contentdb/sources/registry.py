"""Driver registry mapping driver tags to driver factories.

Factories build a ready-to-read driver from mount options; any failure they
raise is reported as a mount failure for that collection.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable

from loguru import logger

from contentdb.core.types import StorageMountOptions

from .base import StorageDriver

if TYPE_CHECKING:
    from contentdb.core.config import Config


DriverFactory = Callable[[StorageMountOptions, "Config"], Awaitable[StorageDriver]]


class DriverRegistry:
    """Registry mapping driver tags to async driver factories.

    Example:
        registry = get_default_registry()
        driver = await registry.create(options, config)
    """

    def __init__(self) -> None:
        self._factories: dict[str, DriverFactory] = {}

    def register(self, driver: str, factory: DriverFactory) -> None:
        if driver in self._factories:
            logger.warning(f"Overwriting driver factory for {driver!r}")
        self._factories[driver] = factory
        logger.debug(f"Registered driver factory: {driver!r}")

    def is_registered(self, driver: str) -> bool:
        return driver in self._factories

    async def create(self, options: StorageMountOptions, config: "Config") -> StorageDriver:
        """Create a driver for mount options.

        Raises:
            ValueError: If the driver tag is not registered.
        """
        factory = self._factories.get(options.driver)
        if factory is None:
            available = ", ".join(sorted(self._factories)) or "(none)"
            raise ValueError(f"Unknown driver {options.driver!r}. Available: {available}")
        return await factory(options, config)

    @property
    def registered_drivers(self) -> list[str]:
        return sorted(self._factories)


_default_registry: DriverRegistry | None = None


def get_default_registry() -> DriverRegistry:
    """Get the default registry with the built-in drivers registered."""
    global _default_registry
    if _default_registry is None:
        _default_registry = DriverRegistry()
        _register_builtin_drivers(_default_registry)
    return _default_registry


def reset_default_registry() -> None:
    """Reset the default registry singleton."""
    global _default_registry
    _default_registry = None


def _register_builtin_drivers(registry: DriverRegistry) -> None:
    from .auth import auth_headers
    from .filesystem import FileSystemDriver
    from .http import HTTPDriver
    from .memory import MemoryDriver
    from .repository import RepositoryDriver, parse_repository

    async def fs_factory(options: StorageMountOptions, config: "Config") -> StorageDriver:
        return FileSystemDriver(
            Path(options.base),
            include=options.include,
            ignore=options.ignore,
            poll_interval=config.dev.poll_interval,
        )

    async def repository_factory(options: StorageMountOptions, config: "Config") -> StorageDriver:
        ref = parse_repository(options.repository or "", config.repository.default_ref)
        snapshot = Path(config.repository.cache_dir).expanduser() / ref.slug
        driver = RepositoryDriver(
            ref,
            snapshot,
            Path(options.base),
            include=options.include,
            ignore=options.ignore,
            headers=auth_headers(config.repository.token),
            timeout=config.repository.timeout,
        )
        await driver.prepare()
        return driver

    async def http_factory(options: StorageMountOptions, config: "Config") -> StorageDriver:
        headers = {"User-Agent": config.sources.user_agent}
        headers.update(auth_headers(config.sources.token))
        driver = HTTPDriver(
            options.base,
            include=options.include,
            ignore=options.ignore,
            sitemap=config.sources.sitemap,
            timeout=config.sources.timeout,
            headers=headers,
        )
        try:
            await driver.prepare()
        except BaseException:
            await driver.dispose()
            raise
        return driver

    async def memory_factory(options: StorageMountOptions, config: "Config") -> StorageDriver:
        return MemoryDriver()

    registry.register("fs", fs_factory)
    registry.register("repository", repository_factory)
    registry.register("http", http_factory)
    registry.register("memory", memory_factory)
