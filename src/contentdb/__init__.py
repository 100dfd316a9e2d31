"""contentdb - compile content collections into a queryable SQL database.

Example:
    import asyncio
    from contentdb import Config, build

    config = Config.from_file("contentdb.yml")
    result = asyncio.run(build(config))
    print(result.version)
"""

__version__ = "0.1.0"

from .app import BuildResult, build, dev
from .core.config import CollectionDeclaration, Config
from .core.exceptions import (
    CollectionsMountError,
    ConfigurationError,
    ContentError,
    IntegrityMismatch,
    MountError,
    ParseError,
    SchemaError,
)

__all__ = [
    "__version__",
    "BuildResult",
    "build",
    "dev",
    "CollectionDeclaration",
    "Config",
    "CollectionsMountError",
    "ConfigurationError",
    "ContentError",
    "IntegrityMismatch",
    "MountError",
    "ParseError",
    "SchemaError",
]
