"""Build artifact packaging.

The dump is shipped as base64 text of the deflated JSON statement list so
it can be embedded directly in a distributable without a separate asset.
Alongside it the build writes the plain integrity version, the collections
index and the generated item types.
"""

from __future__ import annotations

import base64
import json
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import fsspec
from loguru import logger

from contentdb.collections.info import collections_index, generate_types
from contentdb.core.exceptions import ContentError
from contentdb.core.types import ResolvedCollection

DUMP_FILE = "dump.txt"
VERSION_FILE = "version.txt"
INDEX_FILE = "collections.json"
TYPES_FILE = "content_types.py"


@dataclass
class BuildArtifacts:
    """Paths of the files written by a build."""

    dump: Path
    version: Path
    index: Path
    types: Path


def compress_dump(statements: Sequence[str]) -> str:
    """Deflate the JSON-encoded statement list and base64 encode it."""
    payload = json.dumps(list(statements), ensure_ascii=False).encode("utf-8")
    return base64.b64encode(zlib.compress(payload, 9)).decode("ascii")


def decompress_dump(artifact: str | bytes) -> list[str]:
    """Reverse ``compress_dump``.

    Raises:
        ContentError: If the artifact is not a packaged statement list.
    """
    try:
        payload = zlib.decompress(base64.b64decode(artifact, validate=True))
        statements = json.loads(payload.decode("utf-8"))
    except (ValueError, zlib.error) as e:
        raise ContentError(f"Invalid dump artifact: {e}") from e
    if not isinstance(statements, list) or not all(isinstance(s, str) for s in statements):
        raise ContentError("Invalid dump artifact: expected a list of statements")
    return statements


def write_artifacts(
    build_dir: Path,
    collections: Sequence[ResolvedCollection],
    statements: Sequence[str],
    version: str,
) -> BuildArtifacts:
    """Write all build outputs into ``build_dir``.

    Args:
        build_dir: Output directory, created if needed.
        collections: Resolved collections, ``_info`` included.
        statements: Full dump statements.
        version: Integrity version.

    Returns:
        Paths of the written files.
    """
    fs = fsspec.filesystem("file")
    build_dir = Path(build_dir).expanduser().resolve()
    fs.makedirs(str(build_dir), exist_ok=True)

    artifacts = BuildArtifacts(
        dump=build_dir / DUMP_FILE,
        version=build_dir / VERSION_FILE,
        index=build_dir / INDEX_FILE,
        types=build_dir / TYPES_FILE,
    )
    contents = {
        artifacts.dump: compress_dump(statements),
        artifacts.version: version + "\n",
        artifacts.index: json.dumps(collections_index(collections), indent=2) + "\n",
        artifacts.types: generate_types(collections),
    }
    for path, text in contents.items():
        with fs.open(str(path), "w", encoding="utf-8") as f:
            f.write(text)
        logger.debug(f"Wrote {path}")

    logger.info(f"Wrote build artifacts to {build_dir}")
    return artifacts


def read_artifacts(build_dir: Path) -> tuple[list[str], str]:
    """Read the dump statements and integrity version from a build directory.

    Raises:
        ContentError: If the artifacts are missing or malformed.
    """
    fs = fsspec.filesystem("file")
    build_dir = Path(build_dir).expanduser().resolve()
    texts = []
    for name in (DUMP_FILE, VERSION_FILE):
        path = build_dir / name
        if not fs.exists(str(path)):
            raise ContentError(f"Missing build artifact: {path}")
        with fs.open(str(path), "r", encoding="utf-8") as f:
            texts.append(f.read().strip())
    artifact, version = texts
    return decompress_dump(artifact), version
