"""Build pipeline: dump generation, packaging and the dev watch loop."""

from .artifacts import (
    BuildArtifacts,
    compress_dump,
    decompress_dump,
    read_artifacts,
    write_artifacts,
)
from .dump import DEFAULT_BATCH_SIZE, chunks, generate_sql_dump
from .integrity import VERSION_PREFIX, compute_integrity_version
from .watch import DevWatcher, WatchState

__all__ = [
    "BuildArtifacts",
    "compress_dump",
    "decompress_dump",
    "read_artifacts",
    "write_artifacts",
    "DEFAULT_BATCH_SIZE",
    "chunks",
    "generate_sql_dump",
    "VERSION_PREFIX",
    "compute_integrity_version",
    "DevWatcher",
    "WatchState",
]
