"""Remote repository snapshot driver.

Downloads a tarball of a hosted git repository at a given ref, extracts it
into a local cache directory and serves it through the filesystem driver.
Snapshots are reused until a refresh is requested.
"""

from __future__ import annotations

import io
import re
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import fsspec
import httpx
from loguru import logger

from contentdb.core.exceptions import ConfigurationError, StorageError

from .base import BaseDriver
from .filesystem import FileSystemDriver

_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?P<host>github\.com|gitlab\.com)/(?P<owner>[^/]+)/(?P<name>[^/#]+?)"
    r"(?:\.git)?(?:/(?:-/)?tree/(?P<tree>[^#]+))?/?(?:#(?P<ref>.+))?$"
)
_SHORT_PATTERN = re.compile(
    r"^(?:(?P<host>github|gitlab):)?(?P<owner>[\w.-]+)/(?P<name>[\w.-]+?)(?:#(?P<ref>.+))?$"
)


@dataclass(frozen=True)
class RepositoryRef:
    """A parsed repository reference."""

    host: str
    owner: str
    name: str
    ref: str

    @property
    def slug(self) -> str:
        """Filesystem-safe cache directory name."""
        raw = f"{self.host.split('.')[0]}-{self.owner}-{self.name}-{self.ref}"
        return re.sub(r"[^A-Za-z0-9._-]", "_", raw)

    @property
    def tarball_url(self) -> str:
        if self.host == "gitlab.com":
            return (
                f"https://gitlab.com/{self.owner}/{self.name}/-/archive/"
                f"{self.ref}/{self.name}-{self.ref}.tar.gz"
            )
        return f"https://codeload.github.com/{self.owner}/{self.name}/tar.gz/{self.ref}"


def parse_repository(reference: str, default_ref: str = "main") -> RepositoryRef:
    """Parse a repository reference.

    Accepts ``https://github.com/owner/repo``, ``.../tree/<ref>``,
    ``github:owner/repo#ref``, ``gitlab:owner/repo`` and ``owner/repo``.

    Raises:
        ConfigurationError: If the reference is not recognized.
    """
    reference = reference.strip()
    match = _URL_PATTERN.match(reference)
    if match:
        ref = match.group("ref") or match.group("tree") or default_ref
        return RepositoryRef(match.group("host"), match.group("owner"), match.group("name"), ref.strip("/"))

    match = _SHORT_PATTERN.match(reference)
    if match:
        host = f"{match.group('host') or 'github'}.com"
        return RepositoryRef(host, match.group("owner"), match.group("name"), match.group("ref") or default_ref)

    raise ConfigurationError(f"Unsupported repository reference: {reference!r}")


async def download_snapshot(
    repository: RepositoryRef,
    target: Path,
    headers: dict[str, str] | None = None,
    timeout: float = 60.0,
    refresh: bool = False,
) -> Path:
    """Download and extract a repository snapshot.

    Args:
        repository: Repository to download.
        target: Directory receiving the extracted tree.
        headers: Extra request headers (authorization).
        timeout: Request timeout in seconds.
        refresh: Re-download even when a snapshot exists.

    Returns:
        The snapshot directory.

    Raises:
        StorageError: If the download or extraction fails.
    """
    fs = fsspec.filesystem("file")
    if target.is_dir() and any(target.iterdir()) and not refresh:
        logger.debug(f"Reusing repository snapshot: {target}")
        return target

    logger.info(f"Downloading {repository.tarball_url}")
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, headers=headers) as client:
            response = await client.get(repository.tarball_url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise StorageError(
            f"Failed to download {repository.tarball_url}: HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise StorageError(f"Failed to download {repository.tarball_url}: {e}") from e

    staging = target.with_name(target.name + ".partial")
    if fs.exists(str(staging)):
        fs.rm(str(staging), recursive=True)

    try:
        count = _extract(response.content, staging, fs)
    except (tarfile.TarError, OSError) as e:
        raise StorageError(f"Failed to extract {repository.tarball_url}: {e}") from e

    if fs.exists(str(target)):
        fs.rm(str(target), recursive=True)
    staging.rename(target)
    logger.info(f"Extracted {count} files to {target}")
    return target


def _extract(payload: bytes, destination: Path, fs) -> int:
    """Extract regular files, dropping the archive's top-level directory."""
    count = 0
    fs.makedirs(str(destination), exist_ok=True)
    with tarfile.open(fileobj=io.BytesIO(payload), mode="r:gz") as archive:
        for member in archive:
            if not member.isfile():
                continue
            parts = PurePosixPath(member.name).parts[1:]
            if not parts or ".." in parts or PurePosixPath(member.name).is_absolute():
                continue
            target = destination.joinpath(*parts)
            fs.makedirs(str(target.parent), exist_ok=True)
            source = archive.extractfile(member)
            if source is None:
                continue
            with fs.open(str(target), "wb") as out:
                out.write(source.read())
            count += 1
    return count


class RepositoryDriver(BaseDriver):
    """Driver serving a local snapshot of a remote repository.

    ``prepare`` must be awaited before reads; it downloads the snapshot when
    missing and mounts ``base`` inside it.
    """

    def __init__(
        self,
        repository: RepositoryRef,
        snapshot_dir: Path,
        base: Path,
        include: str = "**/*",
        ignore: list[str] | tuple[str, ...] = (),
        headers: dict[str, str] | None = None,
        timeout: float = 60.0,
    ) -> None:
        self._repository = repository
        self._snapshot_dir = snapshot_dir
        self._base = base
        self._include = include
        self._ignore = tuple(ignore)
        self._headers = headers
        self._timeout = timeout
        self._fs: FileSystemDriver | None = None

    async def prepare(self, refresh: bool = False) -> None:
        await download_snapshot(
            self._repository,
            self._snapshot_dir,
            headers=self._headers,
            timeout=self._timeout,
            refresh=refresh,
        )
        self._fs = FileSystemDriver(self._base, include=self._include, ignore=self._ignore)

    def _driver(self) -> FileSystemDriver:
        if self._fs is None:
            raise StorageError(f"Repository snapshot not prepared: {self._repository.slug}")
        return self._fs

    async def get_keys(self) -> list[str]:
        return await self._driver().get_keys()

    async def get_item(self, key: str) -> bytes:
        return await self._driver().get_item(key)
