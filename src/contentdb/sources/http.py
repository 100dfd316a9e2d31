"""HTTP storage driver.

Keys are discovered from the sitemap published at the base URL and each
item is fetched with a GET of ``<base_url>/<key>``.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from urllib.parse import unquote, urljoin, urlparse

import httpx
from loguru import logger

from contentdb.core.exceptions import StorageError, StorageKeyError

from .base import BaseDriver
from .glob_matcher import GlobMatcher

_SITEMAP_NS = {"sm": "http://www.sitemaps.org/schemas/sitemap/0.9"}


class HTTPDriver(BaseDriver):
    """Driver for documents served over HTTP/HTTPS.

    Example:
        driver = HTTPDriver("https://docs.example.com/content", include="**/*.md")
        await driver.prepare()
        data = await driver.get_item("guide/intro.md")
    """

    def __init__(
        self,
        base_url: str,
        include: str = "**/*",
        ignore: list[str] | tuple[str, ...] = (),
        sitemap: str = "sitemap.xml",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        max_retries: int = 3,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._matcher = GlobMatcher(include, ignore)
        self._sitemap_url = urljoin(self._base_url + "/", sitemap)
        self._timeout = timeout
        self._headers = headers or {}
        self._max_retries = max_retries
        self._keys: list[str] | None = None
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers=self._headers,
            )
        return self._client

    async def dispose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def prepare(self) -> None:
        """Discover keys from the sitemap.

        Raises:
            StorageError: If the sitemap is unreachable or invalid.
        """
        urls = await self._parse_sitemap(self._sitemap_url)
        keys = set()
        for url in urls:
            key = self._url_to_key(url)
            if key is not None and self._matcher.matches(key):
                keys.add(key)
        self._keys = sorted(keys)
        logger.debug(f"Discovered {len(self._keys)} keys at {self._base_url}")

    async def get_keys(self) -> list[str]:
        if self._keys is None:
            await self.prepare()
        return list(self._keys or [])

    async def get_item(self, key: str) -> bytes:
        url = f"{self._base_url}/{key}"
        client = self._get_client()

        for attempt in range(self._max_retries):
            try:
                response = await client.get(url)
                if response.status_code == 404:
                    raise StorageKeyError(key)
                response.raise_for_status()
                return response.content
            except httpx.HTTPStatusError as e:
                if e.response.status_code >= 500 and attempt < self._max_retries - 1:
                    logger.warning(
                        f"HTTP {e.response.status_code} for {url}, "
                        f"retrying ({attempt + 1}/{self._max_retries})"
                    )
                    continue
                raise StorageError(
                    f"Failed to fetch {url}: HTTP {e.response.status_code}"
                ) from e
            except httpx.TimeoutException as e:
                if attempt < self._max_retries - 1:
                    logger.warning(f"Timeout for {url}, retrying ({attempt + 1}/{self._max_retries})")
                    continue
                raise StorageError(f"Failed to fetch {url}: request timed out") from e
            except httpx.RequestError as e:
                raise StorageError(f"Failed to fetch {url}: {e}") from e

        raise StorageError(f"Failed to fetch {url}: max retries exceeded")

    async def _parse_sitemap(self, sitemap_url: str) -> list[str]:
        try:
            response = await self._get_client().get(sitemap_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to fetch sitemap {sitemap_url}: {e}") from e

        try:
            root = ET.fromstring(response.text)
        except ET.ParseError as e:
            raise StorageError(f"Invalid sitemap XML at {sitemap_url}: {e}") from e

        # Sitemap index: recurse into the referenced sitemaps
        nested = root.findall(".//sm:sitemap/sm:loc", _SITEMAP_NS)
        if nested:
            urls: list[str] = []
            for loc in nested:
                if loc.text:
                    urls.extend(await self._parse_sitemap(loc.text.strip()))
            return urls

        locations = root.findall(".//sm:url/sm:loc", _SITEMAP_NS)
        if not locations:
            # Some sitemaps omit the namespace
            locations = root.findall(".//url/loc")
        return [loc.text.strip() for loc in locations if loc.text]

    def _url_to_key(self, url: str) -> str | None:
        base = urlparse(self._base_url)
        target = urlparse(url)
        if (target.scheme, target.netloc) != (base.scheme, base.netloc):
            return None
        base_path = base.path.rstrip("/") + "/"
        if not target.path.startswith(base_path):
            return None
        key = unquote(target.path[len(base_path):])
        return key or None
