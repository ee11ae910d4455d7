"""HTTP/HTTPS provider.

This module provides a provider that fetches datasources from web servers
with httpx. One provider, with one connection pool, serves every datasource
under the same scheme, host and query.
"""

from __future__ import annotations

from typing import Mapping
from urllib.parse import SplitResult, urlunsplit

import httpx
from loguru import logger

from ...core.config import HTTPConfig
from .base import FileInfo, ProviderError


class HTTPHandle:
    """A fetched HTTP response body."""

    def __init__(self, content: bytes, content_type: str | None):
        self._content = content
        self._content_type = content_type

    async def stat(self) -> FileInfo:
        return FileInfo(is_dir=False, content_type=self._content_type)

    async def read_all(self) -> bytes:
        return self._content


class HTTPProvider:
    """Provider for http:// and https:// roots.

    Example:
        provider = HTTPProvider(urlsplit("https://example.com/"), HTTPConfig())
        handle = await provider.open("data/foo.json")
        info = await handle.stat()   # content_type from the response
        body = await handle.read_all()
    """

    def __init__(
        self,
        root: SplitResult,
        config: HTTPConfig | None = None,
        headers: Mapping[str, list[str]] | None = None,
    ) -> None:
        """Initialize HTTP provider.

        Args:
            root: Backend root (scheme, host and query).
            config: HTTP settings.
            headers: Extra request headers for this datasource.
        """
        self._root = root
        self._config = config or HTTPConfig()
        self._headers = dict(headers or {})
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> list[tuple[str, str]]:
        """Get HTTP headers, repeated names allowed."""
        headers = [("User-Agent", self._config.user_agent)]
        for name, values in self._headers.items():
            headers.extend((name, value) for value in values)
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                follow_redirects=self._config.follow_redirects,
                headers=self._get_headers(),
            )
        return self._client

    def url_for(self, name: str) -> str:
        """Build the request URL for a relative path."""
        path = "/" if name == "." else "/" + name
        return urlunsplit((self._root.scheme, self._root.netloc, path, self._root.query, ""))

    async def open(self, name: str) -> HTTPHandle:
        """Fetch the resource at ``name``.

        Raises:
            ProviderError: On transport errors and non-success statuses.
        """
        client = await self._get_client()
        url = self.url_for(name)

        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                url, f"HTTP {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderError(url, "Request timed out") from e
        except httpx.RequestError as e:
            raise ProviderError(url, str(e)) from e

        content_type = response.headers.get("Content-Type", "")
        base_content_type = content_type.split(";")[0].strip()
        logger.debug(f"GET {url}: {response.status_code} ({base_content_type or 'no type'})")

        return HTTPHandle(response.content, base_content_type or None)

    async def read_dir(self, name: str) -> list[str]:
        raise ProviderError(self.url_for(name), "directory listing is not supported over HTTP")

    async def aclose(self) -> None:
        """Close HTTP client if open."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
