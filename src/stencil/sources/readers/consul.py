"""Reader for the Consul key-value store (``consul:``, ``consul+http:``, ``consul+https:``).

Keys are read through Consul's HTTP API with httpx. A path ending in ``/``
lists the keys directly under it; any other path reads one raw value.

Example:
    consul://consul.internal:8500/app/prod/db_url  -> raw value of app/prod/db_url
    consul:///app/prod/                            -> ["db_url", "nested/"]

The agent address comes from the URL authority, else ``CONSUL_HTTP_ADDR``,
else ``localhost:8500``. ``CONSUL_HTTP_TOKEN`` is sent as the ACL token.
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import SplitResult

import httpx
from loguru import logger

from ...core.config import HTTPConfig
from ...core.exceptions import BackendFetchError
from ..base import ReadContext, ReadResult, Source
from ..media_types import JSON_ARRAY_MIMETYPE
from ..urls import parse_datasource_url_args, root_key, split_root

DEFAULT_ADDRESS = "localhost:8500"


def consul_address(url: SplitResult) -> str:
    """Return the base URL of the Consul agent for a datasource URL."""
    scheme = "https" if url.scheme.lower() == "consul+https" else "http"
    address = url.netloc or os.environ.get("CONSUL_HTTP_ADDR", "") or DEFAULT_ADDRESS
    if "://" in address:
        return address.rstrip("/")
    return f"{scheme}://{address}"


class ConsulReader:
    """Reads keys from a Consul KV store.

    One HTTP client is created per agent root and shared, through the handle
    cache, by every datasource addressing it. Values are returned without a
    media type, so the datasource's own type (or the key's extension) applies.
    """

    async def fetch(self, ctx: ReadContext, source: Source, *args: str) -> ReadResult:
        params, path = parse_datasource_url_args(source.url, *args)
        query = {key: value for key, value in params.items() if key != "type"}
        key = path.lstrip("/")

        root, _ = split_root(source.url)
        client = await ctx.handles.get_or_create(
            f"consul:{root_key(root)}",
            lambda: self._create_client(source.url, ctx.config.http),
        )

        if not key or key.endswith("/"):
            keys = await self._list_keys(client, key, query)
            return ReadResult(_to_json(keys), JSON_ARRAY_MIMETYPE)

        return ReadResult(await self._get_value(client, key, query))

    def _create_client(self, url: SplitResult, config: HTTPConfig) -> httpx.AsyncClient:
        headers = {"User-Agent": config.user_agent}
        token = os.environ.get("CONSUL_HTTP_TOKEN")
        if token:
            headers["X-Consul-Token"] = token
        return httpx.AsyncClient(
            base_url=consul_address(url),
            timeout=config.timeout,
            headers=headers,
        )

    async def _get_value(
        self, client: httpx.AsyncClient, key: str, query: dict[str, Any]
    ) -> bytes:
        response = await self._get(client, key, {**query, "raw": ""})
        if response.status_code == 404:
            raise BackendFetchError(f"consul key '{key}' not found")
        return response.content

    async def _list_keys(
        self, client: httpx.AsyncClient, prefix: str, query: dict[str, Any]
    ) -> list[str]:
        response = await self._get(client, prefix, {**query, "keys": "", "separator": "/"})
        # Consul answers 404 for a prefix with no keys
        if response.status_code == 404:
            return []
        return [name[len(prefix):] for name in response.json() if name != prefix]

    async def _get(
        self, client: httpx.AsyncClient, key: str, query: dict[str, Any]
    ) -> httpx.Response:
        path = f"/v1/kv/{key}"
        try:
            response = await client.get(path, params=query)
            if response.status_code != 404:
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendFetchError(
                f"consul HTTP {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except httpx.TimeoutException as e:
            raise BackendFetchError("consul request timed out") from e
        except httpx.RequestError as e:
            raise BackendFetchError(f"consul request failed: {e}") from e

        logger.debug(f"GET {path}: {response.status_code}")
        return response


def _to_json(value: Any) -> bytes:
    # Import here to avoid circular imports
    from ...formats import to_json

    return to_json(value).encode("utf-8")
