"""Reader for AWS Systems Manager Parameter Store (``aws+smp:``).

Parameter names are hierarchical. A path ending in ``/`` is read as a
directory and lists the parameter names under it; any other path reads one
parameter (decrypted) as a JSON object.

Example:
    aws+smp:///app/prod/db_url     -> {"Name": "/app/prod/db_url", "Value": ...}
    aws+smp:///app/prod/           -> ["db_url", "api_key"]
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from ..base import ReadContext, ReadResult, Source
from ..media_types import JSON_ARRAY_MIMETYPE, JSON_MIMETYPE
from ..urls import parse_datasource_url_args, root_key, split_root

# Signature of a parameter store client factory; returns a boto3 SSM client
# or anything with the same get_parameter/get_parameters_by_path methods
ClientFactory = Callable[[], Any]


def default_client_factory() -> Any:
    """Create an SSM client from the default boto3 session."""
    # Import here so boto3 is only needed when aws+smp is used
    import boto3

    return boto3.client("ssm")


class ParameterStoreReader:
    """Reads parameters from AWS SSM Parameter Store.

    The SSM client is created on first use and shared, through the handle
    cache, by every datasource with the same backend root.

    Example:
        reader = ParameterStoreReader()
        registry.register("aws+smp", reader)
    """

    def __init__(self, client_factory: ClientFactory | None = None) -> None:
        self._client_factory = client_factory or default_client_factory

    async def fetch(self, ctx: ReadContext, source: Source, *args: str) -> ReadResult:
        _, param_path = parse_datasource_url_args(source.url, *args)

        root, _ = split_root(source.url)
        client = await ctx.handles.get_or_create(
            f"ssm:{root_key(root)}", self._client_factory
        )

        if param_path.endswith("/"):
            names = await self._list_params(client, param_path)
            return ReadResult(_to_json(names), JSON_ARRAY_MIMETYPE)

        param = await self._get_param(client, param_path)
        return ReadResult(_to_json(param), JSON_MIMETYPE)

    async def _get_param(self, client: Any, param_path: str) -> dict[str, Any]:
        response = await asyncio.to_thread(
            client.get_parameter, Name=param_path, WithDecryption=True
        )
        return response["Parameter"]

    async def _list_params(self, client: Any, param_path: str) -> list[str]:
        names: list[str] = []
        kwargs: dict[str, Any] = {"Path": param_path}
        while True:
            response = await asyncio.to_thread(client.get_parameters_by_path, **kwargs)
            for param in response.get("Parameters", []):
                names.append(param["Name"][len(param_path):])
            token = response.get("NextToken")
            if not token:
                return names
            kwargs["NextToken"] = token


def _to_json(value: Any) -> bytes:
    # Import here to avoid circular imports
    from ...formats import to_json

    return to_json(value).encode("utf-8")
