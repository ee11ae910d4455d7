"""Reader for the ``merge:`` scheme.

A merge datasource overlays several other datasources into one mapping:

    merge:defaults|config.yaml|https://example.com/overrides.json

Each ``|``-separated part is either a defined alias or a URL (or file path)
read as an ad-hoc datasource. Parts are decoded as mappings and deep-merged
in order, so later parts take precedence on conflicting keys.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any

from loguru import logger

from ...core.exceptions import BackendFetchError, DataSourceError, StencilError
from ..base import ReadContext, ReadResult, Source
from ..media_types import JSON_MIMETYPE
from ..urls import parse_source_url

# Aliases of the merges in progress in the current task
_merging: ContextVar[frozenset[str]] = ContextVar("stencil_merging", default=frozenset())


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated recursively with ``overlay``.

    Nested mappings are merged; any other value in ``overlay`` replaces the
    one in ``base``. Neither argument is modified.
    """
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class MergeReader:
    """Deep-merges the mappings read from other datasources."""

    async def fetch(self, ctx: ReadContext, source: Source, *args: str) -> ReadResult:
        # Import here to avoid circular imports
        from ...formats import parse_map, to_json

        spec = source.url.path
        parts = [part for part in spec.split("|") if part]
        if len(parts) < 2:
            raise DataSourceError(
                f"need at least 2 datasources to merge, got {len(parts)}: {spec!r}"
            )

        if source.alias in parts:
            raise DataSourceError(f"datasource '{source.alias}' can't merge itself")

        active = _merging.get()
        for part in parts:
            if part in active:
                raise DataSourceError(
                    f"merge cycle: datasource '{source.alias}' includes '{part}', "
                    f"which is already being merged"
                )

        merged: dict[str, Any] = {}
        token = _merging.set(active | {source.alias})
        try:
            for part in parts:
                part_source = self._source_for(ctx, part)
                try:
                    content = await ctx.data.read_source(part_source)
                    value = parse_map(content.content_type, content.data.decode("utf-8"))
                except (StencilError, UnicodeDecodeError) as e:
                    raise BackendFetchError(
                        f"couldn't read merge part '{part}': {e}"
                    ) from e
                merged = deep_merge(merged, value)
        finally:
            _merging.reset(token)

        logger.debug(f"Merged {len(parts)} datasources for {source.alias!r}")
        return ReadResult(to_json(merged).encode("utf-8"), JSON_MIMETYPE)

    def _source_for(self, ctx: ReadContext, part: str) -> Source:
        if ctx.data.datasource_exists(part):
            return ctx.data.lookup_source(part)
        return Source(alias=part, url=parse_source_url(part))
