"""The datasource read pipeline.

``Data`` owns the datasources of one render pass and reads them: it resolves
the read argument against the datasource URL, routes the result to a backend
provider or a scheme reader, decides the media type, and caches the content
so each (alias, arguments) pair is fetched at most once.
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from ..core.config import Config
from ..core.exceptions import (
    BackendFetchError,
    DataSourceError,
    DecodeError,
    UndefinedAliasError,
)
from ..formats import parse_data, to_json
from ..sources.base import FileContent, ReadContext, Source
from ..sources.handles import HandleCache
from ..sources.media_types import JSON_ARRAY_MIMETYPE, guess_media_type
from ..sources.providers import ProviderMux, ProviderNotFoundError, create_default_mux
from ..sources.providers.base import Provider
from ..sources.readers import StdinBuffer
from ..sources.registry import ReaderRegistry, create_default_registry
from ..sources.urls import (
    format_reference,
    parse_reference,
    parse_source_url,
    resolve_url,
    split_root,
)


class Data:
    """Datasources and their cached content for one render pass.

    Content is cached for the lifetime of the instance, without invalidation,
    so a new instance should be used for each render pass.

    Usage as context manager (recommended):

        async with Data.from_config(config) as data:
            config_value = await data.datasource("config")
            listing = await data.datasource("config", "nested/")
            text = await data.include("readme")

    Attributes:
        config: Active configuration.
        sources: Defined datasources by alias.
        registry: Readers for schemes without a provider.
        mux: Backend providers.
        handles: Backend handles shared by root.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        readers: ReaderRegistry | None = None,
        providers: ProviderMux | None = None,
        sources: dict[str, Source] | None = None,
    ) -> None:
        self.config = config or Config()
        self.handles = HandleCache()
        self.registry = readers or create_default_registry()
        self.mux = providers or create_default_mux(self.config.http, self.handles)
        self.sources: dict[str, Source] = dict(sources or {})

        self._stdin = StdinBuffer(self.config.stdin)
        self._cache: dict[str, FileContent] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "Data":
        """Create a pipeline with the datasources and contexts of ``config``."""
        data = cls(config, **kwargs)
        for defined in (config.datasources, config.context):
            for alias, ds in defined.items():
                data.sources[alias] = Source(
                    alias=alias, url=ds.url, header=dict(ds.header)
                )
        return data

    async def __aenter__(self) -> "Data":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release providers and backend handles."""
        await self.mux.aclose()
        await self.handles.aclose()

    # =========================================================================
    # Datasource definitions
    # =========================================================================

    def define_datasource(self, alias: str, value: str) -> None:
        """Define a datasource, unless the alias is already defined.

        Raises:
            DataSourceError: If the alias is empty or the URL is invalid.
        """
        if not alias:
            raise DataSourceError("datasource alias must be provided")
        if self.datasource_exists(alias):
            return
        self.sources[alias] = Source(
            alias=alias,
            url=parse_source_url(value),
            header=dict(self.config.extra_headers.get(alias, {})),
        )

    def datasource_exists(self, alias: str) -> bool:
        return alias in self.sources

    def list_datasources(self) -> list[str]:
        return sorted(self.sources)

    def lookup_source(self, alias: str) -> Source:
        """Return the datasource for an alias.

        An undefined alias that is an absolute URL defines an ad-hoc
        datasource with that URL.

        Raises:
            UndefinedAliasError: If the alias is neither defined nor a URL.
        """
        source = self.sources.get(alias)
        if source is not None:
            return source

        try:
            url = parse_reference(alias)
        except DataSourceError:
            url = None
        if url is None or not url.scheme:
            raise UndefinedAliasError(alias)

        source = Source(
            alias=alias,
            url=url,
            header=dict(self.config.extra_headers.get(alias, {})),
        )
        self.sources[alias] = source
        return source

    # =========================================================================
    # Reading
    # =========================================================================

    async def datasource(self, alias: str, *args: str) -> Any:
        """Read a datasource and decode it by its media type."""
        content = await self.read_source(self.lookup_source(alias), *args)
        try:
            return parse_data(content.content_type, _text(content))
        except DataSourceError as e:
            raise e.with_context(alias)

    async def include(self, alias: str, *args: str) -> str:
        """Read a datasource as text, without decoding it."""
        content = await self.read_source(self.lookup_source(alias), *args)
        try:
            return _text(content)
        except DataSourceError as e:
            raise e.with_context(alias)

    async def datasource_reachable(self, alias: str, *args: str) -> bool:
        """Check whether a defined datasource can be read with ``args``."""
        source = self.sources.get(alias)
        if source is None:
            return False
        try:
            await self.read_source(source, *args)
        except DataSourceError as e:
            logger.debug(f"Datasource {alias!r} not reachable: {e}")
            return False
        return True

    async def read_source(self, source: Source, *args: str) -> FileContent:
        """Return the (possibly cached) content of ``source`` for ``args``.

        Concurrent reads of the same alias and arguments share one fetch.
        Failed reads are not cached.

        Raises:
            DataSourceError: If the read fails, with the alias and reference
                filled in. Failures of providers and readers are raised as
                BackendFetchError, chained to the original exception.
        """
        key = source.alias + "".join(args)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key!r}")
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit: {key!r}")
                return cached

            logger.debug(f"Cache miss: {key!r}")
            content = await self._fetch(source, *args)
            self._cache[key] = content
            self._locks.pop(key, None)
            return content

    async def _fetch(self, source: Source, *args: str) -> FileContent:
        arg = args[0] if args else ""
        reference = format_reference(source.url)
        try:
            url = resolve_url(source.url, arg)
            reference = format_reference(url)
            root, name = split_root(url)
            try:
                provider = await self.mux.lookup(root, source.header)
            except ProviderNotFoundError:
                logger.debug(f"No provider for {url.scheme!r}, using reader")
                return await self._read_with_reader(source, url.scheme, *args)
            return await self._read_with_provider(provider, source, name, arg)
        except DataSourceError as e:
            raise e.with_context(source.alias, reference)
        except Exception as e:
            raise BackendFetchError(
                str(e) or type(e).__name__, alias=source.alias, reference=reference
            ) from e

    async def _read_with_provider(
        self, provider: Provider, source: Source, name: str, arg: str
    ) -> FileContent:
        handle = await provider.open(name)
        info = await handle.stat()

        if info.is_dir:
            entries = await provider.read_dir(name)
            return FileContent(to_json(entries).encode("utf-8"), JSON_ARRAY_MIMETYPE)

        data = await handle.read_all()
        declared = source.media_type or info.content_type or ""
        return FileContent(data, guess_media_type(source.url, arg, declared))

    async def _read_with_reader(
        self, source: Source, scheme: str, *args: str
    ) -> FileContent:
        reader = self.registry.lookup(scheme)
        ctx = ReadContext(
            data=self, stdin=self._stdin, handles=self.handles, config=self.config
        )
        result = await reader.fetch(ctx, source, *args)

        arg = args[0] if args else ""
        if result.content_type:
            media_type = guess_media_type(source.url, arg, result.content_type)
        else:
            media_type = source.media_type_for(arg)
        return FileContent(result.data, media_type)


def _text(content: FileContent) -> str:
    try:
        return content.data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(
            content.content_type, repr(content.data[:40]), "content is not valid UTF-8"
        ) from e
