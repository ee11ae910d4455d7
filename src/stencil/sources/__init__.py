"""Datasource resolution for stencil.

This package turns aliased, URL-addressed datasources into raw content and a
media type. It is used through ``stencil.services.Data``; the pieces here are
the building blocks.

Quick Start
-----------
Resolve a relative specifier against a datasource's base URL, then split the
result into a backend root and the path under it:

    from urllib.parse import urlsplit
    from stencil.sources import resolve_url, split_root

    url = resolve_url(urlsplit("https://example.com/config/?env=prod"), "app.json")
    # https://example.com/config/app.json?env=prod
    root, name = split_root(url)
    # (https://example.com/?env=prod, "config/app.json")

Supported URL Schemes
---------------------
Path-hierarchical backends are served by providers (``providers``):

- ``file://``: local files and directories (fsspec)
- ``http://`` and ``https://``: web servers (httpx)
- ``env:``: process environment variables

Other schemes are dispatched to readers (``readers``):

- ``aws+smp:``: AWS SSM Parameter Store
- ``consul:``, ``consul+http:``, ``consul+https:``: Consul key-value store
- ``merge:``: deep merge of other datasources
- ``stdin:``: the standard input stream

Media Types
-----------
The media type of a read is decided, highest priority first, by the ``type``
query parameter of the specifier, the ``type`` parameter of the base URL, the
declared type of the datasource, the file extension of the specifier, the
extension of the base URL, and finally ``text/plain``:

    from stencil.sources import guess_media_type

    guess_media_type(urlsplit("file:///tmp/"), "foo.json")      # application/json
    guess_media_type(urlsplit("file:///tmp/x?type=application/yaml"))  # application/yaml

Custom Readers
--------------
Implement the Reader protocol and register it before the first read:

    from stencil.sources import ReadResult, create_default_registry

    class VaultReader:
        async def fetch(self, ctx, source, *args):
            secret = await read_secret(source.url.path, *args)
            return ReadResult(secret, "application/json")

    registry = create_default_registry()
    registry.register("vault", VaultReader())
"""

from .base import FileContent, ReadContext, Reader, ReadResult, Source
from .handles import HandleCache
from .media_types import (
    CSV_MIMETYPE,
    ENV_MIMETYPE,
    JSON_ARRAY_MIMETYPE,
    JSON_MIMETYPE,
    TEXT_MIMETYPE,
    TOML_MIMETYPE,
    YAML_MIMETYPE,
    guess_media_type,
    mime_alias,
    parse_media_type,
    register_extension,
    type_by_extension,
)
from .registry import ReaderRegistry, RegistryError, create_default_registry
from .urls import (
    format_reference,
    parse_datasource_url_args,
    parse_reference,
    parse_source_url,
    resolve_url,
    root_key,
    split_root,
)

__all__ = [
    # Types
    "FileContent",
    "ReadContext",
    "ReadResult",
    "Reader",
    "Source",
    # Registry
    "HandleCache",
    "ReaderRegistry",
    "RegistryError",
    "create_default_registry",
    # Media types
    "CSV_MIMETYPE",
    "ENV_MIMETYPE",
    "JSON_ARRAY_MIMETYPE",
    "JSON_MIMETYPE",
    "TEXT_MIMETYPE",
    "TOML_MIMETYPE",
    "YAML_MIMETYPE",
    "guess_media_type",
    "mime_alias",
    "parse_media_type",
    "register_extension",
    "type_by_extension",
    # URLs
    "format_reference",
    "parse_datasource_url_args",
    "parse_reference",
    "parse_source_url",
    "resolve_url",
    "root_key",
    "split_root",
]
