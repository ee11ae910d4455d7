"""Backend providers for path-hierarchical datasources."""

from __future__ import annotations

from ...core.config import HTTPConfig
from ..handles import HandleCache
from .base import (
    FileInfo,
    Handle,
    Provider,
    ProviderError,
    ProviderFactory,
    ProviderMux,
    ProviderNotFoundError,
)
from .env import EnvProvider
from .filesystem import FsspecProvider
from .http import HTTPProvider


def create_default_mux(
    http_config: HTTPConfig | None = None,
    handles: HandleCache | None = None,
) -> ProviderMux:
    """Create a mux with the built-in providers: file, http(s) and env.

    Args:
        http_config: Settings for HTTP providers.
        handles: Cache holding the provider instances.
    """
    http_config = http_config or HTTPConfig()

    mux = ProviderMux(handles)
    mux.add("file", lambda root, headers: FsspecProvider(root))
    mux.add("http", lambda root, headers: HTTPProvider(root, http_config, headers))
    mux.add("https", lambda root, headers: HTTPProvider(root, http_config, headers))
    mux.add("env", lambda root, headers: EnvProvider(root))
    return mux


__all__ = [
    "EnvProvider",
    "FileInfo",
    "FsspecProvider",
    "HTTPProvider",
    "Handle",
    "Provider",
    "ProviderError",
    "ProviderFactory",
    "ProviderMux",
    "ProviderNotFoundError",
    "create_default_mux",
]
