"""Backend provider protocol and the scheme multiplexer.

Providers serve path-hierarchical backends (filesystems, web servers, the
environment). A provider is created per backend root and addresses individual
objects by relative path, so one provider (and its connection) is shared by
every datasource under the same root.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Protocol, runtime_checkable
from urllib.parse import SplitResult

from loguru import logger

from ...core.exceptions import StencilError
from ..handles import HandleCache
from ..urls import root_key


# =============================================================================
# Exceptions
# =============================================================================


class ProviderError(StencilError):
    """A provider operation failed."""

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"Failed to read {uri}: {reason}")


class ProviderNotFoundError(StencilError):
    """No provider is registered for the scheme of a root."""

    def __init__(self, scheme: str):
        self.scheme = scheme
        super().__init__(f"No provider registered for scheme '{scheme}'")


# =============================================================================
# Protocol Definitions
# =============================================================================


@dataclass(frozen=True)
class FileInfo:
    """Stat result of an opened object.

    Attributes:
        is_dir: Whether the object is a directory.
        content_type: Media type reported by the backend, if any.
    """

    is_dir: bool = False
    content_type: str | None = None


@runtime_checkable
class Handle(Protocol):
    """An opened object."""

    async def stat(self) -> FileInfo:
        """Describe the object."""
        ...

    async def read_all(self) -> bytes:
        """Read the whole object."""
        ...


@runtime_checkable
class Provider(Protocol):
    """Protocol for path-hierarchical backends."""

    async def open(self, name: str) -> Handle:
        """Open the object at relative path ``name`` (``"."`` is the root)."""
        ...

    async def read_dir(self, name: str) -> list[str]:
        """List the entry names of the directory at ``name``, sorted."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the provider."""
        ...


# Factory signature: takes the root and the datasource's HTTP headers
ProviderFactory = Callable[[SplitResult, Mapping[str, list[str]]], Provider]


# =============================================================================
# Multiplexer
# =============================================================================


class ProviderMux:
    """Routes backend roots to providers by scheme.

    Provider instances are cached per root (and header set) in a HandleCache,
    which also releases them.

    Example:
        mux = ProviderMux()
        mux.add("file", lambda root, headers: FsspecProvider(root))

        root, name = split_root(urlsplit("file:///etc/hosts"))
        provider = await mux.lookup(root)
        handle = await provider.open(name)
    """

    def __init__(self, handles: HandleCache | None = None) -> None:
        self._factories: dict[str, ProviderFactory] = {}
        self._handles = handles if handles is not None else HandleCache()

    def add(self, scheme: str, factory: ProviderFactory) -> None:
        """Register a provider factory for a scheme (case-insensitive)."""
        scheme_lower = scheme.lower()
        if scheme_lower in self._factories:
            logger.warning(f"Overwriting provider factory for {scheme_lower!r}")
        self._factories[scheme_lower] = factory
        logger.debug(f"Registered provider factory: {scheme_lower!r}")

    def supports(self, scheme: str) -> bool:
        """Check if a provider is registered for a scheme."""
        return scheme.lower() in self._factories

    def supported_schemes(self) -> list[str]:
        """Get sorted list of schemes with a provider."""
        return sorted(self._factories.keys())

    async def lookup(
        self,
        root: SplitResult,
        headers: Mapping[str, list[str]] | None = None,
    ) -> Provider:
        """Return the (shared) provider for a root.

        Raises:
            ProviderNotFoundError: If no provider handles the root's scheme.
        """
        factory = self._factories.get(root.scheme.lower())
        if factory is None:
            raise ProviderNotFoundError(root.scheme)

        headers = headers or {}
        key = f"provider:{root_key(root)}"
        if headers:
            key += "#" + repr(sorted((k, tuple(v)) for k, v in headers.items()))

        return await self._handles.get_or_create(key, lambda: factory(root, headers))

    async def aclose(self) -> None:
        """Release all providers."""
        await self._handles.aclose()
