"""Base protocol and types for datasources.

This module defines the core abstractions shared by the read pipeline and
every reader. Readers use Protocol (structural subtyping) - they don't need to
inherit from a base class, just implement ``fetch``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import SplitResult

from .media_types import guess_media_type
from .urls import format_reference

if TYPE_CHECKING:
    from ..core.config import Config
    from ..services.data import Data
    from .handles import HandleCache
    from .readers.stdin import StdinBuffer


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class Source:
    """A datasource: an alias bound to a base URL.

    The alias is immutable once set. ``media_type`` is the declared type, set
    by configuration or by a reader that knows its content type; it is empty
    when unknown.

    Attributes:
        alias: Name of the datasource, also the cache key prefix.
        url: Parsed base URL.
        header: HTTP headers for http(s) URLs.
        media_type: Declared media type, or ``""``.
    """

    alias: str
    url: SplitResult
    header: dict[str, list[str]] = field(default_factory=dict)
    media_type: str = ""

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "alias" and "alias" in self.__dict__:
            raise AttributeError("datasource alias is immutable")
        super().__setattr__(name, value)

    def media_type_for(self, arg: str = "") -> str:
        """Media type for reading ``arg`` from this datasource."""
        return guess_media_type(self.url, arg, self.media_type)

    def __str__(self) -> str:
        return f"{self.alias}={format_reference(self.url)} ({self.media_type})"


@dataclass(frozen=True)
class FileContent:
    """Content read from a datasource, as cached.

    Attributes:
        data: Raw bytes.
        content_type: Resolved media type.
    """

    data: bytes
    content_type: str


@dataclass(frozen=True)
class ReadResult:
    """Result of a reader fetch.

    Attributes:
        data: Raw bytes.
        content_type: Media type fixed by the reader, or None to let the
            media type rules decide.
    """

    data: bytes
    content_type: str | None = None


@dataclass
class ReadContext:
    """Ambient context handed to readers.

    Attributes:
        data: The pipeline performing the read (for readers composing other
            datasources).
        stdin: Once-only buffer over the input stream.
        handles: Backend handles shared by root.
        config: Active configuration.
    """

    data: "Data"
    stdin: "StdinBuffer"
    handles: "HandleCache"
    config: "Config"


# =============================================================================
# Protocol Definition
# =============================================================================


@runtime_checkable
class Reader(Protocol):
    """Protocol for scheme-specific readers.

    A reader fetches the raw content of a datasource, given the datasource and
    the extra arguments of the read. Exceeding the reader's argument limit is
    a caller error (``TooManyArgumentsError``), not a backend error.

    Example implementation:

        class ConstantReader:
            async def fetch(self, ctx, source, *args):
                return ReadResult(b'{"hello": "world"}', JSON_MIMETYPE)
    """

    async def fetch(self, ctx: ReadContext, source: Source, *args: str) -> ReadResult:
        """Fetch raw content for ``source``.

        Args:
            ctx: Read context.
            source: Datasource being read.
            *args: Extra read arguments.

        Returns:
            ReadResult with the content and, optionally, a fixed media type.
        """
        ...
