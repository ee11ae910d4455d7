"""Reader for the ``stdin:`` scheme."""

from __future__ import annotations

import asyncio
from typing import IO

from loguru import logger

from ..base import ReadContext, ReadResult, Source


class StdinBuffer:
    """Reads an input stream to completion once and remembers the bytes.

    The stream can be consumed only once, so every datasource reading
    ``stdin:`` through the same pipeline sees the same content.
    """

    def __init__(self, stream: IO[bytes] | IO[str] | None) -> None:
        self._stream = stream
        self._data: bytes | None = None
        self._lock = asyncio.Lock()

    @property
    def consumed(self) -> bool:
        return self._data is not None

    async def read(self) -> bytes:
        if self._data is not None:
            return self._data
        async with self._lock:
            if self._data is None:
                self._data = await asyncio.to_thread(self._read_stream)
                logger.debug(f"Read {len(self._data)} bytes from stdin")
        return self._data

    def _read_stream(self) -> bytes:
        if self._stream is None:
            return b""
        data = self._stream.read()
        if isinstance(data, str):
            return data.encode("utf-8")
        return data


class StdinReader:
    """Returns the content of the input stream.

    The media type comes from the usual rules: the URL's ``type`` parameter,
    the declared type, or the extension of the URL path (``stdin:///in.json``).
    """

    async def fetch(self, ctx: ReadContext, source: Source, *args: str) -> ReadResult:
        return ReadResult(await ctx.stdin.read())
