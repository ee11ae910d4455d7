"""Lazily-created backend handles, shared by backend root.

Backend clients (authenticated sessions, HTTP clients) are expensive to set
up. A handle is created on first use for a root key (scheme, authority and
query of a datasource URL) and reused by every datasource addressing the same
root, until the cache is closed.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable

from loguru import logger

HandleFactory = Callable[[], Any | Awaitable[Any]]


class HandleCache:
    """Per-root cache of backend handles.

    Creation is serialized per key, so concurrent first use creates exactly
    one handle.

    Example:
        handles = HandleCache()
        client = await handles.get_or_create("aws+smp:///", make_client)
        ...
        await handles.aclose()
    """

    def __init__(self) -> None:
        self._handles: dict[str, Any] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    async def get_or_create(self, key: str, factory: HandleFactory) -> Any:
        """Return the handle for ``key``, creating it with ``factory`` if needed.

        ``factory`` may be a plain or async callable. If it raises, nothing is
        stored and the next call tries again.
        """
        if key in self._handles:
            return self._handles[key]

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key in self._handles:
                return self._handles[key]
            handle = factory()
            if inspect.isawaitable(handle):
                handle = await handle
            self._handles[key] = handle
            logger.debug(f"Created backend handle for {key}")
            return handle

    async def aclose(self) -> None:
        """Release every handle (``aclose()`` or ``close()`` if they have one)."""
        handles, self._handles = self._handles, {}
        self._locks.clear()
        for key, handle in handles.items():
            if hasattr(handle, "aclose"):
                await handle.aclose()
            elif hasattr(handle, "close"):
                result = handle.close()
                if inspect.isawaitable(result):
                    await result
            logger.debug(f"Released backend handle for {key}")
