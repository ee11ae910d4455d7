"""Environment variable provider: ``env:NAME`` or ``env:///NAME``."""

from __future__ import annotations

import os
from urllib.parse import SplitResult

from .base import FileInfo, ProviderError


class EnvHandle:
    def __init__(self, value: str):
        self._value = value

    async def stat(self) -> FileInfo:
        return FileInfo(is_dir=False)

    async def read_all(self) -> bytes:
        return self._value.encode("utf-8")


class EnvProvider:
    """Provider reading process environment variables."""

    def __init__(self, root: SplitResult | None = None) -> None:
        self._root = root

    async def open(self, name: str) -> EnvHandle:
        value = os.environ.get(name)
        if value is None:
            raise ProviderError(f"env:{name}", "environment variable not set")
        return EnvHandle(value)

    async def read_dir(self, name: str) -> list[str]:
        raise ProviderError(f"env:{name}", "environment variables can't be listed")

    async def aclose(self) -> None:
        pass
