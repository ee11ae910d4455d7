"""Filesystem provider backed by fsspec.

Serves ``file://`` by default; any fsspec protocol (``memory``, or ``s3`` and
friends when their fsspec implementation is installed) can be mounted the
same way.
"""

from __future__ import annotations

import asyncio
import posixpath
from typing import Any
from urllib.parse import SplitResult, unquote

import fsspec

from .base import FileInfo, ProviderError


class FsspecHandle:
    """An opened fsspec object."""

    def __init__(self, fs: fsspec.AbstractFileSystem, path: str, info: dict[str, Any]):
        self._fs = fs
        self._path = path
        self._info = info

    async def stat(self) -> FileInfo:
        return FileInfo(is_dir=self._info.get("type") == "directory")

    async def read_all(self) -> bytes:
        return await asyncio.to_thread(self._fs.cat_file, self._path)


class FsspecProvider:
    """Provider for an fsspec filesystem.

    Paths are addressed under the root's authority (for bucket-style
    filesystems) or from ``/``.

    Example:
        provider = FsspecProvider(urlsplit("file:///"))
        handle = await provider.open("etc/hosts")
        data = await handle.read_all()
    """

    def __init__(
        self,
        root: SplitResult,
        protocol: str | None = None,
        **storage_options: Any,
    ) -> None:
        """Initialize the provider.

        Args:
            root: Backend root.
            protocol: fsspec protocol (defaults to the root's scheme).
            **storage_options: Passed to ``fsspec.filesystem``.
        """
        self._root = root
        self._fs = fsspec.filesystem(protocol or root.scheme, **storage_options)

    @property
    def fs(self) -> fsspec.AbstractFileSystem:
        """The underlying filesystem."""
        return self._fs

    def _path(self, name: str) -> str:
        name = unquote(name)
        prefix = self._root.netloc
        if name == ".":
            return prefix or "/"
        return f"{prefix}/{name}" if prefix else f"/{name}"

    async def open(self, name: str) -> FsspecHandle:
        path = self._path(name)
        try:
            info = await asyncio.to_thread(self._fs.info, path)
        except FileNotFoundError as e:
            raise ProviderError(path, "no such file or directory") from e
        return FsspecHandle(self._fs, path, info)

    async def read_dir(self, name: str) -> list[str]:
        path = self._path(name)
        entries = await asyncio.to_thread(self._fs.ls, path, detail=False)
        return sorted(posixpath.basename(str(entry).rstrip("/")) for entry in entries)

    async def aclose(self) -> None:
        # fsspec instances are cached and shared by fsspec itself
        pass
