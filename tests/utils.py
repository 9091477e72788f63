from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from jappend.contracts import FileStat, WriterOptions


class InMemoryFileHandle:
    """File handle backed by a byte buffer.

    Every operation yields to the event loop once, so concurrent appends and
    flushes interleave the same way they do against a real file.
    """

    def __init__(self, content: str | bytes = b"") -> None:
        self._content = bytearray(content.encode("utf-8") if isinstance(content, str) else content)
        self.writes: list[tuple[bytes, int | None]] = []
        self.truncates: list[int] = []
        self.close_count = 0
        self.fail_next_write: BaseException | None = None

    @property
    def content(self) -> str:
        return self._content.decode("utf-8")

    async def stat(self) -> FileStat:
        await asyncio.sleep(0)
        return FileStat(size=len(self._content))

    async def read(self, length: int, position: int) -> bytes:
        await asyncio.sleep(0)
        return bytes(self._content[position : position + length])

    async def write(self, data: bytes, position: int | None = None) -> int:
        await asyncio.sleep(0)
        self.writes.append((data, position))
        if self.fail_next_write is not None:
            error, self.fail_next_write = self.fail_next_write, None
            raise error
        if position is None:
            position = len(self._content)
        if position < 0 or position > len(self._content):
            raise ValueError("position out of bounds")
        self._content[position : position + len(data)] = data
        return len(data)

    async def truncate(self, length: int) -> None:
        await asyncio.sleep(0)
        self.truncates.append(length)
        del self._content[length:]

    async def close(self) -> None:
        await asyncio.sleep(0)
        self.close_count += 1


class MemoryOpener:
    """Opener returning one shared in-memory handle and recording open calls."""

    def __init__(self, handle: InMemoryFileHandle) -> None:
        self.handle = handle
        self.calls: list[tuple[Path, str]] = []

    async def __call__(self, path: Path, mode: str) -> InMemoryFileHandle:
        self.calls.append((path, mode))
        return self.handle


def memory_options(handle: InMemoryFileHandle, **kwargs: Any) -> WriterOptions:
    return WriterOptions(opener=MemoryOpener(handle), **kwargs)


def pretty(data: Any, indent: int = 2) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False)


def compact(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
