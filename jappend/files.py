"""Local filesystem implementation of the writer's file capability."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import BinaryIO

from jappend.contracts import FileStat


class LocalFileHandle:
    """Async wrapper around a binary file object.

    Blocking calls run in a worker thread so the event loop keeps serving
    other tasks while the file is patched.
    """

    def __init__(self, file: BinaryIO) -> None:
        self._file = file

    @property
    def name(self) -> str:
        return str(self._file.name)

    async def stat(self) -> FileStat:
        result = await asyncio.to_thread(os.fstat, self._file.fileno())
        return FileStat(size=result.st_size)

    async def read(self, length: int, position: int) -> bytes:
        return await asyncio.to_thread(self._read_at, length, position)

    async def write(self, data: bytes, position: int | None = None) -> int:
        return await asyncio.to_thread(self._write_at, data, position)

    async def truncate(self, length: int) -> None:
        await asyncio.to_thread(self._file.truncate, length)

    async def close(self) -> None:
        await asyncio.to_thread(self._file.close)

    def _read_at(self, length: int, position: int) -> bytes:
        self._file.seek(position)
        return self._file.read(length)

    def _write_at(self, data: bytes, position: int | None) -> int:
        # Append mode ignores the seek; the patch offset is the end of file
        # after truncation, so both modes land in the same place.
        if position is None:
            self._file.seek(0, os.SEEK_END)
        else:
            self._file.seek(position)
        written = self._file.write(data)
        self._file.flush()
        return written


async def open_local_file(path: Path, mode: str) -> LocalFileHandle:
    """Open ``path`` in binary ``mode`` (``"a+b"`` or ``"r+b"``)."""

    file = await asyncio.to_thread(open, path, mode)
    return LocalFileHandle(file)
