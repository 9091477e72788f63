"""Contracts shared by the tail scanner, insertion builder and writer."""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from jappend.errors import ConfigError

TAIL_WINDOW_BYTES = 50


@dataclass(frozen=True)
class FileStat:
    size: int


class FileHandle(Protocol):
    """Minimal async file capability consumed by the writer.

    Only the operations needed to patch the tail of a file are required, so
    tests can substitute an in-memory implementation.
    """

    async def stat(self) -> FileStat: ...

    async def read(self, length: int, position: int) -> bytes: ...

    async def write(self, data: bytes, position: int | None = None) -> int:
        """Write ``data`` at ``position``, or at end of file when omitted."""
        ...

    async def truncate(self, length: int) -> None: ...

    async def close(self) -> None: ...


FileOpener = Callable[[Path, str], Awaitable[FileHandle]]
ErrorSink = Callable[[BaseException], None]


@dataclass(frozen=True)
class TailScan:
    """Trailing window of a file and the position of its closing bracket.

    Attributes:
        window: Raw bytes read from the end of the file
        bracket_index: Index of the last ``]`` within ``window`` or None
        trimmed: Window decoded and stripped of surrounding whitespace
        offset: Absolute file offset of the first byte of ``window``
    """

    window: bytes
    bracket_index: int | None
    trimmed: str
    offset: int

    @property
    def found(self) -> bool:
        return self.bracket_index is not None


@dataclass(frozen=True)
class WriterOptions:
    """Validated writer configuration.

    Attributes:
        pretty: Format output with newlines and indentation
        indent: Spaces per nesting level when ``pretty`` is set
        init_array: Create the file / start a fresh array when it is empty or absent
        buffer_flush_threshold: Pending entry count that triggers a flush;
            None (or ``math.inf``) buffers until an explicit flush
        suppress_threshold_flush_errors: Report failures of threshold-triggered
            flushes to ``on_error`` instead of the ``append`` caller
        on_error: Sink for suppressed errors; defaults to a log event
        opener: Coroutine opening a file handle; defaults to the local filesystem
        json_default: Fallback serializer passed to ``json.dumps``

    Raises:
        ConfigError: If threshold or indent are invalid
    """

    pretty: bool = True
    indent: int = 2
    init_array: bool = True
    buffer_flush_threshold: int | float | None = 1
    suppress_threshold_flush_errors: bool = False
    on_error: ErrorSink | None = None
    opener: FileOpener | None = None
    json_default: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        self._validate_threshold()
        self._validate_indent()

    def _validate_threshold(self) -> None:
        threshold = self.buffer_flush_threshold
        if threshold is None:
            return
        if threshold == math.inf:
            object.__setattr__(self, "buffer_flush_threshold", None)
            return
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 1:
            raise ConfigError(
                "Entry buffer size must be one of: positive integer, None or math.inf, "
                f"but got {threshold!r}"
            )

    def _validate_indent(self) -> None:
        indent = self.indent
        if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
            raise ConfigError(f"Indent must be one of: positive integer or 0, but got {indent!r}")

    @property
    def effective_indent(self) -> int | None:
        """Indent handed to the serializer; None means compact output."""
        if not self.pretty or self.indent == 0:
            return None
        return self.indent

    @property
    def open_mode(self) -> str:
        return "a+b" if self.init_array else "r+b"


def validate_path(path: str | Path) -> Path:
    """Return ``path`` as a Path, rejecting blank values."""

    if not str(path).strip():
        raise ConfigError(f'File path must be a non-empty string, but got "{path}"')
    return Path(path)
