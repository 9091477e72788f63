"""Convenience entry points."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

from jappend.contracts import WriterOptions
from jappend.writer import JsonArrayWriter


async def jappend(path: str | Path, entry: Any, **options: Any) -> None:
    """Append a single ``entry`` to the JSON array stored at ``path``.

    Accepts the same keyword options as :class:`WriterOptions`; the buffer
    threshold is always 1.
    """
    options["buffer_flush_threshold"] = 1
    writer = JsonArrayWriter(path, WriterOptions(**options))
    pending = writer.append(entry)
    if pending is not None:
        await pending


def new_writer(
    path: str | Path, options: WriterOptions | None = None, **overrides: Any
) -> JsonArrayWriter:
    """Create a buffered writer, optionally overriding fields of ``options``."""

    base = options or WriterOptions()
    if overrides:
        base = replace(base, **overrides)
    return JsonArrayWriter(path, base)
