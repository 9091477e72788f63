"""Compute the patch that appends a batch of entries to a JSON array file."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from jappend.contracts import TailScan, WriterOptions
from jappend.errors import MalformedArrayError
from jappend.text import needs_separator, serialize, strip_outer_brackets, trailing_whitespace


@dataclass(frozen=True)
class Insertion:
    """Text to write and where to write it.

    ``truncate_at`` is None when the file holds no array yet; ``text`` is then
    a complete array to be written at the end of the file.
    """

    text: str
    truncate_at: int | None

    @property
    def data(self) -> bytes:
        return self.text.encode("utf-8")


def build_insertion(
    entries: Sequence[Any],
    scan: TailScan,
    options: WriterOptions,
    path: str | None = None,
) -> Insertion:
    """Build the replacement for the tail of the array starting at its closing bracket.

    Args:
        entries: Pending entries, in append order
        scan: Result of scanning the file tail
        options: Formatting and initialization options
        path: File path, used in error messages only

    Returns:
        Insertion whose text re-forms the array tail from ``truncate_at`` onwards

    Raises:
        MalformedArrayError: If no closing bracket exists and a fresh array
            cannot be started
    """
    indent = options.effective_indent
    serialized = serialize(entries, indent, options.json_default)

    if not scan.trimmed and options.init_array:
        return Insertion(text=serialized, truncate_at=None)

    if scan.bracket_index is None:
        raise MalformedArrayError(path)

    pretty = indent is not None
    newline = "\n" if pretty else ""
    padding = " " * indent if indent is not None else ""
    separator = "," if needs_separator(scan.trimmed) else ""

    text = f"{separator}{newline}{padding}{strip_outer_brackets(serialized)}{newline}]"

    truncate_at = scan.offset + scan.bracket_index
    if pretty:
        truncate_at -= trailing_whitespace(scan.window, scan.bracket_index)

    return Insertion(text=text, truncate_at=truncate_at)
