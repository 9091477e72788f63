"""Text helpers for splicing serialized entries into an existing array."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Sequence
from typing import Any

# Whitespace permitted between JSON tokens (RFC 8259).
JSON_WHITESPACE = frozenset(b" \t\n\r")

# A non-whitespace, non-"[" character before the final bracket means the array
# already holds at least one element.
_HAS_ELEMENTS = re.compile(r"[^\s\[]\s*\]$")


def serialize(
    entries: Sequence[Any],
    indent: int | None,
    default: Callable[[Any], Any] | None = None,
) -> str:
    """Serialize ``entries`` as a JSON array.

    ``indent=None`` produces compact output without any insignificant whitespace.
    """
    if indent is None:
        return json.dumps(list(entries), ensure_ascii=False, separators=(",", ":"), default=default)
    return json.dumps(list(entries), ensure_ascii=False, indent=indent, default=default)


def strip_outer_brackets(text: str) -> str:
    return text[1:-1].strip()


def needs_separator(trimmed_tail: str) -> bool:
    return _HAS_ELEMENTS.search(trimmed_tail) is not None


def trailing_whitespace(window: bytes, end: int) -> int:
    """Count JSON whitespace bytes immediately before ``window[end]``."""
    count = 0
    for index in range(end - 1, -1, -1):
        if window[index] not in JSON_WHITESPACE:
            break
        count += 1
    return count
