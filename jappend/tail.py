from __future__ import annotations

from jappend.contracts import TAIL_WINDOW_BYTES, FileHandle, TailScan


async def scan_tail(handle: FileHandle, window_size: int = TAIL_WINDOW_BYTES) -> TailScan:
    """Read the last ``window_size`` bytes of ``handle`` and locate the final ``]``.

    An empty file yields an empty window with no bracket; read and stat errors
    propagate unchanged.
    """
    stat = await handle.stat()
    length = min(stat.size, window_size)
    offset = stat.size - length
    window = await handle.read(length, offset) if length else b""

    index = window.rfind(b"]")
    return TailScan(
        window=window,
        bracket_index=index if index != -1 else None,
        trimmed=window.decode("utf-8", errors="replace").strip(),
        offset=offset,
    )
