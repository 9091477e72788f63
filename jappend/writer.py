"""Buffered writer appending entries to a JSON array file in place.

The writer never reads the whole file: each flush scans a small tail window,
truncates the closing bracket (plus the whitespace before it) and writes the
new elements followed by a fresh bracket.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from types import TracebackType
from typing import Any

import structlog

from jappend.contracts import FileHandle, TailScan, WriterOptions, validate_path
from jappend.errors import ArrayFileNotFoundError
from jappend.files import open_local_file
from jappend.insertion import build_insertion
from jappend.tail import scan_tail


class JsonArrayWriter:
    """Queue entries and flush them to a JSON array file.

    At most one flush cycle (open, scan, truncate, write, close) is in flight
    per writer; concurrent ``flush`` calls share it. Entries taken by a failed
    cycle are put back at the front of the queue before the error propagates.
    Once shut down, ``append`` drops new entries.

    Attributes:
        path: Target file
        options: Validated writer options
    """

    def __init__(self, path: str | Path, options: WriterOptions | None = None) -> None:
        self.path = validate_path(path)
        self.options = options or WriterOptions()
        self._open = self.options.opener or open_local_file
        self._pending: list[Any] = []
        self._flush_task: asyncio.Task[None] | None = None
        self._shutdown = False
        self._log = structlog.get_logger("jappend.writer")

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def is_flushing(self) -> bool:
        return self._flush_task is not None

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @property
    def _is_full(self) -> bool:
        threshold = self.options.buffer_flush_threshold
        return threshold is not None and len(self._pending) >= threshold

    def append(self, entry: Any) -> asyncio.Future[None] | None:
        """Queue ``entry``, flushing when the buffer threshold is reached.

        Returns:
            Awaitable flush when the threshold triggered one, otherwise None.
            In fire-and-forget mode the flush runs in the background and its
            failure goes to the error sink, so None is returned as well.
        """
        if self._shutdown:
            return None

        self._pending.append(entry)
        if not self._is_full:
            return None

        if self.options.suppress_threshold_flush_errors:
            started = self._flush_task is None
            task = self._start_flush()
            if started and task is not None:
                task.add_done_callback(self._report_threshold_failure)
            return None

        return self.flush()

    def flush(self, *, shutdown: bool = False) -> asyncio.Future[None]:
        """Write all pending entries to the file.

        Safe to call concurrently: callers arriving while a flush is running
        await that same flush. Entries queued after it started stay pending
        until the next flush. Cancelling the returned future does not cancel
        the write.

        Args:
            shutdown: Stop accepting new entries from now on

        Returns:
            Future resolving when the flush completes; it carries the flush error
        """
        if shutdown:
            self._shutdown = True

        task = self._start_flush()
        if task is None:
            done = asyncio.get_running_loop().create_future()
            done.set_result(None)
            return done
        return asyncio.shield(task)

    async def aclose(self) -> None:
        """Shut down and drain every entry accepted before the shutdown."""
        while True:
            await self.flush(shutdown=True)
            if not self._pending and self._flush_task is None:
                return

    async def __aenter__(self) -> JsonArrayWriter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _start_flush(self) -> asyncio.Task[None] | None:
        if self._flush_task is not None:
            return self._flush_task
        if not self._pending:
            return None

        loop = asyncio.get_running_loop()
        batch, self._pending = self._pending, []
        self._flush_task = loop.create_task(self._write_batch(batch))
        return self._flush_task

    async def _write_batch(self, batch: list[Any]) -> None:
        try:
            await self._patch_file(batch)
        except BaseException as exc:
            self._pending[:0] = batch
            self._log.warning(
                "flush_failed", path=str(self.path), entries=len(batch), error=str(exc)
            )
            raise
        else:
            self._log.debug("flush_complete", path=str(self.path), entries=len(batch))
        finally:
            self._flush_task = None

    async def _patch_file(self, batch: list[Any]) -> None:
        handle = await self._open_file()
        try:
            scan = await scan_tail(handle)
            insertion = build_insertion(batch, scan, self.options, str(self.path))
            if insertion.truncate_at is None:
                await handle.write(insertion.data)
            else:
                await handle.truncate(insertion.truncate_at)
                try:
                    await handle.write(insertion.data, insertion.truncate_at)
                except Exception:
                    await self._restore_tail(handle, scan, insertion.truncate_at)
                    raise
        finally:
            await handle.close()

    async def _restore_tail(self, handle: FileHandle, scan: TailScan, position: int) -> None:
        """Put back the bytes removed by truncation after a failed write.

        The removed suffix lies entirely inside the scanned window. If the
        rollback fails too, the file stays truncated and the event is logged.
        """
        removed = scan.window[position - scan.offset :]
        try:
            await handle.truncate(position)
            await handle.write(removed, position)
        except Exception as exc:
            self._log.error(
                "tail_restore_failed", path=str(self.path), position=position, error=str(exc)
            )

    async def _open_file(self) -> FileHandle:
        try:
            return await self._open(self.path, self.options.open_mode)
        except FileNotFoundError as exc:
            if self.options.init_array:
                raise
            raise ArrayFileNotFoundError(
                exc.errno,
                f"No such file or directory (array initialization disabled): {self.path}",
                str(self.path),
            ) from exc

    def _report_threshold_failure(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        if self.options.on_error is not None:
            self.options.on_error(exc)
        else:
            self._log.error(
                "threshold_flush_failed",
                path=str(self.path),
                error=str(exc),
                pending=len(self._pending),
            )
