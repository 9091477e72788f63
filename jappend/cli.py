"""Command-line interface for appending entries to a JSON array file."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import signal
import sys
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, TextIO

from jappend.config import Config, load_config
from jappend.errors import JappendError
from jappend.logging import setup_logging
from jappend.writer import JsonArrayWriter

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def parse_entry(text: str) -> Any:
    """Parse ``text`` as JSON, falling back to the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def parse_threshold(value: str) -> int | None:
    """Parse ``--buffer``; ``inf`` disables threshold flushing."""
    if value.strip().lower() in {"inf", "infinity", "none"}:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid buffer size: {value!r}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jappend",
        description="Append entries to a JSON array file without rewriting it",
    )
    parser.add_argument("file", type=Path, help="Target JSON array file")
    parser.add_argument(
        "entries",
        nargs="*",
        help="Entries to append (JSON, or plain strings); reads NDJSON from stdin if omitted",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument(
        "--compact", action="store_true", default=None, help="Write without indentation"
    )
    parser.add_argument("--indent", type=int, default=None, help="Spaces per indent level")
    parser.add_argument(
        "--no-init",
        action="store_true",
        default=None,
        help="Fail instead of creating the file / array when it is missing or empty",
    )
    parser.add_argument(
        "--buffer",
        type=parse_threshold,
        default=argparse.SUPPRESS,
        help="Entries buffered before each write, or 'inf' to write once at the end",
    )
    parser.add_argument(
        "--suppress-errors",
        action="store_true",
        default=None,
        help="Log failed buffered writes instead of aborting; entries are retried at exit",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: from config)")
    parser.add_argument(
        "--json-logs", action="store_true", default=None, help="Emit logs as NDJSON"
    )
    return parser


def resolve_config(args: argparse.Namespace) -> Config:
    """Merge command-line flags over the (optional) YAML config."""
    cfg = load_config(args.config)
    writer = cfg.writer.model_copy()
    if args.compact:
        writer.pretty = False
    if args.indent is not None:
        writer.indent = args.indent
    if args.no_init:
        writer.init_array = False
    if "buffer" in args:
        writer.buffer_flush_threshold = args.buffer
    if args.suppress_errors:
        writer.suppress_threshold_flush_errors = True

    logging_cfg = cfg.logging.model_copy()
    if args.log_level is not None:
        logging_cfg.level = args.log_level
    if args.json_logs:
        logging_cfg.json_format = True

    return Config(writer=writer, logging=logging_cfg)


def _start_reader(
    stream: TextIO, queue: asyncio.Queue[str | None], loop: asyncio.AbstractEventLoop
) -> threading.Thread:
    """Pump lines from a blocking stream into ``queue``; None marks the end."""

    def pump() -> None:
        try:
            for line in stream:
                loop.call_soon_threadsafe(queue.put_nowait, line)
            loop.call_soon_threadsafe(queue.put_nowait, None)
        except RuntimeError:
            # loop closed before the stream ended
            return

    thread = threading.Thread(target=pump, name="jappend-stdin", daemon=True)
    thread.start()
    return thread


async def append_stream(writer: JsonArrayWriter, stream: TextIO) -> int:
    """Append every non-blank NDJSON line of ``stream``.

    SIGINT/SIGTERM stop the intake; entries already accepted are still written.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[str | None] = asyncio.Queue()

    def request_stop() -> None:
        queue.put_nowait(None)

    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
            loop.add_signal_handler(sig, request_stop)
            installed.append(sig)

    _start_reader(stream, queue, loop)
    count = 0
    try:
        while True:
            line = await queue.get()
            if line is None:
                break
            line = line.strip()
            if not line:
                continue
            pending = writer.append(parse_entry(line))
            count += 1
            if pending is not None:
                await pending
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
    return count


async def run(args: argparse.Namespace, writer: JsonArrayWriter, stdin: TextIO) -> int:
    try:
        if args.entries:
            for text in args.entries:
                pending = writer.append(parse_entry(text))
                if pending is not None:
                    await pending
            count = len(args.entries)
        else:
            count = await append_stream(writer, stdin)
    finally:
        await writer.aclose()
    return count


def main(argv: Sequence[str] | None = None, stdin: TextIO | None = None) -> int:
    parser = build_parser()
    # entries may follow flags: jappend out.json --no-init 1
    args = parser.parse_intermixed_args(argv)

    # pydantic's ValidationError and ConfigError are both ValueErrors
    try:
        cfg = resolve_config(args)
        writer = JsonArrayWriter(args.file, cfg.writer.to_options())
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    log = setup_logging(
        level=cfg.logging.level,
        json_format=cfg.logging.json_format,
        log_dir=cfg.logging.log_dir,
    )

    try:
        count = asyncio.run(run(args, writer, stdin or sys.stdin))
    except (JappendError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    log.info("append_complete", path=str(args.file), entries=count)
    print(f"Appended {count} entries to {args.file}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
