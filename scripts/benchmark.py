#!/usr/bin/env python3
"""Benchmark appending to a large JSON array file.

Creates a file holding ``--initial`` entries, appends ``--count`` more with the
selected strategy and verifies the final entry count.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from jappend import WriterOptions, jappend, new_writer

STRATEGIES = ("rewrite", "library", "buffer", "infinite-buffer", "fire-and-forget")


def create_entry(i: int) -> dict[str, Any]:
    return {"test1": [i], "test2": str(i) * 100}


def create_big_file(path: Path, initial: int) -> None:
    data = [create_entry(i) for i in range(initial)]
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def verify_entry_count(path: Path, expected: int) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Data in {path} is not an array")
    if len(data) != expected:
        raise ValueError(f"Expected {expected} entries, found {len(data)} in {path}")


async def append_rewrite(path: Path, start: int, count: int, buffer: int) -> None:
    new_data = [create_entry(i) for i in range(start, start + count)]
    existing = json.loads(path.read_text(encoding="utf-8"))
    path.write_text(json.dumps(existing + new_data, indent=2), encoding="utf-8")


async def append_library(path: Path, start: int, count: int, buffer: int) -> None:
    for i in range(start, start + count):
        await jappend(path, create_entry(i))


async def append_buffered(path: Path, start: int, count: int, buffer: int) -> None:
    writer = new_writer(path, buffer_flush_threshold=buffer)
    for i in range(start, start + count):
        pending = writer.append(create_entry(i))
        if pending is not None:
            await pending
    await writer.flush()


async def append_infinite(path: Path, start: int, count: int, buffer: int) -> None:
    writer = new_writer(path, buffer_flush_threshold=None)
    for i in range(start, start + count):
        writer.append(create_entry(i))
    await writer.flush()


async def append_fire_and_forget(path: Path, start: int, count: int, buffer: int) -> None:
    writer = new_writer(
        path,
        WriterOptions(buffer_flush_threshold=buffer, suppress_threshold_flush_errors=True),
    )
    for i in range(start, start + count):
        writer.append(create_entry(i))
        # yield so background flushes make progress
        await asyncio.sleep(0)
    await writer.aclose()


RUNNERS: dict[str, Callable[[Path, int, int, int], Awaitable[None]]] = {
    "rewrite": append_rewrite,
    "library": append_library,
    "buffer": append_buffered,
    "infinite-buffer": append_infinite,
    "fire-and-forget": append_fire_and_forget,
}


def run_benchmark(
    strategy: str, path: Path, initial: int = 2000, count: int = 500, buffer: int = 100
) -> float:
    """Run one strategy and return elapsed seconds for the append phase."""
    create_big_file(path, initial)
    started = time.perf_counter()
    asyncio.run(RUNNERS[strategy](path, initial, count, buffer))
    elapsed = time.perf_counter() - started
    verify_entry_count(path, initial + count)
    return elapsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Benchmark JSON array appends")
    parser.add_argument("strategy", choices=STRATEGIES, help="Append strategy")
    parser.add_argument(
        "--file",
        type=Path,
        default=Path("bigJsonFile.json"),
        help="Scratch file (default: bigJsonFile.json)",
    )
    parser.add_argument("--initial", type=int, default=200_000, help="Entries created up front")
    parser.add_argument("--count", type=int, default=50_000, help="Entries appended")
    parser.add_argument("--buffer", type=int, default=10_000, help="Buffer flush threshold")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    print(f"Strategy: {args.strategy}")
    print(f"Creating {args.file} with {args.initial} entries, appending {args.count}")
    try:
        elapsed = run_benchmark(args.strategy, args.file, args.initial, args.count, args.buffer)
    finally:
        args.file.unlink(missing_ok=True)
    print(f"Time taken: {elapsed * 1000:.2f} ms")


if __name__ == "__main__":
    main()
