from __future__ import annotations

import json
from typing import Any

import pytest

from jappend import MalformedArrayError, jappend
from tests.utils import InMemoryFileHandle, MemoryOpener, compact, pretty


async def append_to(handle: InMemoryFileHandle, entry: Any, **options: Any) -> None:
    await jappend("/file", entry, opener=MemoryOpener(handle), **options)


@pytest.mark.asyncio
async def test_writes_initial_array_into_empty_file() -> None:
    handle = InMemoryFileHandle()

    await append_to(handle, {"test": [3]}, init_array=True)

    assert handle.content == pretty([{"test": [3]}])


@pytest.mark.asyncio
async def test_threshold_is_always_one() -> None:
    handle = InMemoryFileHandle("[]")

    await append_to(handle, 1, buffer_flush_threshold=100, pretty=False)

    assert handle.content == "[1]"


class TestObjects:
    @pytest.mark.asyncio
    async def test_appends_object(self) -> None:
        handle = InMemoryFileHandle(pretty([{"test": [1]}, {"test": [2]}]))

        await append_to(handle, {"test": [3]})

        assert handle.content == pretty([{"test": [1]}, {"test": [2]}, {"test": [3]}])

    @pytest.mark.asyncio
    async def test_fails_on_empty_file_without_initialization(self) -> None:
        handle = InMemoryFileHandle()

        with pytest.raises(MalformedArrayError, match="does not contain a valid JSON array"):
            await append_to(handle, {"test": [3]}, init_array=False)

    @pytest.mark.asyncio
    async def test_appends_without_formatting(self) -> None:
        handle = InMemoryFileHandle(compact([{"test": [1]}, {"test": [2]}]))

        await append_to(handle, {"test": [3]}, pretty=False)

        assert handle.content == compact([{"test": [1]}, {"test": [2]}, {"test": [3]}])

    @pytest.mark.asyncio
    async def test_appends_with_custom_indentation(self) -> None:
        handle = InMemoryFileHandle(pretty([{"test": [1]}, {"test": [2]}], indent=4))

        await append_to(handle, {"test": [3]}, indent=4)

        assert handle.content == pretty([{"test": [1]}, {"test": [2]}, {"test": [3]}], indent=4)

    @pytest.mark.asyncio
    async def test_appends_to_object_with_pretty_default(self) -> None:
        handle = InMemoryFileHandle(pretty([{"x": 1}]))

        await append_to(handle, {"x": 2})

        assert handle.content == pretty([{"x": 1}, {"x": 2}])


class TestArrays:
    @pytest.mark.asyncio
    async def test_appends_empty_object(self) -> None:
        handle = InMemoryFileHandle(pretty([{"test": [1]}]))

        await append_to(handle, {})

        assert handle.content == pretty([{"test": [1]}, {}])

    @pytest.mark.asyncio
    async def test_appends_array_as_single_element(self) -> None:
        handle = InMemoryFileHandle(pretty([{"test": [1]}]))
        entry = [{"test": [2]}, {"test": [3]}]

        await append_to(handle, entry)

        assert handle.content == pretty([{"test": [1]}, entry])

    @pytest.mark.asyncio
    async def test_appends_array_without_formatting(self) -> None:
        handle = InMemoryFileHandle(compact([{"test": [1]}]))
        entry = [{"test": [2]}, {"test": [3]}]

        await append_to(handle, entry, pretty=False)

        assert handle.content == compact([{"test": [1]}, entry])

    @pytest.mark.asyncio
    async def test_appends_array_with_custom_indentation(self) -> None:
        handle = InMemoryFileHandle(pretty([{"test": [1]}], indent=4))
        entry = [{"test": [2]}, {"test": [3]}]

        await append_to(handle, entry, indent=4)

        assert handle.content == pretty([{"test": [1]}, entry], indent=4)


class TestStrings:
    @pytest.mark.asyncio
    async def test_appends_string(self) -> None:
        handle = InMemoryFileHandle(pretty([{"test": [1]}]))

        await append_to(handle, "Hello, World!")

        assert handle.content == pretty([{"test": [1]}, "Hello, World!"])

    @pytest.mark.asyncio
    async def test_appends_whitespace_string(self) -> None:
        handle = InMemoryFileHandle(pretty([{"test": [1]}]))

        await append_to(handle, " \n ")

        assert handle.content == pretty([{"test": [1]}, " \n "])

    @pytest.mark.asyncio
    async def test_appends_string_with_brackets(self) -> None:
        handle = InMemoryFileHandle(pretty(["]"]))

        await append_to(handle, "[")
        await append_to(handle, "]")

        assert json.loads(handle.content) == ["]", "[", "]"]

    @pytest.mark.asyncio
    async def test_appends_unicode(self) -> None:
        handle = InMemoryFileHandle(pretty(["zażółć"]))

        await append_to(handle, "gęślą jaźń")

        assert handle.content == pretty(["zażółć", "gęślą jaźń"])


@pytest.mark.asyncio
async def test_every_append_keeps_file_valid() -> None:
    handle = InMemoryFileHandle()
    expected: list[Any] = []

    for entry in [1, "two", {"three": 3}, [4], None, True, 7.5]:
        await append_to(handle, entry)
        expected.append(entry)
        assert json.loads(handle.content) == expected
