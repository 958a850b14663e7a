"""Tests for the interactive input reader."""

from __future__ import annotations

import asyncio
from typing import Awaitable

import pytest

from termengine.domain.models import KeyCombo, Keystroke, SelectOption, TextInput
from termengine.input.reader import InputReader
from termengine.terminal.buffer import BufferedOutputSink
from termengine.terminal.writer import TerminalWriter


@pytest.fixture
def reader(writer: TerminalWriter) -> InputReader:
    return InputReader(writer)


async def _start(read: Awaitable) -> asyncio.Task:
    """Run ``read`` until it waits for input."""
    task = asyncio.ensure_future(read)
    await asyncio.sleep(0)
    return task


def _type(reader: InputReader, *keys: str) -> None:
    for key in keys:
        reader.handle_key(Keystroke(key=key))


class TestReadLine:
    """Test line and password reads."""

    @pytest.mark.asyncio
    async def test_read_line(self, reader: InputReader, sink: BufferedOutputSink) -> None:
        task = await _start(reader.read_line("Name: "))
        assert reader.is_active
        assert reader.active_request.prompt == "Name: "

        reader.handle_key(TextInput(text="hello"))
        _type(reader, "Enter")
        assert await task == "hello"
        assert not reader.is_active
        assert sink.lines == ["Name: hello"]

    @pytest.mark.asyncio
    async def test_cursor_editing(self, reader: InputReader) -> None:
        task = await _start(reader.read_line("> "))
        reader.handle_key(TextInput(text="helo"))
        _type(reader, "Left", "l", "End", "Space", "x", "Backspace", "Backspace", "Enter")
        assert await task == "hello"

    @pytest.mark.asyncio
    async def test_raw_data(self, reader: InputReader) -> None:
        task = await _start(reader.read_line("> "))
        reader.handle_data("abc")
        reader.handle_data("\x7f")
        reader.handle_data("\r")
        assert await task == "ab"

    @pytest.mark.asyncio
    async def test_password_is_masked(self, reader: InputReader, sink: BufferedOutputSink) -> None:
        task = await _start(reader.read_password("Password: "))
        reader.handle_key(TextInput(text="secret"))
        _type(reader, "Enter")
        assert await task == "secret"
        assert sink.lines == ["Password: ******"]

    def test_idle_reader_ignores_keys(self, reader: InputReader) -> None:
        assert reader.handle_key(Keystroke(key="a")) is False
        assert reader.handle_data("a") is False
        assert reader.cancel() is False


class TestReadConfirm:
    """Test yes/no reads."""

    @pytest.mark.asyncio
    async def test_enter_uses_default(self, reader: InputReader, sink: BufferedOutputSink) -> None:
        task = await _start(reader.read_confirm("Proceed?"))
        _type(reader, "Enter")
        assert await task is False
        assert sink.lines == ["Proceed? (y/N): "]

        task = await _start(reader.read_confirm("Proceed?", default_value=True))
        _type(reader, "Enter")
        assert await task is True

    @pytest.mark.asyncio
    async def test_only_y_or_n_accepted(self, reader: InputReader) -> None:
        task = await _start(reader.read_confirm("Proceed?", default_value=True))
        _type(reader, "x", "n")
        assert reader.active_request.buffer == "n"
        _type(reader, "Enter")
        assert await task is False

    @pytest.mark.asyncio
    async def test_first_character_decides(self, reader: InputReader) -> None:
        task = await _start(reader.read_confirm("Proceed?"))
        reader.handle_key(TextInput(text="yes"))
        _type(reader, "Enter")
        assert await task is True


class TestReadSelect:
    """Test option selection."""

    @pytest.mark.asyncio
    async def test_navigation(self, reader: InputReader) -> None:
        options = [SelectOption(label=f"Option {v}", value=v) for v in ("a", "b", "c")]
        changes: list[str] = []
        task = await _start(reader.read_select("Pick one", options, changes.append))
        _type(reader, "Down", "Down", "Down", "Up", "Enter")
        assert await task == "b"
        assert changes == ["a", "b", "c", "b"]

    @pytest.mark.asyncio
    async def test_empty_options(self, reader: InputReader) -> None:
        with pytest.raises(ValueError):
            await reader.read_select("Pick one", [])
        assert not reader.is_active


class TestReadNumber:
    """Test numeric reads with validation."""

    @pytest.mark.asyncio
    async def test_reprompts_until_valid(self, reader: InputReader, sink: BufferedOutputSink) -> None:
        task = await _start(reader.read_number("Pick", minimum=1, maximum=10))
        assert reader.active_request.prompt == "Pick (1-10): "

        reader.handle_key(TextInput(text="abc"))
        _type(reader, "Enter")
        reader.handle_key(TextInput(text="20"))
        _type(reader, "Enter")
        _type(reader, "Enter")
        reader.handle_key(TextInput(text="7"))
        _type(reader, "Enter")

        assert await task == 7
        assert "Invalid number." in sink.lines
        assert "Value must be at most 10." in sink.lines
        assert "Please enter a number." in sink.lines

    @pytest.mark.asyncio
    async def test_default(self, reader: InputReader) -> None:
        task = await _start(reader.read_number("Count", default=3))
        _type(reader, "Enter")
        assert await task == 3

    @pytest.mark.asyncio
    async def test_float(self, reader: InputReader) -> None:
        task = await _start(reader.read_number("Ratio", minimum=0))
        reader.handle_key(TextInput(text="0.5"))
        _type(reader, "Enter")
        assert await task == 0.5


class TestCancellation:
    """Test cancelled and concurrent reads."""

    @pytest.mark.asyncio
    async def test_ctrl_c_resolves_none(self, reader: InputReader) -> None:
        signal = asyncio.Event()
        reader.abort_signal = signal
        task = await _start(reader.read_line("> "))
        reader.handle_key(KeyCombo(modifiers=["ctrl"], key="c"))
        assert await task is None
        assert signal.is_set()
        assert not reader.is_active

    @pytest.mark.asyncio
    async def test_escape_resolves_none(self, reader: InputReader) -> None:
        task = await _start(reader.read_line("> "))
        _type(reader, "Escape")
        assert await task is None

    @pytest.mark.asyncio
    async def test_abort_signal_resolves_none(self, reader: InputReader) -> None:
        signal = asyncio.Event()
        task = await _start(reader.read_password("Password: ", abort_signal=signal))
        signal.set()
        assert await asyncio.wait_for(task, 1) is None
        assert not reader.is_active

    @pytest.mark.asyncio
    async def test_second_read_rejected(self, reader: InputReader) -> None:
        task = await _start(reader.read_line("> "))
        with pytest.raises(RuntimeError, match="already active"):
            await reader.read_line("again> ")
        reader.cancel()
        assert await task is None
