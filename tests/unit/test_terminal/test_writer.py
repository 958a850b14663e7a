"""Tests for the output buffer and terminal writers."""

from __future__ import annotations

from termengine.terminal.buffer import BufferedOutputSink, strip_ansi
from termengine.terminal.writer import CapturingTerminalWriter, ForegroundColor, TerminalWriter


class TestBufferedOutputSink:
    """Test the scrollback buffer."""

    def test_lines_and_partial_line(self) -> None:
        sink = BufferedOutputSink()
        sink.write("abc")
        sink.write("def\nghi")
        assert sink.lines == ["abcdef"]
        assert sink.get_screen_content() == "abcdef\nghi"

    def test_carriage_return_restarts_line(self) -> None:
        sink = BufferedOutputSink()
        sink.write("Name: ")
        sink.write("\x1b[2K\rName: bob")
        sink.write_line()
        assert sink.lines == ["Name: bob"]

    def test_scrollback_limit(self) -> None:
        sink = BufferedOutputSink(scrollback_lines=2)
        for text in ("a", "b", "c"):
            sink.write_line(text)
        assert sink.lines == ["b", "c"]

    def test_screen_rows_and_ansi(self) -> None:
        sink = BufferedOutputSink()
        sink.write_line("\x1b[31mred\x1b[0m")
        sink.write_line("plain")
        assert sink.raw_lines[0] == "\x1b[31mred\x1b[0m"
        assert sink.get_screen_content(rows=1) == "plain"
        assert sink.get_screen_content() == "red\nplain"

    def test_clear(self) -> None:
        sink = BufferedOutputSink()
        sink.write_line("a")
        sink.write("b")
        sink.clear()
        assert sink.get_screen_content() == ""

    def test_strip_ansi(self) -> None:
        assert strip_ansi("\x1b[2K\x1b[36mhi\x1b[0m") == "hi"


class TestTerminalWriter:
    """Test formatted output."""

    def test_status_lines_are_colored(self, sink: BufferedOutputSink, writer: TerminalWriter) -> None:
        writer.write_error("bad")
        writer.write_success("good")
        assert sink.raw_lines == [
            f"{ForegroundColor.RED.value}bad{ForegroundColor.RESET.value}",
            f"{ForegroundColor.GREEN.value}good{ForegroundColor.RESET.value}",
        ]
        assert sink.lines == ["bad", "good"]

    def test_write_json(self, sink: BufferedOutputSink, writer: TerminalWriter) -> None:
        writer.write_json({"a": 1})
        assert sink.lines == ["{", '  "a": 1', "}"]

    def test_write_table(self, sink: BufferedOutputSink, writer: TerminalWriter) -> None:
        writer.write_table(["Name", "Version"], [["demo", "1.0.0"]])
        assert sink.lines == ["Name  Version", "----  -------", "demo  1.0.0"]


class TestCapturingTerminalWriter:
    """Test capture of implicit pipeline output."""

    def test_captures_plain_output(self, sink: BufferedOutputSink, writer: TerminalWriter) -> None:
        capturing = CapturingTerminalWriter(writer)
        capturing.write_line("one")
        capturing.write_error("not captured")
        capturing.write_line(capturing.wrap_in_color("two", ForegroundColor.CYAN))
        assert capturing.captured_output() == "one\ntwo"
        assert sink.lines == ["one", "not captured", "two"]

    def test_captures_json_values(self, sink: BufferedOutputSink, writer: TerminalWriter) -> None:
        capturing = CapturingTerminalWriter(writer)
        capturing.write_json({"a": 1})
        assert capturing.captured_output() == {"a": 1}
        capturing.write_json([2])
        assert capturing.captured_output() == [{"a": 1}, [2]]
        assert capturing.captured_lines == []

    def test_partial_writes_join_into_one_line(self, sink: BufferedOutputSink, writer: TerminalWriter) -> None:
        capturing = CapturingTerminalWriter(writer)
        capturing.write("a")
        capturing.write_line("b")
        assert capturing.captured_output() == "ab"

        capturing.write("c\nd")
        assert capturing.captured_lines == ["ab", "c", "d"]
        assert capturing.captured_output() == "ab\nc\nd"

    def test_nothing_written(self, writer: TerminalWriter) -> None:
        assert CapturingTerminalWriter(writer).captured_output() is None
