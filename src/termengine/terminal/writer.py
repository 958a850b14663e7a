"""Formatting layer over an output sink.

Commands write through a :class:`TerminalWriter`, which adds colored
status lines, JSON and table rendering on top of the raw sink. The
:class:`CapturingTerminalWriter` records stdout-equivalent output so the
dispatcher can pipe it into the next command.
"""

from __future__ import annotations

import enum
import json
import logging
from typing import Any

from termengine.terminal.base import OutputSink
from termengine.terminal.buffer import strip_ansi

logger = logging.getLogger(__name__)


class ForegroundColor(str, enum.Enum):
    """ANSI SGR foreground colors."""

    BLACK = "\x1b[30m"
    RED = "\x1b[31m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    BLUE = "\x1b[34m"
    MAGENTA = "\x1b[35m"
    CYAN = "\x1b[36m"
    WHITE = "\x1b[37m"
    RESET = "\x1b[0m"


class TerminalWriter:
    """Writes formatted text to an :class:`OutputSink`."""

    def __init__(self, sink: OutputSink) -> None:
        self._sink = sink

    @property
    def sink(self) -> OutputSink:
        return self._sink

    def write(self, text: str) -> None:
        self._sink.write(text)

    def write_line(self, text: str = "") -> None:
        self._sink.write_line(text)

    def clear(self) -> None:
        self._sink.clear()

    def wrap_in_color(self, text: str, color: ForegroundColor) -> str:
        return f"{color.value}{text}{ForegroundColor.RESET.value}"

    def write_error(self, message: str) -> None:
        self._sink.write_line(self.wrap_in_color(message, ForegroundColor.RED))

    def write_warning(self, message: str) -> None:
        self._sink.write_line(self.wrap_in_color(message, ForegroundColor.YELLOW))

    def write_info(self, message: str) -> None:
        self._sink.write_line(self.wrap_in_color(message, ForegroundColor.CYAN))

    def write_success(self, message: str) -> None:
        self._sink.write_line(self.wrap_in_color(message, ForegroundColor.GREEN))

    def write_json(self, value: Any) -> None:
        for line in json.dumps(value, indent=2, default=str).splitlines():
            self.write_line(line)

    def write_table(self, headers: list[str], rows: list[list[str]]) -> None:
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row[: len(widths)]):
                widths[i] = max(widths[i], len(str(cell)))

        def _format(cells: list[str]) -> str:
            return "  ".join(str(c).ljust(w) for c, w in zip(cells, widths)).rstrip()

        self.write_line(_format(headers))
        self.write_line("  ".join("-" * w for w in widths))
        for row in rows:
            self.write_line(_format(row))


class CapturingTerminalWriter(TerminalWriter):
    """A writer that records stdout-equivalent output while passing it on.

    ``write``, ``write_line``, ``write_json`` and ``write_table`` are
    captured. Status lines (error/warning/info/success) are diagnostics
    and are not.
    """

    def __init__(self, inner: TerminalWriter) -> None:
        super().__init__(inner.sink)
        self._inner = inner
        self._lines: list[str] = []
        self._partial = ""
        self._json_values: list[Any] = []

    @property
    def captured_lines(self) -> list[str]:
        return self._lines + [self._partial] if self._partial else list(self._lines)

    def write(self, text: str) -> None:
        *complete, self._partial = (self._partial + strip_ansi(text)).split("\n")
        self._lines.extend(complete)
        self._inner.write(text)

    def write_line(self, text: str = "") -> None:
        line = self._partial + strip_ansi(text)
        self._partial = ""
        if line:
            self._lines.append(line)
        self._inner.write_line(text)

    def write_json(self, value: Any) -> None:
        self._json_values.append(value)
        # Rendered through the inner writer so the JSON lines are not captured twice
        self._inner.write_json(value)

    def write_error(self, message: str) -> None:
        self._inner.write_error(message)

    def write_warning(self, message: str) -> None:
        self._inner.write_warning(message)

    def write_info(self, message: str) -> None:
        self._inner.write_info(message)

    def write_success(self, message: str) -> None:
        self._inner.write_success(message)

    def captured_output(self) -> Any:
        """Return the implicit pipeline output, or None if nothing was written."""
        if self._json_values:
            return self._json_values[-1] if len(self._json_values) == 1 else list(self._json_values)
        lines = self.captured_lines
        if lines:
            return "\n".join(lines)
        return None
