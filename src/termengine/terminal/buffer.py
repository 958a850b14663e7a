"""Scrollback buffer output sink.

Keeps rendered output in memory so it can be served to a page over the
HTTP endpoint and inspected by tests.
"""

from __future__ import annotations

import logging
import re

from termengine.terminal.base import OutputSink

logger = logging.getLogger(__name__)

# CSI sequences (colors, cursor movement, line erase)
_CSI_RE = re.compile(r"\x1b\[[0-9;?]*[a-zA-Z]")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from ``text``."""
    return _CSI_RE.sub("", text)


def _carriage_return(line: str) -> str:
    # A bare \r restarts the line; the redraw that follows replaces it
    return line.rsplit("\r", 1)[-1]


class BufferedOutputSink(OutputSink):
    """Accumulates output lines with a bounded scrollback."""

    def __init__(self, scrollback_lines: int = 1000) -> None:
        self._scrollback_lines = scrollback_lines
        self._lines: list[str] = []
        self._partial_line = ""

    @property
    def lines(self) -> list[str]:
        """Completed lines, with ANSI escapes removed."""
        return [strip_ansi(line) for line in self._lines]

    @property
    def raw_lines(self) -> list[str]:
        return list(self._lines)

    def write_line(self, text: str = "") -> None:
        self.write(text + "\n")

    def write(self, text: str) -> None:
        text = self._partial_line + text.replace("\r\n", "\n")
        self._partial_line = ""
        lines = text.split("\n")
        if not text.endswith("\n"):
            self._partial_line = _carriage_return(lines.pop())
        else:
            lines.pop()
        self._lines.extend(_carriage_return(line) for line in lines)
        if len(self._lines) > self._scrollback_lines:
            self._lines = self._lines[-self._scrollback_lines:]

    def clear(self) -> None:
        self._lines = []
        self._partial_line = ""

    def get_screen_content(self, rows: int | None = None) -> str:
        """Return the newest ``rows`` lines (all lines when None) as text."""
        visible = self.lines
        if self._partial_line:
            visible.append(strip_ansi(self._partial_line))
        if rows is not None:
            visible = visible[-rows:]
        return "\n".join(visible)
