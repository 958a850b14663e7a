"""Terminal collaborators for termengine.

Public API:
    OutputSink -- Abstract line output target
    Clipboard -- Abstract clipboard access
    InMemoryClipboard -- Process-local clipboard
    BufferedOutputSink -- Scrollback buffer sink
    TerminalWriter -- Formatting layer used by commands
    CapturingTerminalWriter -- Writer that records output for piping
"""

from termengine.terminal.base import Clipboard, InMemoryClipboard, OutputSink
from termengine.terminal.buffer import BufferedOutputSink, strip_ansi
from termengine.terminal.writer import CapturingTerminalWriter, ForegroundColor, TerminalWriter

__all__ = [
    "BufferedOutputSink",
    "CapturingTerminalWriter",
    "Clipboard",
    "ForegroundColor",
    "InMemoryClipboard",
    "OutputSink",
    "TerminalWriter",
    "strip_ansi",
]
