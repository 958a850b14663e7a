"""Abstract interfaces for the terminal collaborators.

The engine never renders anything itself. It writes text to an
:class:`OutputSink` supplied by the terminal widget and reads/writes the
system clipboard through a :class:`Clipboard`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class OutputSink(ABC):
    """Line-oriented output target (the terminal widget)."""

    @abstractmethod
    def write_line(self, text: str = "") -> None:
        """Write ``text`` followed by a line break."""
        ...

    @abstractmethod
    def write(self, text: str) -> None:
        """Write ``text`` without a trailing line break."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Clear the visible screen."""
        ...


class Clipboard(ABC):
    """Read/write access to the clipboard."""

    @abstractmethod
    async def write(self, text: str) -> None:
        ...

    @abstractmethod
    async def read(self) -> str:
        ...


class InMemoryClipboard(Clipboard):
    """Clipboard kept in process memory, used when the host provides none."""

    def __init__(self, initial: str = "") -> None:
        self._text = initial

    async def write(self, text: str) -> None:
        self._text = text

    async def read(self) -> str:
        return self._text
