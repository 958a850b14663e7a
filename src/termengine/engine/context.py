"""Execution context handed to command processors.

The context is the processor's only view of the session: the writer for
output, the reader for interactive prompts, its state store, the process
handle used to emit output or exit, services, clipboard, and the
executor itself for recursive dispatch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from termengine.engine.errors import ProcessExitedError

if TYPE_CHECKING:
    from termengine.engine.executor import CommandExecutor
    from termengine.engine.registry import ProcessorRegistry
    from termengine.engine.services import ServiceContainer
    from termengine.engine.session import EngineSession
    from termengine.history import CommandHistory
    from termengine.input.reader import InputReader
    from termengine.state.store import StateStore
    from termengine.terminal.base import Clipboard
    from termengine.terminal.writer import TerminalWriter

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class ExecutionProcess:
    """Process handle of the running command."""

    def __init__(self) -> None:
        self.running = False
        self.exit_code: int | None = None
        self._output: Any = _UNSET

    @property
    def has_output(self) -> bool:
        return self._output is not _UNSET

    @property
    def data(self) -> Any:
        """The last value passed to :meth:`output`, or None."""
        return None if self._output is _UNSET else self._output

    def start(self) -> None:
        self.running = True
        self.exit_code = None
        self._output = _UNSET

    def end(self) -> None:
        self.running = False

    def output(self, data: Any) -> None:
        """Emit ``data`` as this command's result (piped to the next command)."""
        self._output = data

    def exit(self, code: int = 0, *, silent: bool = False) -> None:
        """End the current command with ``code``.

        Raises:
            ProcessExitedError: Always, unless ``silent`` is set; the
                dispatcher catches it. A silent exit only records the code
                and the caller is expected to return.
        """
        self.exit_code = code
        if not silent:
            raise ProcessExitedError(code)


@dataclass
class ExecutionContext:
    """Everything a processor may use while handling a command."""

    session: EngineSession | None
    writer: TerminalWriter
    reader: InputReader | None = None
    registry: ProcessorRegistry | None = None
    executor: CommandExecutor | None = None
    services: ServiceContainer | None = None
    clipboard: Clipboard | None = None
    history: CommandHistory | None = None
    state: StateStore | None = None
    process: ExecutionProcess = field(default_factory=ExecutionProcess)
    on_abort: asyncio.Event = field(default_factory=asyncio.Event)

    def for_command(self, writer: TerminalWriter, state: StateStore | None) -> ExecutionContext:
        """Return a copy for one command with its writer, state store and a fresh process."""
        return replace(self, writer=writer, state=state, process=ExecutionProcess())

    def spawn(self) -> ExecutionContext:
        """Return a copy with a fresh process handle, for recursive dispatch."""
        return replace(self, process=ExecutionProcess())
