"""Engine session.

One session is one embedded terminal: its own registry, history, state
stores, input reader, services and executor. Sessions share nothing
unless they are handed the same persistence backend.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable

from termengine.config.settings import Settings
from termengine.domain.models import CommandResult, KeyboardAction
from termengine.engine.context import ExecutionContext
from termengine.engine.executor import CommandExecutor
from termengine.engine.packages import PackageManager
from termengine.engine.registry import ProcessorRegistry
from termengine.engine.services import ServiceContainer
from termengine.history import CommandHistory
from termengine.input.reader import InputReader
from termengine.processors.base import CommandProcessor
from termengine.processors.builtin import default_processors
from termengine.state.manager import StateStoreManager
from termengine.storage.base import KeyValueStore, StorageError
from termengine.storage.file import JsonFileKeyValueStore
from termengine.storage.memory import InMemoryKeyValueStore
from termengine.terminal.base import Clipboard, InMemoryClipboard, OutputSink
from termengine.terminal.buffer import BufferedOutputSink
from termengine.terminal.writer import TerminalWriter

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> KeyValueStore:
    """Build the persistence backend selected in ``settings.storage``."""
    if settings.storage.backend == "file":
        return JsonFileKeyValueStore(Path(settings.storage.path).expanduser())
    return InMemoryKeyValueStore()


class EngineSession:
    """A terminal session: the explicit owner of all per-terminal state.

    Args:
        settings: Engine configuration. Defaults are used when None.
        storage: Persistence backend; built from ``settings.storage`` when None.
        sink: Output sink; a :class:`BufferedOutputSink` when None.
        clipboard: Clipboard; an :class:`InMemoryClipboard` when None.
        processors: Root processors to register; the built-ins when None.

    Example usage::

        session = EngineSession()
        await session.start()
        result = await session.handle_line("echo hello")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        storage: KeyValueStore | None = None,
        sink: OutputSink | None = None,
        clipboard: Clipboard | None = None,
        processors: Iterable[CommandProcessor] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.storage = storage if storage is not None else create_storage(self.settings)
        self.sink = sink or BufferedOutputSink(self.settings.endpoint.scrollback_lines)
        self.clipboard = clipboard or InMemoryClipboard()
        self.writer = TerminalWriter(self.sink)

        self.registry = ProcessorRegistry(
            core_version=self.settings.engine.core_version,
            cli_version=self.settings.engine.cli_version,
        )
        for processor in default_processors() if processors is None else processors:
            self.registry.register_processor(processor)

        self.history = CommandHistory(self.storage, self.settings.engine.history_limit)
        self.state = StateStoreManager(self.storage, self.registry)
        self.reader = InputReader(self.writer)
        self.services = ServiceContainer()
        self.packages = PackageManager(self.registry, self.storage)
        self.executor = CommandExecutor(self.registry, self.state)

        self.services.set("registry", self.registry)
        self.services.set("history", self.history)
        self.services.set("packages", self.packages)

        self._lock = asyncio.Lock()
        self._started = False

    @property
    def is_busy(self) -> bool:
        """Whether a command is currently running."""
        return self._lock.locked()

    async def start(self) -> None:
        """Load persisted history. Safe to call more than once."""
        if self._started:
            return
        self._started = True
        await self.history.initialize()
        logger.info("Session started with %d commands", len(self.registry.processors))

    def create_context(self) -> ExecutionContext:
        """Build the root execution context for one input line."""
        return ExecutionContext(
            session=self,
            writer=self.writer,
            reader=self.reader,
            registry=self.registry,
            executor=self.executor,
            services=self.services,
            clipboard=self.clipboard,
            history=self.history,
        )

    async def handle_line(self, line: str) -> CommandResult:
        """Line-source entry point: record ``line`` in history and execute it.

        While a command is waiting on an interactive read, the line is the
        answer to that read instead.
        """
        if self.reader.is_active:
            self.reader.handle_data(line)
            self.reader.handle_data("\r")
            return CommandResult()
        if not line.strip():
            return CommandResult()
        await self.start()
        try:
            await self.history.add_command(line)
        except StorageError as e:
            logger.error("Failed to record command history: %s", e)
        return await self.execute(line)

    async def execute(self, line: str) -> CommandResult:
        """Execute ``line`` without recording it in history.

        Commands of one session never interleave.
        """
        async with self._lock:
            self.writer.write_line(f"{self.settings.engine.prompt}{line}")
            result = await self.executor.execute(line, self.create_context())
        logger.debug("%r finished: %s (%d)", line, result.status.value, result.exit_code)
        return result

    def handle_key(self, action: KeyboardAction) -> bool:
        """Route a key event to the active interactive read."""
        return self.reader.handle_key(action)

    def abort(self) -> bool:
        """Signal cancellation to the running command and its pending read.

        Returns:
            True if there was something to abort.
        """
        signal = self.reader.abort_signal
        if signal is not None:
            signal.set()
        cancelled = self.reader.cancel()
        return cancelled or signal is not None
