"""Command dispatcher.

Runs one input line: splits it at chain operators, parses and resolves
each part, binds parameters, initializes the processor once per session
and awaits ``process_command``. Errors never escape ``execute``; they
become error lines on the writer and a failed :class:`CommandResult`.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any

from termengine.domain.models import CommandResult, CommandStatus, ProcessCommand
from termengine.engine.binding import bind_parameters
from termengine.engine.context import ExecutionContext
from termengine.engine.errors import (
    EngineError,
    InvalidParameterTypeError,
    MissingValueError,
    ParseError,
    ProcessExitedError,
    UnknownCommandError,
)
from termengine.engine.parser import CommandParser, ParsedLine, split_by_operators
from termengine.engine.registry import ProcessorRegistry
from termengine.processors.base import CommandProcessor
from termengine.state.manager import StateStoreManager
from termengine.terminal.writer import CapturingTerminalWriter

logger = logging.getLogger(__name__)

ALIASES_STORE = "aliases"
_MAX_ALIAS_DEPTH = 10


def _failed(error: EngineError | str, exit_code: int = -1) -> CommandResult:
    return CommandResult(status=CommandStatus.FAILED, exit_code=exit_code, error=str(error))


class CommandExecutor:
    """Dispatches input lines against a :class:`ProcessorRegistry`.

    One executor serves one session: it remembers which processors it
    has already initialized without touching the processors themselves,
    so the same processor instance can serve several sessions.
    """

    def __init__(
        self,
        registry: ProcessorRegistry,
        state_manager: StateStoreManager,
        parser: CommandParser | None = None,
    ) -> None:
        self._registry = registry
        self._state_manager = state_manager
        self._parser = parser or CommandParser(registry)
        self._initialized: weakref.WeakSet[CommandProcessor] = weakref.WeakSet()

    @property
    def parser(self) -> CommandParser:
        return self._parser

    def is_initialized(self, processor: CommandProcessor) -> bool:
        return processor in self._initialized

    async def execute(self, line: str, context: ExecutionContext, *, _depth: int = 0) -> CommandResult:
        """Execute ``line`` including ``|``, ``&&`` and ``||`` chains.

        ``&&`` runs the next command only after a success, ``||`` only
        after a failure, and ``|`` only after a success, passing the
        producer's output as the consumer's ``data``. An aborted command
        ends the whole chain.
        """
        try:
            parts = split_by_operators(line)
        except ParseError as e:
            context.writer.write_error(str(e))
            return _failed(e)
        if not parts:
            return CommandResult()

        result, proceed = await self._execute_single(parts[0], context, None, _depth)
        for operator, text in zip(parts[1::2], parts[2::2]):
            if not proceed:
                break
            if operator == "&&" and result.succeeded:
                result, proceed = await self._execute_single(text, context, None, _depth)
            elif operator == "||" and not result.succeeded:
                result, proceed = await self._execute_single(text, context, None, _depth)
            elif operator == "|" and result.succeeded:
                result, proceed = await self._execute_single(text, context, result.output, _depth)
        return result

    async def execute_command(self, line: str, context: ExecutionContext) -> CommandResult:
        """Dispatch ``line`` from inside a running command, with its own process."""
        return await self.execute(line, context.spawn())

    async def show_help(self, command: ProcessCommand | str, context: ExecutionContext) -> bool:
        """Write the description of the processor named by ``command``.

        Returns:
            False if no processor matches the command path.
        """
        path = command.command if isinstance(command, ProcessCommand) else command
        words = path.split()
        resolution = self._registry.resolve(words[0], words[1:]) if words else None
        if resolution is None or resolution.remaining:
            context.writer.write_error(str(UnknownCommandError(path)))
            return False
        resolution.processor.write_description(context)
        return True

    async def _execute_single(
        self, text: str, context: ExecutionContext, data: Any, depth: int
    ) -> tuple[CommandResult, bool]:
        """Run one chain part. The flag tells whether the chain may go on."""
        writer = CapturingTerminalWriter(context.writer)
        try:
            parsed = self._parser.parse_line(text, data, allow_fallback=False)
        except ParseError as e:
            writer.write_error(str(e))
            return _failed(e), False
        if parsed is None:
            return CommandResult(), True

        if parsed.processor is None:
            expanded = await self._expand_user_alias(text, parsed)
            if expanded is not None and depth < _MAX_ALIAS_DEPTH:
                logger.debug("Expanded alias %r to %r", text, expanded)
                result = await self.execute(expanded, context, _depth=depth + 1)
                return result, result.status != CommandStatus.ABORTED
            parsed = self._parser.parse_line(text, data)
            if parsed is None or parsed.processor is None:
                error = UnknownCommandError(parsed.command.command if parsed else text)
                writer.write_error(str(error))
                writer.write_info('Type "help" to see the available commands')
                return _failed(error), False

        processor = parsed.processor
        command = parsed.command
        ctx = context.for_command(writer, None)

        if self._builtin_flag(command, processor, "help", "h"):
            await self.show_help(command, ctx)
            return CommandResult(), True
        if self._builtin_flag(command, processor, "version", "v"):
            writer.write_line(f"{command.command} version {processor.version}")
            return CommandResult(output=processor.version), True

        try:
            command = bind_parameters(command, processor)
        except (MissingValueError, InvalidParameterTypeError) as e:
            writer.write_error(str(e))
            return _failed(e), True

        ctx.state = self._state_manager.get_processor_state_store(processor)
        await ctx.state.initialize()
        result = await self._run(processor, command, ctx, writer)
        return result, result.status != CommandStatus.ABORTED

    async def _run(
        self,
        processor: CommandProcessor,
        command: ProcessCommand,
        ctx: ExecutionContext,
        writer: CapturingTerminalWriter,
    ) -> CommandResult:
        process = ctx.process
        reader = ctx.reader
        previous_signal = reader.abort_signal if reader else None
        if reader is not None:
            reader.abort_signal = ctx.on_abort

        process.start()
        error: str | None = None
        try:
            if processor not in self._initialized:
                await processor.initialize(ctx)
                self._initialized.add(processor)
            logger.debug("Running %r", command.command)
            await processor.process_command(command, ctx)
        except ProcessExitedError as e:
            if e.code != 0:
                error = str(e)
                writer.write_error(error)
        except EngineError as e:
            error = str(e)
            writer.write_error(error)
            process.exit_code = -1
        except Exception as e:
            logger.error("Command %r raised: %s", command.command, e, exc_info=True)
            error = f"Error executing command: {e}"
            writer.write_error(error)
            process.exit_code = -1
        finally:
            process.end()
            if reader is not None:
                reader.abort_signal = previous_signal

        exit_code = process.exit_code or 0
        output = process.data if process.has_output else writer.captured_output()
        if ctx.on_abort.is_set():
            return CommandResult(status=CommandStatus.ABORTED, exit_code=exit_code, output=output)
        if exit_code != 0:
            return CommandResult(
                status=CommandStatus.FAILED,
                exit_code=exit_code,
                output=output,
                error=error or str(ProcessExitedError(exit_code)),
            )
        return CommandResult(exit_code=0, output=output)

    async def _expand_user_alias(self, text: str, parsed: ParsedLine) -> str | None:
        store = self._state_manager.get_state_store(ALIASES_STORE, {"aliases": {}})
        await store.initialize()
        aliases = store.get_state().get("aliases") or {}
        expansion = aliases.get(parsed.command.command)
        if not expansion:
            return None
        first = parsed.tokens[0]
        return f"{expansion}{text[first.end:]}"

    @staticmethod
    def _builtin_flag(
        command: ProcessCommand, processor: CommandProcessor, name: str, short: str
    ) -> bool:
        for flag in (name, short):
            if command.args.get(flag) and processor.find_parameter(flag) is None:
                return True
        return False
