"""Abstract base class for command processors.

A processor is both the registered descriptor of a command (name,
aliases, parameters, nested subcommands, metadata) and its behaviour.
Subclasses declare the descriptor fields as class attributes and
implement :meth:`CommandProcessor.process_command`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable

from termengine.domain.models import (
    DEFAULT_AUTHOR,
    CommandAuthor,
    ParameterDescriptor,
    ParameterType,
    ProcessCommand,
    ProcessorMetadata,
    StateConfiguration,
)
from termengine.terminal.writer import ForegroundColor

if TYPE_CHECKING:
    from termengine.engine.context import ExecutionContext

logger = logging.getLogger(__name__)

CommandHandler = Callable[[ProcessCommand, "ExecutionContext"], Awaitable[None]]


class CommandProcessor(ABC):
    """Abstract interface for a command handler.

    Example usage::

        class GreetProcessor(CommandProcessor):
            command = "greet"
            parameters = (ParameterDescriptor(name="name", aliases=["n"]),)

            async def process_command(self, command, context):
                context.writer.write_line(f"Hello {command.args.get('name')}")
    """

    command: str = ""
    aliases: tuple[str, ...] = ()
    description: str = ""
    version: str = "1.0.0"
    author: CommandAuthor = DEFAULT_AUTHOR
    parameters: tuple[ParameterDescriptor, ...] = ()
    accepts_raw_input: bool = False
    allow_unlisted_commands: bool = False
    value_required: bool = False
    metadata: ProcessorMetadata = ProcessorMetadata()
    state_configuration: StateConfiguration | None = None
    extends_processor: bool = False

    def __init__(self) -> None:
        self.processors: list[CommandProcessor] = []
        # Set by the registry when this processor extends an existing one
        self.original_processor: CommandProcessor | None = None

    @property
    def is_sealed(self) -> bool:
        return self.metadata.sealed

    @property
    def store_name(self) -> str:
        if self.state_configuration and self.state_configuration.store_name:
            return self.state_configuration.store_name
        return self.command

    def find_parameter(self, flag: str) -> ParameterDescriptor | None:
        """Return the declared parameter named ``flag`` (or aliased by it)."""
        for parameter in self.parameters:
            if parameter.matches(flag):
                return parameter
        return None

    async def initialize(self, context: ExecutionContext) -> None:
        """Called once per session before the first ``process_command``."""

    @abstractmethod
    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        """Execute ``command``.

        Output goes through ``context.writer``; the value handed to a piped
        consumer through ``context.process.output``. Call
        ``context.process.exit(code)`` to fail the command.
        """
        ...

    def write_description(self, context: ExecutionContext) -> None:
        """Write help text. The default is a usage summary built from the descriptor."""
        writer = context.writer
        path = context.registry.get_command_path(self) if context.registry else self.command
        if self.description:
            writer.write_line(self.description)
            writer.write_line()

        usage = path
        if self.processors:
            usage += " [subcommand]"
        if self.parameters:
            usage += " [options]"
        if self.value_required:
            usage += " <value>"
        writer.write_line("Usage:")
        writer.write_line(f"  {writer.wrap_in_color(usage, ForegroundColor.CYAN)}")

        if self.aliases:
            writer.write_line()
            writer.write_line(f"Aliases: {', '.join(self.aliases)}")

        if self.processors:
            writer.write_line()
            writer.write_line("Subcommands:")
            for child in self.processors:
                name = child.command
                if child.aliases:
                    name += f" ({', '.join(child.aliases)})"
                writer.write_line(f"  {name.ljust(20)} {child.description}")

        if self.parameters:
            writer.write_line()
            writer.write_line("Options:")
            for parameter in self.parameters:
                writer.write_line(f"  {_describe_parameter(parameter)}")


def _describe_parameter(parameter: ParameterDescriptor) -> str:
    flags = ", ".join(
        [f"--{parameter.name}"]
        + [f"-{a}" if len(a) == 1 else f"--{a}" for a in parameter.aliases]
    )
    if parameter.type != ParameterType.BOOLEAN:
        flags += f" <{parameter.type.value}>"
    text = f"{flags.ljust(28)} {parameter.description}".rstrip()
    if parameter.required:
        text += " (required)"
    if parameter.default_value is not None:
        text += f" [default: {parameter.default_value}]"
    return text


class ChildProcessor(CommandProcessor):
    """A processor backed by a plain coroutine function.

    Used for small inline subcommands that do not warrant their own class.
    """

    def __init__(
        self,
        command: str,
        handler: CommandHandler,
        *,
        aliases: Iterable[str] = (),
        description: str = "",
        parameters: Iterable[ParameterDescriptor] = (),
        accepts_raw_input: bool = False,
        value_required: bool = False,
        processors: Iterable[CommandProcessor] = (),
        describe: Callable[[ExecutionContext], None] | None = None,
    ) -> None:
        super().__init__()
        self.command = command
        self.aliases = tuple(aliases)
        self.description = description
        self.parameters = tuple(parameters)
        self.accepts_raw_input = accepts_raw_input
        self.value_required = value_required
        self.processors = list(processors)
        self._handler = handler
        self._describe = describe

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        await self._handler(command, context)

    def write_description(self, context: ExecutionContext) -> None:
        if self._describe is None:
            super().write_description(context)
        else:
            self._describe(context)
