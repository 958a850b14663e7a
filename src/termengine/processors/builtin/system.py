"""Session built-ins: help, version, clear, history, packages."""

from __future__ import annotations

import logging
from collections import defaultdict

from termengine.domain.models import ProcessCommand, ProcessorMetadata
from termengine.engine.context import ExecutionContext
from termengine.processors.base import ChildProcessor, CommandProcessor
from termengine.terminal.writer import ForegroundColor

logger = logging.getLogger(__name__)


class HelpProcessor(CommandProcessor):
    """``help`` lists the commands; ``help <command>`` describes one."""

    command = "help"
    aliases = ("man",)
    description = "Displays help for a command"
    accepts_raw_input = True
    metadata = ProcessorMetadata(sealed=True, module="system", icon="❔")

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        if command.value:
            if not await context.executor.show_help(command.value, context):
                context.process.exit(-1, silent=True)
            return

        writer = context.writer
        groups: dict[str, list[CommandProcessor]] = defaultdict(list)
        for processor in context.registry.processors:
            if not processor.metadata.hidden:
                groups[processor.metadata.module].append(processor)

        writer.write_line("Available commands:")
        for module in sorted(groups):
            writer.write_line()
            writer.write_line(writer.wrap_in_color(f"{module.capitalize()}:", ForegroundColor.YELLOW))
            for processor in sorted(groups[module], key=lambda p: p.command):
                writer.write_line(f"  {processor.command.ljust(16)} {processor.description}")
        writer.write_line()
        writer.write_line('Type "help <command>" for details on a command')


class VersionProcessor(CommandProcessor):
    command = "version"
    description = "Prints the engine version"
    metadata = ProcessorMetadata(sealed=True, module="system", icon="ℹ")

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        engine = context.session.settings.engine
        context.writer.write_line(f"Core version: {engine.core_version}")
        context.writer.write_line(f"CLI version:  {engine.cli_version}")
        context.process.output({"core": engine.core_version, "cli": engine.cli_version})


class ClearProcessor(CommandProcessor):
    command = "clear"
    aliases = ("cls",)
    description = "Clears the terminal"
    metadata = ProcessorMetadata(module="system", icon="🧹")

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        context.writer.clear()


class HistoryProcessor(CommandProcessor):
    command = "history"
    aliases = ("hist",)
    description = "Prints the command history of the current session"
    metadata = ProcessorMetadata(sealed=True, module="system", icon="📜")

    def __init__(self) -> None:
        super().__init__()
        self.processors = [
            ChildProcessor("list", self.process_command, description=self.description),
            ChildProcessor("clear", self.clear_history, description="Clears the command history"),
        ]

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        writer = context.writer
        history = context.history.get_history()
        if not history:
            writer.write_info("No command history yet")
            return
        writer.write_line(writer.wrap_in_color("Command history:", ForegroundColor.YELLOW))
        for index, entry in enumerate(history, start=1):
            writer.write_line(f"  {str(index).rjust(3)}  {entry}")
        context.process.output(history)

    async def clear_history(self, command: ProcessCommand, context: ExecutionContext) -> None:
        await context.history.clear_history()
        context.writer.write_info("Command history cleared")


class PackagesProcessor(CommandProcessor):
    command = "packages"
    aliases = ("pkg",)
    description = "Lists the installed plugin packages"
    metadata = ProcessorMetadata(module="system", icon="📦")

    def __init__(self) -> None:
        super().__init__()
        self.processors = [ChildProcessor("ls", self.process_command, description=self.description)]

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        writer = context.writer
        packages = await context.session.packages.get_packages()
        if not packages:
            writer.write_info("No packages installed")
            return
        writer.write_table(
            ["Name", "Version", "Commands"],
            [[p.name, p.version, ", ".join(p.commands)] for p in packages],
        )
        context.process.output([p.model_dump() for p in packages])
