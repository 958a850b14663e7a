"""User-defined command aliases.

Aliases live in the ``aliases`` state store as ``{"aliases": {name:
command}}``. The dispatcher expands them when a line's first token
matches no registered command.
"""

from __future__ import annotations

import logging

from termengine.domain.models import ProcessCommand, ProcessorMetadata, StateConfiguration
from termengine.engine.context import ExecutionContext
from termengine.processors.base import ChildProcessor, CommandProcessor

logger = logging.getLogger(__name__)

ALIASES_STATE = StateConfiguration(store_name="aliases", initial_state={"aliases": {}})


def _aliases(context: ExecutionContext) -> dict[str, str]:
    return dict(context.state.get_state().get("aliases") or {})


class AliasProcessor(CommandProcessor):
    """``alias --name="command ..."`` defines one or more aliases."""

    command = "alias"
    description = "Manage aliases for commands"
    metadata = ProcessorMetadata(sealed=True, module="misc", icon="🔥")
    state_configuration = ALIASES_STATE

    def __init__(self) -> None:
        super().__init__()
        self.processors = [ChildProcessor("ls", self.list_aliases, description="List all aliases")]

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        writer = context.writer
        if not command.args:
            writer.write_error("No aliases provided")
            context.process.exit(-1, silent=True)
            return

        for name, target in command.args.items():
            if context.registry.find_processor(name) is not None or target is True:
                writer.write_error(f"{name} cannot be aliased to {target}")
                context.process.exit(-1, silent=True)
                return
            writer.write_info(f"{name} -> {target}")

        aliases = _aliases(context)
        aliases.update({name: str(target) for name, target in command.args.items()})
        context.state.update_state({"aliases": aliases})
        await context.state.persist()

    async def list_aliases(self, command: ProcessCommand, context: ExecutionContext) -> None:
        writer = context.writer
        aliases = _aliases(context)
        writer.write_line("Aliases:")
        if not aliases:
            writer.write_info("  No aliases defined")
        for name, target in aliases.items():
            writer.write_info(f"  {name} -> {target}")
        context.process.output(aliases)


class UnaliasProcessor(CommandProcessor):
    command = "unalias"
    description = "Remove aliases for commands"
    value_required = True
    metadata = ProcessorMetadata(sealed=True, module="misc", icon="🔥")
    state_configuration = ALIASES_STATE

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        name = command.value or ""
        aliases = _aliases(context)
        if name not in aliases:
            context.writer.write_error(f"Alias {name} not found")
            context.process.exit(-1, silent=True)
            return

        del aliases[name]
        context.state.update_state({"aliases": aliases})
        await context.state.persist()
        logger.debug("Removed alias %s", name)
