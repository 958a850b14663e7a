"""Processor registry.

Owns the tree of registered command processors. Each tree level is a
table of nodes keyed by the lowercase canonical command, with a
secondary alias index into the same table, so sealed and replace
semantics are plain dictionary operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from termengine.engine.errors import VersionIncompatibleError
from termengine.engine.versions import satisfies
from termengine.processors.base import CommandProcessor

logger = logging.getLogger(__name__)


@dataclass
class _Level:
    nodes: dict[str, _Node] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)

    def canonical(self, name: str) -> str:
        key = name.lower()
        return self.aliases.get(key, key)

    def lookup(self, name: str) -> _Node | None:
        return self.nodes.get(self.canonical(name))

    def insert(self, processor: CommandProcessor, children: _Level) -> None:
        key = processor.command.lower()
        self.drop_aliases(key)
        if key in self.aliases:
            logger.warning(
                "Command %r shadows an alias of %r, dropping the alias",
                processor.command, self.nodes[self.aliases[key]].processor.command,
            )
            del self.aliases[key]
        self.nodes[key] = _Node(processor, children)
        for alias in processor.aliases:
            alias_key = alias.lower()
            if alias_key in self.nodes or self.aliases.get(alias_key, key) != key:
                logger.warning(
                    "Alias %r of %r collides with another command, ignoring it",
                    alias, processor.command,
                )
                continue
            self.aliases[alias_key] = key

    def drop_aliases(self, key: str) -> None:
        for alias in [a for a, target in self.aliases.items() if target == key]:
            del self.aliases[alias]


@dataclass
class _Node:
    processor: CommandProcessor
    children: _Level


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a command path against the registry."""

    processor: CommandProcessor
    path: list[str]
    remaining: list[str]


def _build_level(processors: Iterable[CommandProcessor]) -> _Level:
    level = _Level()
    for processor in processors:
        level.insert(processor, _build_level(processor.processors))
    return level


class ProcessorRegistry:
    """Registry of root processors and their nested subcommands.

    Args:
        processors: Processors registered at construction.
        core_version: Running core version, checked against
            ``metadata.required_core_version``.
        cli_version: Running CLI version, checked against
            ``metadata.required_cli_version``.
    """

    def __init__(
        self,
        processors: Iterable[CommandProcessor] = (),
        core_version: str = "1.0.0",
        cli_version: str = "1.0.0",
    ) -> None:
        self._root = _Level()
        self._core_version = core_version
        self._cli_version = cli_version
        for processor in processors:
            self.register_processor(processor)

    @property
    def processors(self) -> list[CommandProcessor]:
        """Registered root processors, in registration order."""
        return [node.processor for node in self._root.nodes.values()]

    def register_processor(self, processor: CommandProcessor) -> bool:
        """Add ``processor`` as a root command.

        Replaces an existing non-sealed processor with the same command.
        An extending processor wraps the existing one instead.

        Returns:
            True if the registry changed, False if a sealed processor
            refused the replacement.

        Raises:
            VersionIncompatibleError: If the host versions do not satisfy
                the processor's requirements.
        """
        self.check_versions(processor)

        key = processor.command.lower()
        existing = self._root.nodes.get(key)
        children = _build_level(processor.processors)

        if existing is not None:
            if processor.extends_processor:
                processor.original_processor = existing.processor
                if not processor.processors:
                    children = existing.children
            elif existing.processor.is_sealed:
                logger.warning(
                    "Processor %r is sealed, refusing replacement", existing.processor.command
                )
                return False
            else:
                logger.info("Replacing processor %r", processor.command)

        self._root.insert(processor, children)
        logger.debug("Registered processor %r", processor.command)
        return True

    def unregister_processor(self, processor: CommandProcessor) -> bool:
        """Remove ``processor`` from the root level.

        An extending processor is replaced by the one it wrapped. Sealed
        processors are left in place.

        Returns:
            True if the registry changed.
        """
        key = processor.command.lower()
        node = self._root.nodes.get(key)
        if node is None or node.processor is not processor:
            return False

        if processor.original_processor is not None:
            original = processor.original_processor
            processor.original_processor = None
            self._root.insert(original, _build_level(original.processors) if original.processors else node.children)
            logger.info("Restored original processor %r", original.command)
            return True

        if processor.is_sealed:
            logger.warning("Processor %r is sealed, refusing removal", processor.command)
            return False

        del self._root.nodes[key]
        self._root.drop_aliases(key)
        logger.debug("Unregistered processor %r", processor.command)
        return True

    def find_processor(self, command: str, rest: Sequence[str] = ()) -> CommandProcessor | None:
        """Return the deepest processor matching ``command`` followed by ``rest``."""
        resolution = self.resolve(command, rest)
        return resolution.processor if resolution else None

    def find_processor_in_collection(
        self,
        command: str,
        rest: Sequence[str],
        collection: Iterable[CommandProcessor],
    ) -> CommandProcessor | None:
        """Resolve against an arbitrary list of processors instead of the roots."""
        resolution = self._resolve_in(_build_level(collection), command, rest)
        return resolution.processor if resolution else None

    def resolve(self, command: str, rest: Sequence[str] = ()) -> Resolution | None:
        """Resolve a command path, returning the matched chain and leftover tokens."""
        return self._resolve_in(self._root, command, rest)

    def find_fallback_processor(self) -> CommandProcessor | None:
        """Return the root processor that accepts unlisted commands, if any."""
        for node in self._root.nodes.values():
            if node.processor.allow_unlisted_commands:
                return node.processor
        return None

    def get_root_processor(self, processor: CommandProcessor) -> CommandProcessor:
        """Return the root processor whose tree contains ``processor``."""
        chain = self._find_chain(self._root, processor)
        return chain[0] if chain else processor

    def get_command_path(self, processor: CommandProcessor) -> str:
        """Return the full command path of ``processor``, e.g. ``jwt decode``."""
        chain = self._find_chain(self._root, processor)
        return " ".join(p.command for p in chain) if chain else processor.command

    def _resolve_in(self, level: _Level, command: str, rest: Sequence[str]) -> Resolution | None:
        node = level.lookup(command)
        if node is None:
            return None
        path = [node.processor.command]
        remaining = list(rest)
        while remaining:
            child = node.children.lookup(remaining[0])
            if child is None:
                break
            node = child
            path.append(node.processor.command)
            remaining.pop(0)
        return Resolution(node.processor, path, remaining)

    def _find_chain(self, level: _Level, target: CommandProcessor) -> list[CommandProcessor]:
        for node in level.nodes.values():
            if node.processor is target:
                return [node.processor]
            below = self._find_chain(node.children, target)
            if below:
                return [node.processor, *below]
        return []

    def check_versions(self, processor: CommandProcessor) -> None:
        """Raise VersionIncompatibleError if the host cannot run ``processor``."""
        metadata = processor.metadata
        if not satisfies(self._core_version, metadata.required_core_version):
            logger.warning(
                "Processor %r requires core %s, running %s",
                processor.command, metadata.required_core_version, self._core_version,
            )
            raise VersionIncompatibleError(
                processor.command, metadata.required_core_version or "", self._core_version, "core"
            )
        if not satisfies(self._cli_version, metadata.required_cli_version):
            logger.warning(
                "Processor %r requires cli %s, running %s",
                processor.command, metadata.required_cli_version, self._cli_version,
            )
            raise VersionIncompatibleError(
                processor.command, metadata.required_cli_version or "", self._cli_version, "cli"
            )
