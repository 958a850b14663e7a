"""Command engine for termengine.

Turns raw input lines into commands, resolves them against the processor
registry and dispatches them with an execution context.

Public API:
    CommandParser -- Raw line to ProcessCommand
    ProcessorRegistry -- Tree of registered command processors
    CommandExecutor -- Dispatcher (binding, lifecycle, piping)
    EngineSession -- One terminal session's registry, history and stores
    EngineError -- Base class of all engine errors
"""

from termengine.engine.errors import (
    EngineError,
    InvalidParameterTypeError,
    MissingValueError,
    ParseError,
    ProcessExitedError,
    UnknownCommandError,
    VersionIncompatibleError,
)

__all__ = [
    "CommandExecutor",
    "CommandParser",
    "EngineError",
    "EngineSession",
    "InvalidParameterTypeError",
    "MissingValueError",
    "ParseError",
    "ProcessExitedError",
    "ProcessorRegistry",
    "UnknownCommandError",
    "VersionIncompatibleError",
]


def __getattr__(name: str) -> type:
    """Lazy import for the components that depend on storage and processors."""
    if name == "CommandParser":
        from termengine.engine.parser import CommandParser
        return CommandParser
    if name == "ProcessorRegistry":
        from termengine.engine.registry import ProcessorRegistry
        return ProcessorRegistry
    if name == "CommandExecutor":
        from termengine.engine.executor import CommandExecutor
        return CommandExecutor
    if name == "EngineSession":
        from termengine.engine.session import EngineSession
        return EngineSession
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
