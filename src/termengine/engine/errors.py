"""Error taxonomy of the command engine.

Every error the engine raises derives from :class:`EngineError`. The
dispatcher converts them into error lines on the output sink and a failed
:class:`~termengine.domain.models.CommandResult`; only
:class:`VersionIncompatibleError` is meant to reach a caller (the plugin
installer).
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine errors."""


class ParseError(EngineError):
    """Raised when an input line cannot be tokenized (e.g. unterminated quote)."""

    def __init__(self, message: str, line: str = "", position: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.position = position


class UnknownCommandError(EngineError):
    """Raised when no processor matches the first token of a command."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command not found: {command}")
        self.command = command


class MissingValueError(EngineError):
    """Raised when a processor requires a value and none was given."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Value required: {command} <value>")
        self.command = command


class InvalidParameterTypeError(EngineError):
    """Raised when a required parameter is missing or fails type coercion."""

    def __init__(self, message: str, parameter: str = "", value: object = None) -> None:
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class VersionIncompatibleError(EngineError):
    """Raised at registration when a processor needs a newer host version."""

    def __init__(self, command: str, required: str, actual: str, component: str = "core") -> None:
        super().__init__(
            f"Processor '{command}' requires {component} version {required}, "
            f"but {actual} is running"
        )
        self.command = command
        self.required = required
        self.actual = actual
        self.component = component


class ProcessExitedError(EngineError):
    """Raised by ``context.process.exit()`` to end the current command."""

    def __init__(self, code: int = 0) -> None:
        super().__init__(f"Process exited with code {code}")
        self.code = code
