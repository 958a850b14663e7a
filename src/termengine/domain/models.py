"""Core domain models for the termengine system.

These models represent the data structures flowing through the engine:
parsed commands, processor descriptors (parameters, metadata, state
configuration), command results, and the keystroke events routed from
the terminal widget to the interactive input reader.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CommandStatus(str, enum.Enum):
    """Terminal state of a dispatched command."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"  # Cancelled by the user during an interactive read


class ParameterType(str, enum.Enum):
    """Declared type of a processor parameter, used for coercion."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"  # Every occurrence of the flag is collected


# ---------------------------------------------------------------------------
# Processor Descriptor Models
# ---------------------------------------------------------------------------


class ParameterDescriptor(BaseModel):
    """A flag accepted by a command processor."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Canonical flag name, without dashes")
    aliases: list[str] = Field(default_factory=list, description="Alternate flag names")
    description: str = Field(default="")
    type: ParameterType = Field(default=ParameterType.STRING)
    required: bool = Field(default=False)
    default_value: Any = Field(default=None, description="Bound when the flag is absent")

    def matches(self, flag: str) -> bool:
        """Whether ``flag`` names this parameter or one of its aliases."""
        return flag == self.name or flag in self.aliases


class ProcessorMetadata(BaseModel):
    """Registry-facing metadata of a command processor."""

    model_config = ConfigDict(frozen=True)

    sealed: bool = Field(default=False, description="Refuse replacement and removal")
    hidden: bool = Field(default=False, description="Omit from the help listing")
    module: str = Field(default="misc", description="Group name used by help")
    icon: str = Field(default="")
    required_core_version: str | None = Field(default=None)
    required_cli_version: str | None = Field(default=None)


class StateConfiguration(BaseModel):
    """Named persisted store used by a root processor."""

    model_config = ConfigDict(frozen=True)

    store_name: str | None = Field(
        default=None, description="Store name; the processor command when unset"
    )
    initial_state: dict[str, Any] = Field(default_factory=dict)


class CommandAuthor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str = ""


DEFAULT_AUTHOR = CommandAuthor(name="termengine", email="maintainers@termengine.dev")


# ---------------------------------------------------------------------------
# Command Models
# ---------------------------------------------------------------------------


class ProcessCommand(BaseModel):
    """A single parsed command invocation.

    Created once per input line (or per pipeline stage) and never mutated;
    binding produces a copy with coerced ``args``.
    """

    model_config = ConfigDict(frozen=True)

    raw_command: str = Field(description="Full original text of this command")
    command: str = Field(description="Resolved command path, e.g. 'jwt decode'")
    chain_commands: list[str] = Field(
        default_factory=list, description="Subcommand path below the root command"
    )
    value: str | None = Field(default=None, description="Positional value, if any")
    args: dict[str, Any] = Field(default_factory=dict, description="Flag name -> value")
    data: Any = Field(default=None, description="Payload piped from the previous command")

    @property
    def root_command(self) -> str:
        return self.command.split(" ", 1)[0]


class CommandResult(BaseModel):
    """Outcome of dispatching one input line."""

    status: CommandStatus = Field(default=CommandStatus.SUCCEEDED)
    exit_code: int = Field(default=0)
    output: Any = Field(default=None, description="Last value emitted via process.output")
    error: str | None = Field(default=None)

    @property
    def succeeded(self) -> bool:
        return self.status == CommandStatus.SUCCEEDED


class PackageInfo(BaseModel):
    """Metadata recorded for an installed plugin package."""

    name: str
    version: str = "1.0.0"
    commands: list[str] = Field(default_factory=list)


class SelectOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str


# ---------------------------------------------------------------------------
# Keyboard Event Models (discriminated union)
# ---------------------------------------------------------------------------


class Keystroke(BaseModel):
    """A single key press (e.g., Enter, Backspace, Up, 'a')."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["keystroke"] = "keystroke"
    key: str = Field(description="The key pressed (e.g., 'Enter', 'Tab', 'a', 'Left')")


class KeyCombo(BaseModel):
    """A key combination (e.g., Ctrl+C)."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["key_combo"] = "key_combo"
    modifiers: list[str] = Field(description="Modifier keys (e.g., ['ctrl'])")
    key: str = Field(description="The main key in the combination")


class TextInput(BaseModel):
    """A string of text typed or pasted at once."""

    model_config = ConfigDict(frozen=True)

    action_type: Literal["text_input"] = "text_input"
    text: str


KeyboardAction = Annotated[
    Union[Keystroke, KeyCombo, TextInput],
    Field(discriminator="action_type"),
]
