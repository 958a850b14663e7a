"""Domain models for termengine.

This package contains the core data structures, enumerations, and value
objects used throughout the engine. All models use Pydantic v2 for
validation and serialization.
"""

from termengine.domain.models import (
    DEFAULT_AUTHOR,
    CommandAuthor,
    CommandResult,
    CommandStatus,
    KeyboardAction,
    KeyCombo,
    Keystroke,
    PackageInfo,
    ParameterDescriptor,
    ParameterType,
    ProcessCommand,
    ProcessorMetadata,
    SelectOption,
    StateConfiguration,
    TextInput,
)

__all__ = [
    "DEFAULT_AUTHOR",
    "CommandAuthor",
    "CommandResult",
    "CommandStatus",
    "KeyboardAction",
    "KeyCombo",
    "Keystroke",
    "PackageInfo",
    "ParameterDescriptor",
    "ParameterType",
    "ProcessCommand",
    "ProcessorMetadata",
    "SelectOption",
    "StateConfiguration",
    "TextInput",
]
