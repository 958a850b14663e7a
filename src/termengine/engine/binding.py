"""Parameter binding.

Coerces the raw flag values of a parsed command into the types declared
by its processor, applies defaults, and validates required parameters
and values.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from termengine.domain.models import ParameterDescriptor, ParameterType, ProcessCommand
from termengine.engine.errors import InvalidParameterTypeError, MissingValueError
from termengine.processors.base import CommandProcessor

logger = logging.getLogger(__name__)

TRUE_TOKENS = frozenset({"true", "1", "yes", "y"})


def coerce(parameter: ParameterDescriptor, value: Any) -> Any:
    """Convert ``value`` to the declared type of ``parameter``.

    Raises:
        ValueError: If the value cannot be converted.
    """
    kind = parameter.type
    if kind == ParameterType.ARRAY:
        return list(value) if isinstance(value, list) else [value]
    if isinstance(value, list):
        # Repeated scalar flag: the last occurrence wins
        value = value[-1]

    if kind == ParameterType.STRING:
        if value is True:
            raise ValueError("expected a value")
        return str(value)
    if kind == ParameterType.BOOLEAN:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in TRUE_TOKENS
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if kind == ParameterType.INTEGER:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value!r} is not an integer")
        return int(str(value).strip()) if isinstance(value, str) else int(value)
    number = float(value)
    if math.isnan(number):
        raise ValueError("NaN is not a number")
    return int(number) if number.is_integer() and "." not in str(value) else number


def bind_parameters(command: ProcessCommand, processor: CommandProcessor) -> ProcessCommand:
    """Return a copy of ``command`` with declared parameters coerced.

    Every declared parameter is bound under its name and all its aliases.
    Undeclared flags are passed through unchanged.

    Raises:
        MissingValueError: If the processor requires a value and none was given.
        InvalidParameterTypeError: If a required parameter is missing or
            cannot be coerced.
    """
    if processor.value_required and not command.value:
        usable_data = processor.accepts_raw_input and command.data not in (None, "")
        if not usable_data:
            raise MissingValueError(command.command)

    args = dict(command.args)
    missing: list[str] = []
    for parameter in processor.parameters:
        raw = args.pop(parameter.name, None)
        for alias in parameter.aliases:
            raw = args.pop(alias, raw)

        if raw is None:
            if parameter.required:
                missing.append(f"--{parameter.name}")
                continue
            value = parameter.default_value
        else:
            try:
                value = coerce(parameter, raw)
            except (TypeError, ValueError) as e:
                if parameter.required:
                    raise InvalidParameterTypeError(
                        f"Invalid value for --{parameter.name}: expected {parameter.type.value}, got {raw!r}",
                        parameter=parameter.name,
                        value=raw,
                    ) from e
                logger.warning(
                    "Ignoring invalid value %r for --%s, using default", raw, parameter.name
                )
                value = parameter.default_value

        if value is None:
            continue
        args[parameter.name] = value
        for alias in parameter.aliases:
            args[alias] = value

    if missing:
        raise InvalidParameterTypeError(
            f"Missing required parameters: {', '.join(missing)}", parameter=missing[0].lstrip("-")
        )
    return command.model_copy(update={"args": args})
