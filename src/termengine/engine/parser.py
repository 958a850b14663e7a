"""Tokenizer and command parser.

Turns a raw input line into a :class:`ProcessCommand`. Whitespace
separates tokens except inside matching single or double quotes; the
leading plain tokens form the command path, which is resolved against
the registry so that subcommands (``jwt decode``) are recognized.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from termengine.domain.models import ParameterType, ProcessCommand
from termengine.engine.errors import ParseError
from termengine.engine.registry import ProcessorRegistry
from termengine.processors.base import CommandProcessor

logger = logging.getLogger(__name__)

_FLAG_RE = re.compile(r"^--?([A-Za-z_][\w-]*)(?:=(.*))?$", re.DOTALL)
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

QUOTES = ("'", '"')
OPERATORS = ("&&", "||", "|")


@dataclass(frozen=True)
class Token:
    """A token with its quotes removed, plus its position in the line."""

    text: str
    raw: str
    start: int
    end: int

    @property
    def quoted(self) -> bool:
        return self.raw[:1] in QUOTES


@dataclass(frozen=True)
class ParsedLine:
    """A parsed command together with the processor it resolved to."""

    command: ProcessCommand
    processor: CommandProcessor | None
    tokens: list[Token]


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens.

    Raises:
        ParseError: If a quote is not terminated.
    """
    tokens: list[Token] = []
    text: list[str] = []
    start: int | None = None
    quote: str | None = None
    quote_start = 0

    for i, ch in enumerate(line):
        if quote:
            if ch == quote:
                quote = None
            else:
                text.append(ch)
            continue
        if ch.isspace():
            if start is not None:
                tokens.append(Token("".join(text), line[start:i], start, i))
                text, start = [], None
            continue
        if start is None:
            start = i
        if ch in QUOTES:
            quote, quote_start = ch, i
        else:
            text.append(ch)

    if quote:
        raise ParseError(f"Unterminated {quote} quote at position {quote_start}", line, quote_start)
    if start is not None:
        tokens.append(Token("".join(text), line[start:], start, len(line)))
    return tokens


def split_by_operators(line: str) -> list[str]:
    """Split ``line`` into command parts and chain operators.

    Returns an alternating list ``[command, operator, command, ...]``.
    Operators inside quotes are literal text.

    Raises:
        ParseError: If an operator has no command on one of its sides.
    """
    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    i = 0

    def flush(position: int) -> None:
        segment = "".join(current).strip()
        if not segment:
            raise ParseError("Missing command around operator", line, position)
        parts.append(segment)
        current.clear()

    while i < len(line):
        ch = line[i]
        if quote:
            if ch == quote:
                quote = None
            current.append(ch)
        elif ch in QUOTES:
            quote = ch
            current.append(ch)
        else:
            operator = next((op for op in OPERATORS if line.startswith(op, i)), None)
            if operator:
                flush(i)
                parts.append(operator)
                i += len(operator)
                continue
            current.append(ch)
        i += 1

    if parts:
        flush(len(line))
    elif "".join(current).strip():
        parts.append("".join(current).strip())
    return parts


def parse_value(value: str) -> Any:
    """Convert numeric-looking text to a number and true/false to a bool."""
    if _INTEGER_RE.match(value):
        return int(value)
    if _NUMBER_RE.match(value):
        return float(value)
    if value in ("true", "false"):
        return value == "true"
    return value


class CommandParser:
    """Parses input lines against a :class:`ProcessorRegistry`."""

    def __init__(self, registry: ProcessorRegistry) -> None:
        self._registry = registry

    def parse(self, line: str, data: Any = None) -> ProcessCommand | None:
        """Parse ``line``; returns None for an empty or whitespace-only line.

        Raises:
            ParseError: If the line contains an unterminated quote.
        """
        parsed = self.parse_line(line, data)
        return parsed.command if parsed else None

    def parse_line(self, line: str, data: Any = None, *, allow_fallback: bool = True) -> ParsedLine | None:
        """Parse ``line`` and resolve its processor.

        When no processor matches, the result carries ``processor=None``
        unless ``allow_fallback`` is set and a root processor accepts
        unlisted commands, in which case the first token becomes its value.
        """
        if not line.strip():
            return None
        tokens = tokenize(line)
        if not tokens:
            return None

        path_words = []
        for token in tokens:
            if token.quoted or _FLAG_RE.match(token.text):
                break
            path_words.append(token.text)

        processor: CommandProcessor | None = None
        path: list[str] = []
        if path_words:
            resolution = self._registry.resolve(path_words[0], path_words[1:])
            if resolution is not None:
                processor, path = resolution.processor, resolution.path

        if processor is None and allow_fallback:
            processor = self._registry.find_fallback_processor()
            if processor is not None:
                path = [processor.command]
                remaining = tokens
            else:
                remaining = tokens[1:]
        else:
            remaining = tokens[len(path):] if processor else tokens[1:]

        if processor is None:
            name = tokens[0].text
            command = ProcessCommand(raw_command=line.strip(), command=name, data=data)
            return ParsedLine(command, None, tokens)

        args, positional = self._parse_arguments(remaining, processor)
        command = ProcessCommand(
            raw_command=line.strip(),
            command=" ".join(path),
            chain_commands=path[1:],
            value=self._value(line, remaining, positional, processor),
            args=args,
            data=data,
        )
        logger.debug("Parsed %r as %r", line, command.command)
        return ParsedLine(command, processor, tokens)

    def _parse_arguments(
        self, tokens: list[Token], processor: CommandProcessor
    ) -> tuple[dict[str, Any], list[int]]:
        args: dict[str, Any] = {}
        positional: list[int] = []
        i = 0
        while i < len(tokens):
            token = tokens[i]
            match = None if token.quoted else _FLAG_RE.match(token.text)
            if match is None:
                positional.append(i)
                i += 1
                continue

            name, inline_value = match.group(1), match.group(2)
            parameter = processor.find_parameter(name)
            value: Any
            if inline_value is not None:
                value = inline_value
            elif (
                parameter is not None
                and parameter.type != ParameterType.BOOLEAN
                and i + 1 < len(tokens)
                and (tokens[i + 1].quoted or not _FLAG_RE.match(tokens[i + 1].text))
            ):
                i += 1
                value = tokens[i].text
            else:
                value = True

            if parameter is None:
                args[name] = parse_value(value) if isinstance(value, str) else value
            elif parameter.type == ParameterType.ARRAY:
                collected = args.get(parameter.name)
                args[parameter.name] = [*(collected if isinstance(collected, list) else []), value]
            else:
                args[parameter.name] = value
            i += 1
        return args, positional

    @staticmethod
    def _value(
        line: str, tokens: list[Token], positional: list[int], processor: CommandProcessor
    ) -> str | None:
        if not positional:
            return None
        if not processor.accepts_raw_input:
            return tokens[positional[0]].text

        # Raw input keeps the original text of the positional tokens,
        # including quotes and the whitespace between adjacent ones
        pieces = [tokens[positional[0]].raw]
        for previous, current in zip(positional, positional[1:]):
            if current == previous + 1:
                pieces.append(line[tokens[previous].end:tokens[current].start])
            else:
                pieces.append(" ")
            pieces.append(tokens[current].raw)
        return "".join(pieces)
