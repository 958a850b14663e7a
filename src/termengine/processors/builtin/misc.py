"""General-purpose built-in commands: echo, sleep, jwt, clipboard, yesno."""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any

from termengine.domain.models import ProcessCommand, ProcessorMetadata
from termengine.engine.context import ExecutionContext
from termengine.processors.base import ChildProcessor, CommandProcessor
from termengine.terminal.writer import ForegroundColor

logger = logging.getLogger(__name__)


def strip_outer_quotes(text: str) -> str:
    """Remove one pair of matching outer quotes, if present."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def _raw_input(command: ProcessCommand) -> Any:
    if command.value:
        return strip_outer_quotes(command.value)
    return command.data


class EchoProcessor(CommandProcessor):
    command = "echo"
    aliases = ("print",)
    description = "Prints the specified text"
    accepts_raw_input = True
    metadata = ProcessorMetadata(module="misc", icon="📢")

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        text = _raw_input(command)
        if text is None:
            text = ""
        if isinstance(text, (dict, list)):
            context.writer.write_json(text)
        else:
            context.writer.write_line(str(text))
        context.process.output(text)


class SleepProcessor(CommandProcessor):
    command = "sleep"
    description = "Sleep for a specified amount of time"
    value_required = True
    metadata = ProcessorMetadata(sealed=True, module="misc", icon="⏱")

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        writer = context.writer
        try:
            time = int(command.value or "")
        except ValueError:
            time = -1
        if time < 0:
            writer.write_error(
                f'Invalid time value: "{command.value}". '
                "Please provide a positive number in milliseconds."
            )
            context.process.exit(-1, silent=True)
            return

        try:
            await asyncio.wait_for(context.on_abort.wait(), time / 1000)
        except asyncio.TimeoutError:
            writer.write_info(f"Slept for {time}ms")
        else:
            writer.write_warning("Sleep interrupted")

    def write_description(self, context: ExecutionContext) -> None:
        context.writer.write_line("Sleep for a specified amount of time")
        context.writer.write_line("Usage: sleep <time>")
        context.writer.write_line("Usage: sleep 5000 # Sleep for 5 seconds")


def _base64url_decode(segment: str) -> str:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8")


class JwtProcessor(CommandProcessor):
    command = "jwt"
    description = "Decode and inspect JWT tokens"
    metadata = ProcessorMetadata(module="misc", icon="🔑")

    def __init__(self) -> None:
        super().__init__()
        self.processors = [
            ChildProcessor(
                "decode",
                self.decode,
                aliases=("d",),
                description="Decode a JWT token",
                accepts_raw_input=True,
                value_required=True,
            ),
        ]

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        await context.executor.show_help(command, context)

    async def decode(self, command: ProcessCommand, context: ExecutionContext) -> None:
        writer = context.writer
        token = str(_raw_input(command) or "").strip()
        parts = token.split(".")
        if len(parts) != 3:
            writer.write_error("Invalid JWT token (expected 3 parts separated by dots)")
            context.process.exit(-1, silent=True)
            return

        try:
            header = json.loads(_base64url_decode(parts[0]))
            payload = json.loads(_base64url_decode(parts[1]))
        except ValueError as e:
            logger.debug("JWT decode failed: %s", e)
            writer.write_error("Failed to decode JWT token")
            context.process.exit(-1, silent=True)
            return

        writer.write_line(writer.wrap_in_color("Header:", ForegroundColor.YELLOW))
        writer.write_json(header)
        writer.write_line()
        writer.write_line(writer.wrap_in_color("Payload:", ForegroundColor.YELLOW))
        writer.write_json(payload)
        writer.write_line()

        if isinstance(payload, dict) and isinstance(payload.get("exp"), (int, float)):
            expires = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
            status = (
                writer.wrap_in_color("(EXPIRED)", ForegroundColor.RED)
                if expires < datetime.now(timezone.utc)
                else writer.wrap_in_color("(valid)", ForegroundColor.GREEN)
            )
            writer.write_line(
                f"{writer.wrap_in_color('Expires:', ForegroundColor.YELLOW)} {expires.isoformat()} {status}"
            )
        if isinstance(payload, dict) and isinstance(payload.get("iat"), (int, float)):
            issued = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            writer.write_line(f"{writer.wrap_in_color('Issued:', ForegroundColor.YELLOW)}  {issued.isoformat()}")

        writer.write_line(f"{writer.wrap_in_color('Signature:', ForegroundColor.YELLOW)} {parts[2][:20]}...")
        context.process.output({"header": header, "payload": payload})


class ClipboardProcessor(CommandProcessor):
    command = "clipboard"
    aliases = ("clip",)
    description = "Copy text to and paste text from the clipboard"
    metadata = ProcessorMetadata(module="misc", icon="📋")

    def __init__(self) -> None:
        super().__init__()
        self.processors = [
            ChildProcessor(
                "copy",
                self.copy,
                description="Copy text (or piped data) to the clipboard",
                accepts_raw_input=True,
                value_required=True,
            ),
            ChildProcessor("paste", self.paste, description="Print the clipboard contents"),
        ]

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        await context.executor.show_help(command, context)

    async def copy(self, command: ProcessCommand, context: ExecutionContext) -> None:
        data = _raw_input(command)
        text = data if isinstance(data, str) else json.dumps(data)
        await context.clipboard.write(text)
        context.writer.write_success("Copied to clipboard")

    async def paste(self, command: ProcessCommand, context: ExecutionContext) -> None:
        text = await context.clipboard.read()
        context.writer.write_line(text)
        context.process.output(text)


class YesNoProcessor(CommandProcessor):
    command = "yesno"
    description = "Ask a yes/no question and print the answer"
    accepts_raw_input = True
    metadata = ProcessorMetadata(module="misc", icon="❓")

    async def process_command(self, command: ProcessCommand, context: ExecutionContext) -> None:
        question = strip_outer_quotes(command.value) if command.value else "Are you sure?"
        answer = await context.reader.read_confirm(question)
        if answer is None:
            context.writer.write_warning("Cancelled")
            return
        context.writer.write_line("yes" if answer else "no")
        context.process.output(answer)
