"""Interactive input reader.

Lets a running command suspend until the user answers a prompt. Each
read registers one :class:`ActiveInputRequest` holding a future; key
events routed from the terminal edit the request's buffer and resolve
the future on Enter. Ctrl+C, Escape or the command's abort signal
resolve it with None, which the command must treat as "stop here".
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from termengine.domain.models import KeyboardAction, KeyCombo, Keystroke, SelectOption, TextInput
from termengine.terminal.writer import ForegroundColor, TerminalWriter

logger = logging.getLogger(__name__)

# Key name to terminal byte sequence
KEY_SEQUENCES = {
    "Enter": "\r",
    "Return": "\r",
    "Tab": "\t",
    "Space": " ",
    "Backspace": "\x7f",
    "Delete": "\x1b[3~",
    "Escape": "\x1b",
    "Up": "\x1b[A",
    "Down": "\x1b[B",
    "Right": "\x1b[C",
    "Left": "\x1b[D",
    "Home": "\x1b[H",
    "End": "\x1b[F",
}

_SEQUENCE_KEYS = {
    **{seq: name for name, seq in reversed(list(KEY_SEQUENCES.items()))},
    "\n": "Enter",
    "\r\n": "Enter",
    "\b": "Backspace",
}

_REDRAW = "\x1b[2K\r"


class ReadKind(str, enum.Enum):
    LINE = "line"
    PASSWORD = "password"
    CONFIRM = "confirm"
    SELECT = "select"
    NUMBER = "number"


@dataclass
class ActiveInputRequest:
    """State of the read currently waiting for the user."""

    kind: ReadKind
    prompt: str
    future: asyncio.Future
    buffer: str = ""
    cursor: int = 0
    default_value: Any = None
    options: list[SelectOption] = field(default_factory=list)
    selected_index: int = 0
    minimum: float | None = None
    maximum: float | None = None
    on_change: Callable[[str], None] | None = None


class InputReader:
    """Suspendable prompts for one session (one read at a time).

    Example usage::

        name = await context.reader.read_line("Name: ")
        if name is None:
            return  # cancelled
    """

    def __init__(self, writer: TerminalWriter) -> None:
        self._writer = writer
        self._active: ActiveInputRequest | None = None
        # Abort signal of the running command; cancelling a read sets it
        self.abort_signal: asyncio.Event | None = None

    @property
    def active_request(self) -> ActiveInputRequest | None:
        return self._active

    @property
    def is_active(self) -> bool:
        return self._active is not None

    async def read_line(self, prompt: str, *, abort_signal: asyncio.Event | None = None) -> str | None:
        return await self._read(ReadKind.LINE, prompt, abort_signal)

    async def read_password(
        self, prompt: str, *, abort_signal: asyncio.Event | None = None
    ) -> str | None:
        return await self._read(ReadKind.PASSWORD, prompt, abort_signal)

    async def read_confirm(
        self,
        prompt: str,
        default_value: bool = False,
        *,
        abort_signal: asyncio.Event | None = None,
    ) -> bool | None:
        """Ask a yes/no question. Enter without an answer yields ``default_value``."""
        hint = "(Y/n)" if default_value else "(y/N)"
        return await self._read(
            ReadKind.CONFIRM, f"{prompt} {hint}: ", abort_signal, default_value=default_value
        )

    async def read_select(
        self,
        prompt: str,
        options: list[SelectOption],
        on_change: Callable[[str], None] | None = None,
        *,
        abort_signal: asyncio.Event | None = None,
    ) -> str | None:
        """Let the user pick one of ``options`` with Up/Down and Enter.

        Raises:
            ValueError: If ``options`` is empty.
        """
        if not options:
            raise ValueError("read_select requires at least one option")
        return await self._read(
            ReadKind.SELECT, prompt, abort_signal, options=list(options), on_change=on_change
        )

    async def read_number(
        self,
        prompt: str,
        minimum: float | None = None,
        maximum: float | None = None,
        default: float | None = None,
        *,
        abort_signal: asyncio.Event | None = None,
    ) -> float | None:
        """Read a number, re-prompting until the entry is valid and in range."""
        hints = []
        if minimum is not None and maximum is not None:
            hints.append(f"{minimum}-{maximum}")
        elif minimum is not None:
            hints.append(f">={minimum}")
        elif maximum is not None:
            hints.append(f"<={maximum}")
        if default is not None:
            hints.append(f"default: {default}")
        display = f"{prompt} ({', '.join(hints)}): " if hints else f"{prompt}: "
        return await self._read(
            ReadKind.NUMBER, display, abort_signal,
            minimum=minimum, maximum=maximum, default_value=default,
        )

    def cancel(self) -> bool:
        """Resolve the active read with None. Returns False if none was active."""
        if self._active is None:
            return False
        self._writer.write_line()
        self._resolve(None)
        if self.abort_signal is not None:
            self.abort_signal.set()
        return True

    def handle_key(self, action: KeyboardAction) -> bool:
        """Route a key event to the active read. Returns False if no read is active."""
        if self._active is None:
            return False
        if isinstance(action, KeyCombo):
            modifiers = {m.lower() for m in action.modifiers}
            if "ctrl" in modifiers and action.key.lower() == "c":
                self.cancel()
            return True
        if isinstance(action, TextInput):
            self._insert(self._active, action.text)
            return True
        if isinstance(action, Keystroke):
            self._on_key(self._active, action.key)
        return True

    def handle_data(self, data: str) -> bool:
        """Route raw terminal input (characters or escape sequences)."""
        if self._active is None:
            return False
        if data == "\x03":
            self.cancel()
        elif data in _SEQUENCE_KEYS:
            self._on_key(self._active, _SEQUENCE_KEYS[data])
        elif data.startswith("\x1b"):
            logger.debug("Ignoring escape sequence %r", data)
        else:
            self._insert(self._active, data)
        return True

    async def _read(
        self,
        kind: ReadKind,
        prompt: str,
        abort_signal: asyncio.Event | None,
        **fields: Any,
    ) -> Any:
        abort_signal = abort_signal or self.abort_signal
        if self._active is not None:
            raise RuntimeError("Another input request is already active")
        future = asyncio.get_running_loop().create_future()
        request = ActiveInputRequest(kind=kind, prompt=prompt, future=future, **fields)
        self._active = request
        self._render_prompt(request)

        if abort_signal is None:
            try:
                return await future
            finally:
                self._release(request)

        abort_waiter = asyncio.ensure_future(abort_signal.wait())
        try:
            await asyncio.wait({future, abort_waiter}, return_when=asyncio.FIRST_COMPLETED)
            if future.done():
                return future.result()
            self.cancel()
            return None
        finally:
            abort_waiter.cancel()
            self._release(request)

    def _release(self, request: ActiveInputRequest) -> None:
        if self._active is request:
            self._active = None
        if not request.future.done():
            request.future.cancel()

    def _resolve(self, value: Any) -> None:
        request, self._active = self._active, None
        if request is not None and not request.future.done():
            request.future.set_result(value)

    def _render_prompt(self, request: ActiveInputRequest) -> None:
        if request.kind == ReadKind.SELECT:
            self._writer.write_line(request.prompt)
            for option in request.options:
                self._writer.write_line(f"    {option.label}")
            self._redraw_selection(request)
            if request.on_change:
                request.on_change(request.options[0].value)
        else:
            self._writer.write(request.prompt)

    def _on_key(self, request: ActiveInputRequest, key: str) -> None:
        if key == "Escape":
            self.cancel()
            return
        if request.kind == ReadKind.SELECT:
            self._on_select_key(request, key)
            return

        if key in ("Enter", "Return"):
            self._commit(request)
        elif key == "Backspace":
            if request.kind == ReadKind.CONFIRM:
                request.buffer, request.cursor = "", 0
            elif request.cursor > 0:
                request.buffer = request.buffer[: request.cursor - 1] + request.buffer[request.cursor:]
                request.cursor -= 1
            self._redraw(request)
        elif key == "Delete" and request.kind != ReadKind.CONFIRM:
            request.buffer = request.buffer[: request.cursor] + request.buffer[request.cursor + 1:]
            self._redraw(request)
        elif key == "Left":
            request.cursor = max(0, request.cursor - 1)
            self._redraw(request)
        elif key == "Right":
            request.cursor = min(len(request.buffer), request.cursor + 1)
            self._redraw(request)
        elif key == "Home":
            request.cursor = 0
            self._redraw(request)
        elif key == "End":
            request.cursor = len(request.buffer)
            self._redraw(request)
        elif key == "Space":
            self._insert(request, " ")
        elif len(key) == 1:
            self._insert(request, key)

    def _on_select_key(self, request: ActiveInputRequest, key: str) -> None:
        if key in ("Enter", "Return"):
            self._writer.write_line()
            self._resolve(request.options[request.selected_index].value)
            return
        if key == "Up" and request.selected_index > 0:
            request.selected_index -= 1
        elif key == "Down" and request.selected_index < len(request.options) - 1:
            request.selected_index += 1
        else:
            return
        self._redraw_selection(request)
        if request.on_change:
            request.on_change(request.options[request.selected_index].value)

    def _insert(self, request: ActiveInputRequest, text: str) -> None:
        text = text.replace("\r", "").replace("\n", "")
        if not text or request.kind == ReadKind.SELECT:
            return
        if request.kind == ReadKind.CONFIRM:
            answer = text[0]
            if answer.lower() not in ("y", "n"):
                return
            request.buffer, request.cursor = answer, 1
        else:
            request.buffer = request.buffer[: request.cursor] + text + request.buffer[request.cursor:]
            request.cursor += len(text)
        self._redraw(request)

    def _commit(self, request: ActiveInputRequest) -> None:
        if request.kind == ReadKind.NUMBER:
            self._commit_number(request)
            return
        self._writer.write_line()
        if request.kind == ReadKind.CONFIRM:
            answer = request.buffer.lower()
            self._resolve(True if answer == "y" else False if answer == "n" else bool(request.default_value))
        else:
            self._resolve(request.buffer)

    def _commit_number(self, request: ActiveInputRequest) -> None:
        self._writer.write_line()
        text = request.buffer.strip()
        if not text and request.default_value is not None:
            self._resolve(request.default_value)
            return

        error = None
        value: float | None = None
        if not text:
            error = "Please enter a number."
        else:
            try:
                value = int(text) if text.lstrip("+-").isdigit() else float(text)
            except ValueError:
                error = "Invalid number."
            else:
                if value != value:
                    error = "Invalid number."
                elif request.minimum is not None and value < request.minimum:
                    error = f"Value must be at least {request.minimum}."
                elif request.maximum is not None and value > request.maximum:
                    error = f"Value must be at most {request.maximum}."

        if error is None:
            self._resolve(value)
            return
        self._writer.write_line(self._writer.wrap_in_color(error, ForegroundColor.RED))
        request.buffer, request.cursor = "", 0
        self._writer.write(request.prompt)

    def _display_text(self, request: ActiveInputRequest) -> str:
        if request.kind == ReadKind.PASSWORD:
            return "*" * len(request.buffer)
        return request.buffer

    def _redraw(self, request: ActiveInputRequest) -> None:
        text = _REDRAW + request.prompt + self._display_text(request)
        offset = len(request.buffer) - request.cursor
        if offset > 0:
            text += f"\x1b[{offset}D"
        self._writer.write(text)

    def _redraw_selection(self, request: ActiveInputRequest) -> None:
        label = request.options[request.selected_index].label
        self._writer.write(_REDRAW + self._writer.wrap_in_color(f"  > {label}", ForegroundColor.CYAN))
