"""Shared test fixtures for the termengine test suite.

Provides common fixtures used across unit tests: persistence backends,
buffered output, a fully wired session and a factory for small inline
processors.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from termengine.domain.models import ParameterDescriptor, ParameterType, ProcessCommand
from termengine.engine.context import ExecutionContext
from termengine.engine.registry import ProcessorRegistry
from termengine.engine.session import EngineSession
from termengine.processors.base import ChildProcessor
from termengine.storage.memory import InMemoryKeyValueStore
from termengine.terminal.buffer import BufferedOutputSink
from termengine.terminal.writer import TerminalWriter


# ---------------------------------------------------------------------------
# Terminal / Storage Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    """A fresh in-memory persistence backend."""
    return InMemoryKeyValueStore()


@pytest.fixture
def sink() -> BufferedOutputSink:
    """A scrollback buffer to inspect command output."""
    return BufferedOutputSink()


@pytest.fixture
def writer(sink: BufferedOutputSink) -> TerminalWriter:
    return TerminalWriter(sink)


# ---------------------------------------------------------------------------
# Engine Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session(storage: InMemoryKeyValueStore, sink: BufferedOutputSink) -> EngineSession:
    """A session with the built-in processors and in-memory persistence."""
    return EngineSession(storage=storage, sink=sink)


@pytest.fixture
def registry() -> ProcessorRegistry:
    """An empty registry."""
    return ProcessorRegistry()


@pytest.fixture
def calls() -> list[ProcessCommand]:
    """Commands received by processors built with ``make_processor``."""
    return []


@pytest.fixture
def make_processor(calls: list[ProcessCommand]) -> Callable[..., ChildProcessor]:
    """Factory for processors that record the commands they receive.

    Keyword arguments are forwarded to :class:`ChildProcessor`; any other
    descriptor attribute (``metadata``, ``extends_processor``, ...) can be
    set on the returned instance.
    """

    def factory(command: str, output: Any = None, **kwargs: Any) -> ChildProcessor:
        async def handler(cmd: ProcessCommand, context: ExecutionContext) -> None:
            calls.append(cmd)
            if output is not None:
                context.process.output(output)

        return ChildProcessor(command, handler, **kwargs)

    return factory


@pytest.fixture
def count_parameter() -> ParameterDescriptor:
    return ParameterDescriptor(
        name="count", aliases=["c"], type=ParameterType.INTEGER, default_value=1
    )
