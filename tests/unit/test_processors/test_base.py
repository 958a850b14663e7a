"""Tests for the processor base classes and plugin packages."""

from __future__ import annotations

import pytest

from termengine.domain.models import ParameterDescriptor, ParameterType, ProcessorMetadata
from termengine.engine.context import ExecutionContext
from termengine.engine.errors import VersionIncompatibleError
from termengine.engine.packages import PackageError
from termengine.engine.registry import ProcessorRegistry
from termengine.engine.session import EngineSession
from termengine.processors.builtin import EchoProcessor, default_processors
from termengine.terminal.buffer import BufferedOutputSink
from termengine.terminal.writer import TerminalWriter


class TestCommandProcessor:
    """Test descriptor helpers and the default description."""

    def test_find_parameter(self, make_processor, count_parameter) -> None:
        processor = make_processor("greet", parameters=(count_parameter,))
        assert processor.find_parameter("c") is count_parameter
        assert processor.find_parameter("count") is count_parameter
        assert processor.find_parameter("x") is None

    def test_store_name_defaults_to_command(self, make_processor) -> None:
        assert make_processor("notes").store_name == "notes"

    def test_write_description(
        self,
        make_processor,
        registry: ProcessorRegistry,
        writer: TerminalWriter,
        sink: BufferedOutputSink,
    ) -> None:
        processor = make_processor(
            "greet",
            description="Greets someone",
            value_required=True,
            parameters=(
                ParameterDescriptor(
                    name="count", aliases=["c"], type=ParameterType.INTEGER,
                    description="Repetitions", default_value=1,
                ),
                ParameterDescriptor(name="loud", type=ParameterType.BOOLEAN, required=True),
            ),
            processors=[make_processor("twice", aliases=("2",), description="Greet twice")],
        )
        registry.register_processor(processor)
        processor.write_description(ExecutionContext(session=None, writer=writer, registry=registry))

        assert sink.lines[:4] == [
            "Greets someone",
            "",
            "Usage:",
            "  greet [subcommand] [options] <value>",
        ]
        assert "Subcommands:" in sink.lines
        assert any(line.startswith("  twice (2)") and line.endswith("Greet twice") for line in sink.lines)
        assert any(
            line.startswith("  --count, -c <integer>") and line.endswith("Repetitions [default: 1]")
            for line in sink.lines
        )
        assert any(line.startswith("  --loud") and line.endswith("(required)") for line in sink.lines)

    def test_custom_describe(self, make_processor, writer: TerminalWriter, sink: BufferedOutputSink) -> None:
        processor = make_processor("x", describe=lambda ctx: ctx.writer.write_line("custom"))
        processor.write_description(ExecutionContext(session=None, writer=writer))
        assert sink.lines == ["custom"]

    def test_default_processors_are_fresh(self) -> None:
        first, second = default_processors(), default_processors()
        assert [p.command for p in first] == [p.command for p in second]
        assert all(a is not b for a, b in zip(first, second))


class TestPackageManager:
    """Test installing and removing plugin packages."""

    @pytest.mark.asyncio
    async def test_install_and_uninstall(
        self, session: EngineSession, make_processor, sink: BufferedOutputSink
    ) -> None:
        info = await session.packages.install("demo", [make_processor("hello", output="hi")], "0.2.0")
        assert info.commands == ["hello"]

        result = await session.handle_line("hello")
        assert result.output == "hi"

        result = await session.handle_line("packages")
        assert result.output == [{"name": "demo", "version": "0.2.0", "commands": ["hello"]}]
        assert "demo  0.2.0    hello" in sink.lines

        await session.packages.uninstall("demo")
        assert session.registry.find_processor("hello") is None
        assert await session.packages.get_packages() == []

    @pytest.mark.asyncio
    async def test_packages_persisted(self, session: EngineSession, storage, make_processor) -> None:
        await session.packages.install("demo", [make_processor("hello")])
        assert await storage.get("cli-installed-packages") == [
            {"name": "demo", "version": "1.0.0", "commands": ["hello"]}
        ]

    @pytest.mark.asyncio
    async def test_duplicate_package(self, session: EngineSession, make_processor) -> None:
        await session.packages.install("demo", [make_processor("hello")])
        with pytest.raises(PackageError, match='Package with name "demo" already exists.'):
            await session.packages.install("demo", [make_processor("other")])

    @pytest.mark.asyncio
    async def test_uninstall_unknown(self, session: EngineSession) -> None:
        with pytest.raises(PackageError):
            await session.packages.uninstall("nope")

    @pytest.mark.asyncio
    async def test_incompatible_package_rolls_back(
        self, session: EngineSession, make_processor
    ) -> None:
        modern = make_processor("modern")
        modern.metadata = ProcessorMetadata(required_core_version="^9.0.0")
        with pytest.raises(VersionIncompatibleError):
            await session.packages.install("mixed", [make_processor("fine"), modern])
        assert session.registry.find_processor("fine") is None
        assert await session.packages.get_packages() == []

    @pytest.mark.asyncio
    async def test_rejected_package_keeps_displaced_builtin(
        self, session: EngineSession, make_processor
    ) -> None:
        builtin = session.registry.find_processor("echo")
        needy = make_processor("needy")
        needy.metadata = ProcessorMetadata(required_core_version=">=99")
        with pytest.raises(VersionIncompatibleError):
            await session.packages.install("pkg", [make_processor("echo", output="fake"), needy])
        assert session.registry.find_processor("echo") is builtin
        assert isinstance(builtin, EchoProcessor)

        result = await session.handle_line("echo real")
        assert result.output == "real"

    @pytest.mark.asyncio
    async def test_sealed_builtin_not_replaced(self, session: EngineSession, make_processor) -> None:
        info = await session.packages.install("evil", [make_processor("sleep")])
        assert info.commands == []
        assert session.registry.find_processor("sleep").is_sealed
