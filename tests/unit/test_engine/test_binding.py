"""Tests for parameter coercion and binding."""

from __future__ import annotations

import math

import pytest

from termengine.domain.models import ParameterDescriptor, ParameterType, ProcessCommand
from termengine.engine.binding import bind_parameters, coerce
from termengine.engine.errors import InvalidParameterTypeError, MissingValueError
from termengine.engine.parser import CommandParser


def _param(kind: ParameterType, **kwargs) -> ParameterDescriptor:
    return ParameterDescriptor(name="p", type=kind, **kwargs)


def _command(**kwargs) -> ProcessCommand:
    return ProcessCommand(raw_command="cmd", command="cmd", **kwargs)


class TestCoerce:
    """Test conversion of raw flag values to declared types."""

    def test_integer(self) -> None:
        assert coerce(_param(ParameterType.INTEGER), "42") == 42
        assert coerce(_param(ParameterType.INTEGER), 3.0) == 3
        with pytest.raises(ValueError):
            coerce(_param(ParameterType.INTEGER), "4.5")
        with pytest.raises(ValueError):
            coerce(_param(ParameterType.INTEGER), True)

    def test_number(self) -> None:
        assert coerce(_param(ParameterType.NUMBER), "2.5") == 2.5
        assert coerce(_param(ParameterType.NUMBER), "7") == 7
        with pytest.raises(ValueError):
            coerce(_param(ParameterType.NUMBER), "abc")
        with pytest.raises(ValueError):
            coerce(_param(ParameterType.NUMBER), math.nan)

    def test_boolean(self) -> None:
        kind = ParameterType.BOOLEAN
        assert coerce(_param(kind), True) is True
        assert coerce(_param(kind), "yes") is True
        assert coerce(_param(kind), "Y") is True
        assert coerce(_param(kind), "0") is False
        assert coerce(_param(kind), "maybe") is False

    def test_string(self) -> None:
        assert coerce(_param(ParameterType.STRING), 5) == "5"
        with pytest.raises(ValueError):
            coerce(_param(ParameterType.STRING), True)

    def test_array_and_repeated_scalar(self) -> None:
        assert coerce(_param(ParameterType.ARRAY), "a") == ["a"]
        assert coerce(_param(ParameterType.ARRAY), ["a", "b"]) == ["a", "b"]
        assert coerce(_param(ParameterType.INTEGER), ["1", "2"]) == 2


class TestBindParameters:
    """Test binding a parsed command against a processor."""

    def test_binds_under_name_and_aliases(self, make_processor, count_parameter) -> None:
        processor = make_processor("greet", parameters=(count_parameter,))
        bound = bind_parameters(_command(args={"count": "3"}), processor)
        assert bound.args == {"count": 3, "c": 3}

    def test_parsed_line_binds_typed_values(self, registry, make_processor) -> None:
        processor = make_processor(
            "run",
            parameters=(
                ParameterDescriptor(name="count", type=ParameterType.NUMBER),
                ParameterDescriptor(name="force", type=ParameterType.BOOLEAN, default_value=True),
            ),
        )
        registry.register_processor(processor)
        command = CommandParser(registry).parse("run --count=5")
        assert command.args == {"count": "5"}
        assert bind_parameters(command, processor).args == {"count": 5, "force": True}

    def test_unrecognized_boolean_token_binds_false(self, make_processor) -> None:
        processor = make_processor(
            "run",
            parameters=(ParameterDescriptor(name="loud", type=ParameterType.BOOLEAN, default_value=True),),
        )
        assert bind_parameters(_command(args={"loud": "maybe"}), processor).args == {"loud": False}
        assert bind_parameters(_command(args={"loud": "yes"}), processor).args == {"loud": True}

    def test_default_applied(self, make_processor, count_parameter) -> None:
        processor = make_processor("greet", parameters=(count_parameter,))
        bound = bind_parameters(_command(), processor)
        assert bound.args == {"count": 1, "c": 1}

    def test_undeclared_flags_pass_through(self, make_processor) -> None:
        processor = make_processor("greet")
        bound = bind_parameters(_command(args={"x": 5}), processor)
        assert bound.args == {"x": 5}

    def test_original_command_is_unchanged(self, make_processor, count_parameter) -> None:
        processor = make_processor("greet", parameters=(count_parameter,))
        command = _command(args={"count": "3"})
        bind_parameters(command, processor)
        assert command.args == {"count": "3"}

    def test_missing_required(self, make_processor) -> None:
        processor = make_processor(
            "greet",
            parameters=(
                ParameterDescriptor(name="name", required=True),
                ParameterDescriptor(name="age", type=ParameterType.INTEGER, required=True),
            ),
        )
        with pytest.raises(InvalidParameterTypeError) as exc_info:
            bind_parameters(_command(), processor)
        assert str(exc_info.value) == "Missing required parameters: --name, --age"
        assert exc_info.value.parameter == "name"

    def test_invalid_required_raises(self, make_processor) -> None:
        processor = make_processor(
            "greet",
            parameters=(ParameterDescriptor(name="age", type=ParameterType.INTEGER, required=True),),
        )
        with pytest.raises(InvalidParameterTypeError) as exc_info:
            bind_parameters(_command(args={"age": "old"}), processor)
        assert exc_info.value.parameter == "age"
        assert exc_info.value.value == "old"

    def test_invalid_optional_falls_back_to_default(self, make_processor, count_parameter) -> None:
        processor = make_processor("greet", parameters=(count_parameter,))
        bound = bind_parameters(_command(args={"count": "many"}), processor)
        assert bound.args["count"] == 1

    def test_value_required(self, make_processor) -> None:
        processor = make_processor("sleep", value_required=True)
        with pytest.raises(MissingValueError) as exc_info:
            bind_parameters(_command(), processor)
        assert str(exc_info.value) == "Value required: cmd <value>"
        assert bind_parameters(_command(value="5"), processor).value == "5"

    def test_piped_data_satisfies_value_for_raw_input(self, make_processor) -> None:
        processor = make_processor("decode", value_required=True, accepts_raw_input=True)
        bound = bind_parameters(_command(data="a.b.c"), processor)
        assert bound.data == "a.b.c"

        strict = make_processor("sleep", value_required=True)
        with pytest.raises(MissingValueError):
            bind_parameters(_command(data="5"), strict)
