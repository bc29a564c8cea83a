"""Tool input validation tests"""

from rosie.domain.tools import ToolInputSchema
from rosie.tools.validator import validate_tool_input

SCHEMA = ToolInputSchema(
    properties={
        "path": {"type": "string"},
        "offset": {"type": "number"},
        "recursive": {"type": "boolean"},
    },
    required=["path"],
)


def test_valid_input():
    result = validate_tool_input(SCHEMA, {"path": "a.txt", "offset": 3, "recursive": True})
    assert result.valid
    assert result.errors == []


def test_missing_required_field_is_named():
    result = validate_tool_input(SCHEMA, {"offset": 1})
    assert not result.valid
    assert result.errors == ["Missing required field: path"]


def test_wrong_type_names_field_and_types():
    result = validate_tool_input(SCHEMA, {"path": 42})
    assert not result.valid
    assert result.errors == ["Field 'path' expected string, got number"]


def test_bool_is_not_a_number():
    result = validate_tool_input(SCHEMA, {"path": "a", "offset": True})
    assert not result.valid
    assert "Field 'offset' expected number, got boolean" in result.errors


def test_float_is_a_number():
    assert validate_tool_input(SCHEMA, {"path": "a", "offset": 1.5}).valid


def test_extra_fields_are_tolerated():
    assert validate_tool_input(SCHEMA, {"path": "a", "unknown": object()}).valid


def test_every_error_is_reported():
    result = validate_tool_input(SCHEMA, {"offset": "x", "recursive": "yes"})
    assert len(result.errors) == 3
