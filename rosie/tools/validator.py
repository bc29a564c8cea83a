"""
Tool input validation against the tool's declared schema.

Checks required-field presence and, for ``string``/``number``/``boolean``
properties, the runtime type of supplied values. Extra fields are tolerated.
"""

from dataclasses import dataclass, field
from typing import Any

from rosie.domain.tools import ToolInputSchema

_JSON_TYPE_NAMES = {
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
    dict: "object",
    list: "array",
    type(None): "null",
}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def _type_name(value: Any) -> str:
    return _JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def _matches(expected: str, value: Any) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        # bool is an int subclass but never a JSON number
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    return True


def validate_tool_input(schema: ToolInputSchema, tool_input: dict[str, Any]) -> ValidationResult:
    """Validate ``tool_input`` against ``schema``; every error names its field."""
    errors: list[str] = []

    for name in schema.required:
        if tool_input.get(name) is None:
            errors.append(f"Missing required field: {name}")

    for key, value in tool_input.items():
        prop = schema.properties.get(key)
        if not prop or value is None:
            continue
        expected = prop.get("type")
        if isinstance(expected, str) and not _matches(expected, value):
            errors.append(f"Field '{key}' expected {expected}, got {_type_name(value)}")

    return ValidationResult(valid=not errors, errors=errors)


__all__ = ["ValidationResult", "validate_tool_input"]
