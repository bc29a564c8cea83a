"""
Tool set and security sandbox.
"""

from .base import BaseTool
from .registry import ToolRegistry, create_builtin_tools
from .sandbox import (
    MAX_READ_SIZE,
    SafeStat,
    Sandbox,
    configure_sandbox,
    get_sandbox,
    is_binary_file,
)
from .validator import ValidationResult, validate_tool_input

__all__ = [
    "BaseTool",
    "ToolRegistry",
    "create_builtin_tools",
    "MAX_READ_SIZE",
    "SafeStat",
    "Sandbox",
    "configure_sandbox",
    "get_sandbox",
    "is_binary_file",
    "ValidationResult",
    "validate_tool_input",
]
