"""
Tool Registry - the tool set offered to the model.

Names are unique across the registry; lookup of an unknown name returns None
so the caller can turn it into a tool-error result.
"""

from typing import Iterator

from rosie.domain.tools import ToolDefinition
from rosie.tools.base import BaseTool
from rosie.tools.sandbox import Sandbox
from rosie.utils.logging import get_logger

logger = get_logger(__name__)


class ToolRegistry:
    """Name-indexed collection of tool instances."""

    def __init__(self, tools: list[BaseTool] | None = None) -> None:
        self._tools: dict[str, BaseTool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: BaseTool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        logger.debug("tool_registered", tool_name=tool.name)

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.get_definition() for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


def create_builtin_tools(sandbox: Sandbox | None = None) -> ToolRegistry:
    """The seven built-in tools, bound to ``sandbox`` (default: process-wide)."""
    from rosie.tools.builtin import (
        BashTool,
        FileEditTool,
        FileReadTool,
        FileWriteTool,
        GlobTool,
        GrepTool,
        LSTool,
    )

    return ToolRegistry(
        [
            FileReadTool(sandbox=sandbox),
            FileWriteTool(sandbox=sandbox),
            FileEditTool(sandbox=sandbox),
            BashTool(sandbox=sandbox),
            GrepTool(sandbox=sandbox),
            GlobTool(sandbox=sandbox),
            LSTool(sandbox=sandbox),
        ]
    )


__all__ = ["ToolRegistry", "create_builtin_tools"]
