"""Tool-facing data model."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ToolInputSchema(BaseModel):
    """JSON-schema-shaped input contract: object with typed properties."""

    type: Literal["object"] = "object"
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class ToolDefinition(BaseModel):
    """Tool definition sent to the model."""

    name: str
    description: str
    input_schema: ToolInputSchema


class ToolResult(BaseModel):
    """Result of a tool execution. Never mutated after return."""

    model_config = ConfigDict(frozen=True)

    content: str
    is_error: bool = False

    @classmethod
    def error(cls, content: str) -> "ToolResult":
        return cls(content=content, is_error=True)


class ToolCall(BaseModel):
    """A completed tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


__all__ = ["ToolInputSchema", "ToolDefinition", "ToolResult", "ToolCall"]
