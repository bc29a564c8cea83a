"""
Conversation data model.

A ChatMessage's content is either plain text or an ordered list of
ContentBlocks. The block union is closed and discriminated by ``type``.
"""

import json
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Message role"""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class TextBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    tool_call_id: str
    content: str
    is_error: bool = False


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]


class ChatMessage(BaseModel):
    """A message in the conversation history."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str | list[ContentBlock]
    tool_call_id: str | None = None

    @classmethod
    def user(cls, text: str) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=text)

    def blocks(self) -> list[ContentBlock]:
        """Content as a block list; plain text becomes a single TextBlock."""
        if isinstance(self.content, str):
            return [TextBlock(text=self.content)]
        return list(self.content)

    def tool_uses(self) -> list[ToolUseBlock]:
        if isinstance(self.content, str):
            return []
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    def tool_results(self) -> list[ToolResultBlock]:
        if isinstance(self.content, str):
            return []
        return [block for block in self.content if isinstance(block, ToolResultBlock)]

    def is_tool_result_wrapper(self) -> bool:
        return self.role == MessageRole.USER and bool(self.tool_results())

    def estimate_tokens(self) -> int:
        """Coarse token proxy: serialized size divided by four, rounded up."""
        if isinstance(self.content, str):
            size = len(self.content)
        else:
            size = len(
                json.dumps([block.model_dump(mode="json") for block in self.content])
            )
        return -(-size // 4)


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


__all__ = [
    "MessageRole",
    "TextBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "ContentBlock",
    "ChatMessage",
    "TokenUsage",
]
