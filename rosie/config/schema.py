"""
Runtime configuration for one AgentLoop instance.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from rosie.config.settings import RosieSettings


class AgentConfig(BaseModel):
    """
    Agent loop configuration. Immutable for the lifetime of a loop.
    """

    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(default=8192, ge=1, description="Token cap per model call")
    max_turns_per_message: int = Field(
        default=25, ge=1, description="Hard ceiling on tool-use loops per user message"
    )
    tool_timeout_ms: int = Field(
        default=120_000, ge=1, description="Per-tool execution timeout (milliseconds)"
    )
    confirm_destructive: bool = Field(
        default=True, description="Gate confirmation-required tools behind approval"
    )
    context_window_tokens: int = Field(
        default=180_000, ge=1, description="Rough token budget for conversation history"
    )

    @classmethod
    def from_settings(cls, settings: "RosieSettings") -> "AgentConfig":
        return cls(
            max_tokens=settings.max_tokens,
            max_turns_per_message=settings.max_turns,
            tool_timeout_ms=settings.tool_timeout_ms,
            confirm_destructive=settings.confirm_destructive,
            context_window_tokens=settings.context_window_tokens,
        )


__all__ = ["AgentConfig"]
