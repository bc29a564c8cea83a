"""
Domain models for Rosie.

- messages: ChatMessage and ContentBlock variants
- tools: ToolDefinition, ToolResult, ToolCall
- errors: the exception taxonomy
"""

from .errors import (
    AgentBusyError,
    ApprovalDeniedError,
    MalformedStreamChunk,
    MaxTurnsExceededError,
    OperationAborted,
    PathTraversalError,
    ProviderError,
    ProviderErrorKind,
    RosieError,
    SandboxError,
    ToolTimeoutError,
    ToolValidationError,
    classify_provider_error,
    error_kind_for,
    friendly_provider_message,
)
from .messages import (
    ChatMessage,
    ContentBlock,
    MessageRole,
    TextBlock,
    TokenUsage,
    ToolResultBlock,
    ToolUseBlock,
)
from .tools import ToolCall, ToolDefinition, ToolInputSchema, ToolResult

__all__ = [
    # Messages
    "ChatMessage",
    "ContentBlock",
    "MessageRole",
    "TextBlock",
    "TokenUsage",
    "ToolResultBlock",
    "ToolUseBlock",
    # Tools
    "ToolCall",
    "ToolDefinition",
    "ToolInputSchema",
    "ToolResult",
    # Errors
    "AgentBusyError",
    "MalformedStreamChunk",
    "MaxTurnsExceededError",
    "OperationAborted",
    "PathTraversalError",
    "ProviderError",
    "ProviderErrorKind",
    "RosieError",
    "SandboxError",
    "ToolTimeoutError",
    "ApprovalDeniedError",
    "ToolValidationError",
    "classify_provider_error",
    "error_kind_for",
    "friendly_provider_message",
]
