"""
Rosie - terminal coding assistant core

Top-level exports for easy access to core functionality.
"""

__version__ = "0.1.0"

# Domain models
from rosie.domain import (
    ChatMessage,
    MessageRole,
    TokenUsage,
    ToolCall,
    ToolDefinition,
    ToolResult,
)

# Events
from rosie.events import EventBus, EventType

# Tools
from rosie.tools import BaseTool, Sandbox, ToolRegistry, configure_sandbox, create_builtin_tools

# Runtime
from rosie.runtime import AbortSignal, AgentLoop, LoopState

# Providers
from rosie.providers import Provider, ProviderConfig, create_provider

# Config
from rosie.config.schema import AgentConfig

__all__ = [
    "__version__",
    "ChatMessage",
    "MessageRole",
    "TokenUsage",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "EventBus",
    "EventType",
    "BaseTool",
    "Sandbox",
    "ToolRegistry",
    "configure_sandbox",
    "create_builtin_tools",
    "AbortSignal",
    "AgentLoop",
    "LoopState",
    "Provider",
    "ProviderConfig",
    "create_provider",
    "AgentConfig",
]
