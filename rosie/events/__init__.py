"""
Event bus and event catalog.

The bus is the sole channel through which the agent loop reports progress;
presentation and persistence are pure subscribers.
"""

from .bus import DEFAULT_MAX_HISTORY, EventBus, EventHandler
from .events import (
    AgentError,
    AgentErrorKind,
    AgentText,
    AgentTextDone,
    AgentThinking,
    AgentToolRequest,
    AgentTurnComplete,
    BaseEvent,
    Event,
    EventType,
    SessionCleared,
    SessionContextTrimmed,
    SessionStarted,
    SystemError,
    SystemShutdown,
    ToolApprovalRequired,
    ToolApproved,
    ToolComplete,
    ToolDenied,
    ToolExecuting,
    UserInput,
    parse_event,
)

__all__ = [
    "DEFAULT_MAX_HISTORY",
    "EventBus",
    "EventHandler",
    "AgentError",
    "AgentErrorKind",
    "AgentText",
    "AgentTextDone",
    "AgentThinking",
    "AgentToolRequest",
    "AgentTurnComplete",
    "BaseEvent",
    "Event",
    "EventType",
    "SessionCleared",
    "SessionContextTrimmed",
    "SessionStarted",
    "SystemError",
    "SystemShutdown",
    "ToolApprovalRequired",
    "ToolApproved",
    "ToolComplete",
    "ToolDenied",
    "ToolExecuting",
    "UserInput",
    "parse_event",
]
