"""
Event catalog for the Rosie event bus.

The catalog is a closed set: every variant is a frozen pydantic model with a
``Literal`` type tag, and ``Event`` is the discriminated union of all of them.
Every event carries a ``timestamp`` (epoch seconds).
"""

import time
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from rosie.domain.messages import TokenUsage


class EventType(str, Enum):
    """Event tags, grouped by lifecycle."""

    # User
    USER_INPUT = "user:input"

    # Agent lifecycle
    AGENT_THINKING = "agent:thinking"
    AGENT_TEXT = "agent:text"
    AGENT_TEXT_DONE = "agent:text:done"
    AGENT_TOOL_REQUEST = "agent:tool_request"
    AGENT_TURN_COMPLETE = "agent:turn_complete"
    AGENT_ERROR = "agent:error"

    # Tool lifecycle
    TOOL_APPROVAL_REQUIRED = "tool:approval_required"
    TOOL_APPROVED = "tool:approved"
    TOOL_DENIED = "tool:denied"
    TOOL_EXECUTING = "tool:executing"
    TOOL_COMPLETE = "tool:complete"

    # Session lifecycle
    SESSION_STARTED = "session:started"
    SESSION_CLEARED = "session:cleared"
    SESSION_CONTEXT_TRIMMED = "session:context_trimmed"

    # System
    SYSTEM_ERROR = "system:error"
    SYSTEM_SHUTDOWN = "system:shutdown"


class AgentErrorKind(str, Enum):
    """Why an agent:error was published."""

    BUSY = "busy"
    CANCELLED = "cancelled"
    RATE_LIMITED = "rate_limited"
    AUTHENTICATION = "authentication"
    OVERLOADED = "overloaded"
    PROVIDER = "provider"
    MAX_TURNS = "max_turns"
    INTERNAL = "internal"


class BaseEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: float = Field(default_factory=time.time)


class UserInput(BaseEvent):
    type: Literal[EventType.USER_INPUT] = EventType.USER_INPUT
    message: str


class AgentThinking(BaseEvent):
    type: Literal[EventType.AGENT_THINKING] = EventType.AGENT_THINKING


class AgentText(BaseEvent):
    type: Literal[EventType.AGENT_TEXT] = EventType.AGENT_TEXT
    delta: str


class AgentTextDone(BaseEvent):
    type: Literal[EventType.AGENT_TEXT_DONE] = EventType.AGENT_TEXT_DONE
    full_text: str


class AgentToolRequest(BaseEvent):
    type: Literal[EventType.AGENT_TOOL_REQUEST] = EventType.AGENT_TOOL_REQUEST
    tool_id: str
    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)


class AgentTurnComplete(BaseEvent):
    type: Literal[EventType.AGENT_TURN_COMPLETE] = EventType.AGENT_TURN_COMPLETE
    usage: TokenUsage = Field(default_factory=TokenUsage)


class AgentError(BaseEvent):
    type: Literal[EventType.AGENT_ERROR] = EventType.AGENT_ERROR
    message: str
    recoverable: bool = True
    error_kind: AgentErrorKind = AgentErrorKind.INTERNAL


class ToolApprovalRequired(BaseEvent):
    type: Literal[EventType.TOOL_APPROVAL_REQUIRED] = EventType.TOOL_APPROVAL_REQUIRED
    tool_id: str
    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolApproved(BaseEvent):
    type: Literal[EventType.TOOL_APPROVED] = EventType.TOOL_APPROVED
    tool_id: str


class ToolDenied(BaseEvent):
    type: Literal[EventType.TOOL_DENIED] = EventType.TOOL_DENIED
    tool_id: str


class ToolExecuting(BaseEvent):
    type: Literal[EventType.TOOL_EXECUTING] = EventType.TOOL_EXECUTING
    tool_id: str
    tool_name: str


class ToolComplete(BaseEvent):
    type: Literal[EventType.TOOL_COMPLETE] = EventType.TOOL_COMPLETE
    tool_id: str
    tool_name: str = ""
    content: str
    is_error: bool = False
    duration_ms: int = 0


class SessionStarted(BaseEvent):
    type: Literal[EventType.SESSION_STARTED] = EventType.SESSION_STARTED
    session_id: str
    cwd: str = ""


class SessionCleared(BaseEvent):
    type: Literal[EventType.SESSION_CLEARED] = EventType.SESSION_CLEARED


class SessionContextTrimmed(BaseEvent):
    type: Literal[EventType.SESSION_CONTEXT_TRIMMED] = EventType.SESSION_CONTEXT_TRIMMED
    removed_messages: int


class SystemError(BaseEvent):
    type: Literal[EventType.SYSTEM_ERROR] = EventType.SYSTEM_ERROR
    message: str
    fatal: bool = False
    source_event: EventType | None = None


class SystemShutdown(BaseEvent):
    type: Literal[EventType.SYSTEM_SHUTDOWN] = EventType.SYSTEM_SHUTDOWN
    reason: str


Event = Annotated[
    Union[
        UserInput,
        AgentThinking,
        AgentText,
        AgentTextDone,
        AgentToolRequest,
        AgentTurnComplete,
        AgentError,
        ToolApprovalRequired,
        ToolApproved,
        ToolDenied,
        ToolExecuting,
        ToolComplete,
        SessionStarted,
        SessionCleared,
        SessionContextTrimmed,
        SystemError,
        SystemShutdown,
    ],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter = TypeAdapter(Event)


def parse_event(data: dict[str, Any]) -> BaseEvent:
    """Rebuild a typed event from its JSON form (e.g. a session log line)."""
    return _event_adapter.validate_python(data)


__all__ = [
    "EventType",
    "AgentErrorKind",
    "BaseEvent",
    "Event",
    "UserInput",
    "AgentThinking",
    "AgentText",
    "AgentTextDone",
    "AgentToolRequest",
    "AgentTurnComplete",
    "AgentError",
    "ToolApprovalRequired",
    "ToolApproved",
    "ToolDenied",
    "ToolExecuting",
    "ToolComplete",
    "SessionStarted",
    "SessionCleared",
    "SessionContextTrimmed",
    "SystemError",
    "SystemShutdown",
    "parse_event",
]
