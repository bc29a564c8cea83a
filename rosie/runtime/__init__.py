"""
Runtime module - agent execution infrastructure.

This module contains:
- AgentLoop: the conversation state machine
- ToolExecutor: validation, approval and timeout around a single tool call
- ApprovalGate: the single pending-approval slot
- AbortSignal: cooperative cancellation
"""

from rosie.runtime.agent_loop import SYSTEM_PROMPT, AgentLoop, LoopState
from rosie.runtime.approval import ApprovalGate, PendingApproval
from rosie.runtime.context_window import estimate_history_tokens, trim_history
from rosie.runtime.control import AbortSignal, iterate_with_abort, race_abort
from rosie.runtime.tool_executor import ToolExecutor

__all__ = [
    "AgentLoop",
    "LoopState",
    "SYSTEM_PROMPT",
    "ApprovalGate",
    "PendingApproval",
    "ToolExecutor",
    "AbortSignal",
    "race_abort",
    "iterate_with_abort",
    "trim_history",
    "estimate_history_tokens",
]
