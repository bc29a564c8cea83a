"""
AgentLoop - conversation state machine

Responsibilities:
- Own the conversation history and the single pending-approval slot
- Drive the model <-> tool loop for one user message
- Publish every state change on the EventBus

Does NOT handle:
- Vendor wire protocols (Provider)
- Tool semantics (tools, via ToolExecutor)
- Presentation or persistence (bus subscribers)
"""

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Callable

from rosie.config.schema import AgentConfig
from rosie.domain import (
    AgentBusyError,
    ChatMessage,
    MaxTurnsExceededError,
    MessageRole,
    ProviderErrorKind,
    TextBlock,
    TokenUsage,
    ToolCall,
    ToolResultBlock,
    ToolUseBlock,
    friendly_provider_message,
)
from rosie.events import (
    AgentError,
    AgentErrorKind,
    AgentText,
    AgentTextDone,
    AgentThinking,
    AgentToolRequest,
    AgentTurnComplete,
    EventBus,
    EventType,
    SessionCleared,
    SessionContextTrimmed,
    ToolApprovalRequired,
    UserInput,
)
from rosie.runtime.approval import ApprovalGate
from rosie.runtime.context_window import trim_history
from rosie.runtime.control import AbortSignal
from rosie.runtime.tool_executor import ToolExecutor
from rosie.tools.base import BaseTool
from rosie.tools.registry import ToolRegistry
from rosie.utils.logging import get_logger

if TYPE_CHECKING:
    from rosie.providers.base import Provider

logger = get_logger(__name__)


SYSTEM_PROMPT = """You are Rosie, a coding assistant working inside the user's terminal.

You help with software engineering work in the current project: writing and
refactoring code, debugging, explaining how things fit together, running
tests and managing version control.

Working with tools:
- Read a file before changing it.
- Prefer the search tools over guessing paths.
- Make targeted edits instead of rewriting whole files.
- After a change, run the command that proves it works.
- Say what a destructive command will do before you run it.

While you work:
- Point out bugs or missing error handling you notice along the way.
- When a task is done, suggest the natural next step.

Communication:
- Be brief; terminal space is limited.
- Use markdown code blocks and cite file paths with line numbers.
- Say so when you are unsure."""


_AGENT_ERROR_KINDS = {
    ProviderErrorKind.CANCELLED: AgentErrorKind.CANCELLED,
    ProviderErrorKind.RATE_LIMITED: AgentErrorKind.RATE_LIMITED,
    ProviderErrorKind.AUTHENTICATION: AgentErrorKind.AUTHENTICATION,
    ProviderErrorKind.OVERLOADED: AgentErrorKind.OVERLOADED,
    ProviderErrorKind.GENERIC: AgentErrorKind.PROVIDER,
}


class LoopState(str, Enum):
    IDLE = "idle"
    CALLING_MODEL = "calling_model"
    PROCESSING_TOOLS = "processing_tools"
    WAITING_APPROVAL = "waiting_approval"
    ERROR = "error"


class AgentLoop:
    """
    Drives one conversation against one provider.

    The loop is single-threaded and cooperative: provider streaming, tool
    execution and approval waits are its only suspension points, and the tool
    calls of a turn run strictly one after another in the order requested.

    Examples:
        >>> bus = EventBus()
        >>> loop = AgentLoop(provider, create_builtin_tools(), bus)
        >>> await loop.process_message("What does main.py do?")
    """

    def __init__(
        self,
        provider: "Provider",
        tools: ToolRegistry | list[BaseTool],
        bus: EventBus,
        config: AgentConfig | None = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.provider = provider
        self.registry = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)
        self.bus = bus
        self.config = config or AgentConfig()
        self.system_prompt = system_prompt

        self._history: list[ChatMessage] = []
        self._usage = TokenUsage()
        self._state = LoopState.IDLE
        self._signal: AbortSignal | None = None
        self._lock = asyncio.Lock()
        self._approvals = ApprovalGate()
        self._executor = ToolExecutor(
            self.registry,
            bus,
            timeout_ms=self.config.tool_timeout_ms,
            confirm_destructive=self.config.confirm_destructive,
            request_approval=self._request_approval,
        )
        self._unsubscribers: list[Callable[[], None]] = [
            bus.subscribe(EventType.TOOL_APPROVED, lambda e: self._approvals.resolve(e.tool_id, True)),
            bus.subscribe(EventType.TOOL_DENIED, lambda e: self._approvals.resolve(e.tool_id, False)),
        ]

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def usage(self) -> TokenUsage:
        return self._usage.model_copy()

    @property
    def history_length(self) -> int:
        return len(self._history)

    @property
    def current_state(self) -> LoopState:
        return self._state

    @property
    def history(self) -> list[ChatMessage]:
        return list(self._history)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def process_message(self, text: str) -> None:
        """
        Handle one user message until the model stops requesting tools.

        A call made while the loop is not idle is rejected with a recoverable
        ``agent:error`` and leaves the history untouched.

        Raises:
            Exception: only for failures in the loop's own control flow; these
                are published as a non-recoverable ``agent:error`` first
        """
        if self._state != LoopState.IDLE:
            busy = AgentBusyError(self._state.value)
            logger.info("agent_busy", state=self._state.value)
            self.bus.publish(
                AgentError(message=str(busy), recoverable=True, error_kind=AgentErrorKind.BUSY)
            )
            return

        signal = AbortSignal()
        self._signal = signal
        self._state = LoopState.CALLING_MODEL
        self.bus.publish(UserInput(message=text))

        try:
            # A cancelled run may still be unwinding; never interleave history writes.
            async with self._lock:
                if signal.is_aborted():
                    return
                self._history.append(ChatMessage.user(text))
                self._trim_context()
                await self._run_turns(signal)
        except Exception as e:
            logger.error("agent_loop_failed", error=str(e), exc_info=True)
            self.bus.publish(
                AgentError(
                    message=f"Internal error: {e}",
                    recoverable=False,
                    error_kind=AgentErrorKind.INTERNAL,
                )
            )
            raise
        finally:
            if self._signal is signal:
                self._signal = None
                self._state = LoopState.IDLE

    def cancel(self) -> None:
        """Abort the in-flight turn, deny any pending approval, force idle. Safe when idle."""
        if self._signal is not None:
            logger.info("agent_cancel_requested", state=self._state.value)
            self._signal.abort("Request cancelled.")
        self._approvals.deny_pending()
        self._state = LoopState.IDLE

    def clear_history(self) -> None:
        self._history.clear()
        self._usage = TokenUsage()
        self._state = LoopState.IDLE
        self.bus.publish(SessionCleared())

    def dispose(self) -> None:
        """Cancel outstanding work and detach from the bus."""
        self.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    # ------------------------------------------------------------------
    # Turn loop
    # ------------------------------------------------------------------

    async def _run_turns(self, signal: AbortSignal) -> None:
        max_turns = self.config.max_turns_per_message

        for turn in range(max_turns):
            if signal.is_aborted():
                return

            logger.debug("agent_turn_started", turn=turn + 1, history_length=len(self._history))
            self._transition(signal, LoopState.CALLING_MODEL)
            outcome = await self._call_model(signal)
            if outcome is None:
                return

            text, tool_calls = outcome
            blocks: list = [TextBlock(text=text)] if text else []
            blocks.extend(ToolUseBlock(id=c.id, name=c.name, input=c.input) for c in tool_calls)
            if blocks:
                self._history.append(ChatMessage(role=MessageRole.ASSISTANT, content=blocks))

            if not tool_calls:
                return

            self._transition(signal, LoopState.PROCESSING_TOOLS)
            results: list[ToolResultBlock] = []
            for call in tool_calls:
                if signal.is_aborted():
                    result = self._executor.skip(call)
                else:
                    result = await self._executor.execute(call, abort_signal=signal)
                results.append(
                    ToolResultBlock(tool_call_id=call.id, content=result.content, is_error=result.is_error)
                )
            self._history.append(ChatMessage(role=MessageRole.USER, content=results))
        else:
            error = MaxTurnsExceededError(max_turns)
            logger.warning("agent_max_turns_exceeded", max_turns=max_turns)
            self.bus.publish(
                AgentError(message=str(error), recoverable=True, error_kind=AgentErrorKind.MAX_TURNS)
            )

    async def _call_model(self, signal: AbortSignal) -> tuple[str, list[ToolCall]] | None:
        """
        Stream one provider turn.

        Returns:
            Accumulated text and completed tool calls, or None when the turn
            ended in an error (already published)
        """
        self.bus.publish(AgentThinking())
        text_parts: list[str] = []
        tool_calls: list[ToolCall] = []
        turn_usage = TokenUsage()

        logger.info(
            "llm_request",
            provider=self.provider.name,
            model=self.provider.model_name,
            messages_count=len(self._history),
        )

        stream = self.provider.stream_turn(
            list(self._history),
            self.registry.definitions(),
            self.system_prompt,
            self.config.max_tokens,
            abort_signal=signal,
        )
        async for event in stream:
            if event.type == "text_delta":
                text_parts.append(event.text)
                self.bus.publish(AgentText(delta=event.text))
            elif event.type == "tool_call_end":
                call = ToolCall(id=event.id, name=event.name, input=event.input)
                tool_calls.append(call)
                self.bus.publish(AgentToolRequest(tool_id=call.id, tool_name=call.name, input=call.input))
            elif event.type == "done":
                turn_usage = event.usage
            elif event.type == "error":
                self._handle_provider_error(event.message, event.kind, signal)
                return None

        full_text = "".join(text_parts)
        if full_text:
            self.bus.publish(AgentTextDone(full_text=full_text))

        self._usage = TokenUsage(
            input_tokens=self._usage.input_tokens + turn_usage.input_tokens,
            output_tokens=self._usage.output_tokens + turn_usage.output_tokens,
        )
        self.bus.publish(AgentTurnComplete(usage=turn_usage))
        logger.info(
            "llm_response",
            tool_calls=len(tool_calls),
            input_tokens=turn_usage.input_tokens,
            output_tokens=turn_usage.output_tokens,
        )
        return full_text, tool_calls

    def _handle_provider_error(self, message: str, kind: ProviderErrorKind, signal: AbortSignal) -> None:
        if signal.is_aborted():
            kind = ProviderErrorKind.CANCELLED

        recoverable = kind != ProviderErrorKind.AUTHENTICATION
        if kind != ProviderErrorKind.CANCELLED:
            self._transition(signal, LoopState.ERROR)

        logger.warning("agent_provider_error", kind=kind.value, error=message)
        self.bus.publish(
            AgentError(
                message=friendly_provider_message(kind, message),
                recoverable=recoverable,
                error_kind=_AGENT_ERROR_KINDS[kind],
            )
        )

    # ------------------------------------------------------------------
    # Approval and housekeeping
    # ------------------------------------------------------------------

    async def _request_approval(self, tool_call: ToolCall) -> bool:
        signal = self._signal
        if signal is None or signal.is_aborted():
            return False

        pending = self._approvals.acquire(tool_call.id, tool_call.name, tool_call.input)
        self._transition(signal, LoopState.WAITING_APPROVAL)
        self.bus.publish(
            ToolApprovalRequired(tool_id=tool_call.id, tool_name=tool_call.name, input=tool_call.input)
        )
        try:
            return await self._approvals.wait(pending)
        finally:
            self._transition(signal, LoopState.PROCESSING_TOOLS)

    def _trim_context(self) -> None:
        removed = trim_history(self._history, self.config.context_window_tokens)
        if removed:
            logger.info("context_trimmed", removed_messages=removed, remaining=len(self._history))
            self.bus.publish(SessionContextTrimmed(removed_messages=removed))

    def _transition(self, signal: AbortSignal, state: LoopState) -> None:
        # A cancelled run keeps unwinding but no longer owns the state.
        if self._signal is signal and not signal.is_aborted():
            self._state = state


__all__ = ["AgentLoop", "LoopState", "SYSTEM_PROMPT"]
