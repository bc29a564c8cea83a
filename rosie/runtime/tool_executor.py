"""
Tool executor: validation, approval, timeout and completion reporting for a
single tool call.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable

from rosie.domain import (
    ApprovalDeniedError,
    ToolCall,
    ToolResult,
    ToolTimeoutError,
    ToolValidationError,
)
from rosie.events import EventBus, ToolComplete, ToolExecuting
from rosie.runtime.control import AbortSignal
from rosie.tools.registry import ToolRegistry
from rosie.tools.validator import validate_tool_input
from rosie.utils.logging import get_logger

logger = get_logger(__name__)

ApprovalCallback = Callable[[ToolCall], Awaitable[bool]]

DENIED_MESSAGE = "Tool execution denied by user."
CANCELLED_MESSAGE = "Tool execution cancelled."

# Covers bash's SIGTERM grace plus draining its output.
DEFAULT_STOP_GRACE_SECONDS = 15.0


class ToolExecutor:
    """
    Runs one tool call at a time and reports its outcome on the bus.

    Every call ends with exactly one ``tool:complete`` event, whatever the
    outcome.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        bus: EventBus,
        *,
        timeout_ms: int,
        confirm_destructive: bool = True,
        request_approval: ApprovalCallback | None = None,
        stop_grace_seconds: float = DEFAULT_STOP_GRACE_SECONDS,
    ):
        self.registry = registry
        self.bus = bus
        self.timeout_ms = timeout_ms
        self.stop_grace_seconds = stop_grace_seconds
        self.confirm_destructive = confirm_destructive
        self.request_approval = request_approval

    async def execute(
        self,
        tool_call: ToolCall,
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """
        Execute a single tool call.

        Args:
            tool_call: Completed tool call from the model
            abort_signal: Forwarded to the tool, which stops cooperatively

        Returns:
            ToolResult: never raises for tool-level failures
        """
        tool = self.registry.get(tool_call.name)
        if tool is None:
            return self._complete(tool_call, ToolResult.error(f"Unknown tool: {tool_call.name}"))

        validation = validate_tool_input(tool.get_input_schema(), tool_call.input)
        if not validation.valid:
            error = ToolValidationError(tool_call.name, validation.errors)
            logger.info("tool_input_invalid", tool_name=tool_call.name, errors=validation.errors)
            return self._complete(tool_call, ToolResult.error(str(error)))

        if self.confirm_destructive and tool.requires_confirmation():
            approved = await self._approve(tool_call)
            if not approved:
                logger.info("tool_denied", tool_name=tool_call.name, tool_call_id=tool_call.id)
                denied = ApprovalDeniedError(tool_call.name)
                return self._complete(tool_call, ToolResult.error(str(denied)))

        self.bus.publish(ToolExecuting(tool_id=tool_call.id, tool_name=tool_call.name))
        start_time = time.monotonic()

        call_signal = abort_signal.child() if abort_signal is not None else AbortSignal()
        logger.debug("executing_tool", tool_name=tool_call.name, tool_call_id=tool_call.id)
        work = asyncio.ensure_future(tool.execute(dict(tool_call.input), abort_signal=call_signal))
        try:
            result = await asyncio.wait_for(asyncio.shield(work), timeout=self.timeout_ms / 1000)
        except asyncio.TimeoutError:
            error = ToolTimeoutError(tool_call.name, self.timeout_ms)
            logger.warning("tool_execution_timeout", tool_name=tool_call.name, timeout_ms=self.timeout_ms)
            await self._wind_down(tool_call, work, call_signal, str(error))
            result = ToolResult.error(str(error))
        except asyncio.CancelledError:
            work.cancel()
            raise
        except Exception as e:
            logger.error(
                "tool_execution_exception",
                tool_name=tool_call.name,
                error=str(e),
                exc_info=True,
            )
            result = ToolResult.error(f"Tool error: {e}")

        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.debug(
            "tool_execution_completed",
            tool_name=tool_call.name,
            is_error=result.is_error,
            duration_ms=duration_ms,
        )
        return self._complete(tool_call, result, duration_ms)

    async def _wind_down(
        self,
        tool_call: ToolCall,
        work: asyncio.Future,
        call_signal: AbortSignal,
        reason: str,
    ) -> None:
        """
        Abort a timed-out tool and give it stop_grace_seconds to clean up
        (a bash command gets SIGTERM before SIGKILL). A tool that ignores the
        signal is cancelled once the grace period runs out.
        """
        call_signal.abort(reason)
        try:
            done, _ = await asyncio.wait({work}, timeout=self.stop_grace_seconds)
        except asyncio.CancelledError:
            work.cancel()
            raise

        if not done:
            logger.warning(
                "tool_ignored_abort",
                tool_name=tool_call.name,
                grace_seconds=self.stop_grace_seconds,
            )
            work.cancel()
            await asyncio.gather(work, return_exceptions=True)
        elif not work.cancelled() and work.exception() is not None:
            logger.debug("tool_failed_after_timeout", tool_name=tool_call.name, error=str(work.exception()))

    async def _approve(self, tool_call: ToolCall) -> bool:
        if self.request_approval is None:
            return True
        return await self.request_approval(tool_call)

    def _complete(self, tool_call: ToolCall, result: ToolResult, duration_ms: int = 0) -> ToolResult:
        self.bus.publish(
            ToolComplete(
                tool_id=tool_call.id,
                tool_name=tool_call.name,
                content=result.content,
                is_error=result.is_error,
                duration_ms=duration_ms,
            )
        )
        return result

    def skip(self, tool_call: ToolCall) -> ToolResult:
        """Report a call that was never started because the turn was cancelled."""
        return self._complete(tool_call, ToolResult.error(CANCELLED_MESSAGE))


def describe_input(tool_input: dict[str, Any]) -> str:
    """One-line summary of tool input for logs and prompts."""
    parts = [f"{key}={value!r}" for key, value in tool_input.items()]
    summary = ", ".join(parts)
    return summary if len(summary) <= 200 else summary[:197] + "..."


__all__ = ["ToolExecutor", "ApprovalCallback", "DENIED_MESSAGE", "CANCELLED_MESSAGE", "describe_input"]
