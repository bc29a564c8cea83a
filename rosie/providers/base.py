"""
Provider abstraction layer - streaming model interface

Responsibilities:
- Encapsulate the wire protocols of different model vendors
- Normalize every stream into one ProviderEvent sequence
- Guarantee stream termination: at most one ``done`` or ``error``

Does NOT handle:
- Tool execution
- Conversation history
- Bus publishing
"""

from abc import ABC, abstractmethod
from contextlib import aclosing
from typing import Annotated, Any, AsyncIterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from rosie.domain.errors import (
    OperationAborted,
    ProviderError,
    ProviderErrorKind,
    classify_provider_error,
)
from rosie.domain.messages import ChatMessage, TokenUsage
from rosie.domain.tools import ToolDefinition
from rosie.runtime.control import AbortSignal, iterate_with_abort
from rosie.utils.logging import get_logger

logger = get_logger(__name__)


# ============================================================================
# ProviderEvent
# ============================================================================


class _ProviderEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextDelta(_ProviderEventBase):
    type: Literal["text_delta"] = "text_delta"
    text: str


class ToolCallStart(_ProviderEventBase):
    type: Literal["tool_call_start"] = "tool_call_start"
    id: str
    name: str


class ToolCallDelta(_ProviderEventBase):
    type: Literal["tool_call_delta"] = "tool_call_delta"
    id: str
    arguments_delta: str


class ToolCallEnd(_ProviderEventBase):
    type: Literal["tool_call_end"] = "tool_call_end"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class Done(_ProviderEventBase):
    type: Literal["done"] = "done"
    usage: TokenUsage = Field(default_factory=TokenUsage)


class ErrorEvent(_ProviderEventBase):
    type: Literal["error"] = "error"
    message: str
    kind: ProviderErrorKind = ProviderErrorKind.GENERIC
    status_code: int | None = None

    @classmethod
    def from_error(cls, error: ProviderError) -> "ErrorEvent":
        return cls(message=str(error), kind=error.kind, status_code=error.status_code)

    def to_error(self) -> ProviderError:
        return ProviderError(self.message, kind=self.kind, status_code=self.status_code)


ProviderEvent = Annotated[
    Union[TextDelta, ToolCallStart, ToolCallDelta, ToolCallEnd, Done, ErrorEvent],
    Field(discriminator="type"),
]

TERMINAL_EVENTS = (Done, ErrorEvent)


# ============================================================================
# Provider
# ============================================================================


class Provider(BaseModel, ABC):
    """
    Unified provider abstract base class.

    Subclasses implement ``_stream``; callers use ``stream_turn``, which
    enforces the termination contract and maps every failure (including
    cancellation) onto an ``error`` event.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    name: str = Field(description="Provider identifier (anthropic, openai, ...)")
    display_name: str = Field(default="", description="Human-readable vendor name")
    model_name: str = Field(description="Model identifier sent to the API")
    api_key: SecretStr | None = Field(default=None, exclude=True)
    base_url: str | None = Field(default=None)

    async def stream_turn(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition],
        system_prompt: str,
        max_tokens: int,
        abort_signal: AbortSignal | None = None,
    ) -> AsyncIterator[ProviderEvent]:
        """
        Stream one model turn.

        Args:
            messages: Full conversation history
            tools: Tool declarations offered to the model
            system_prompt: System preamble
            max_tokens: Output token cap
            abort_signal: Cancels the network operation promptly when fired

        Yields:
            Zero or more text/tool events, then exactly one Done or ErrorEvent
        """
        stream = self._stream(messages, tools, system_prompt, max_tokens, abort_signal)
        try:
            async with aclosing(stream), aclosing(
                iterate_with_abort(stream, abort_signal)
            ) as events:
                async for event in events:
                    yield event
                    if isinstance(event, TERMINAL_EVENTS):
                        return
        except OperationAborted:
            logger.info("provider_stream_cancelled", provider=self.name, model=self.model_name)
            yield ErrorEvent(message="Request cancelled.", kind=ProviderErrorKind.CANCELLED)
            return
        except Exception as e:
            error = classify_provider_error(e)
            logger.error(
                "provider_stream_failed",
                provider=self.name,
                model=self.model_name,
                error=str(e),
                error_type=type(e).__name__,
                kind=error.kind.value,
                exc_info=True,
            )
            yield ErrorEvent.from_error(error)
            return

        logger.warning("provider_stream_unterminated", provider=self.name, model=self.model_name)
        yield ErrorEvent(message=f"{self.label} stream ended without completing the turn")

    @property
    def label(self) -> str:
        return self.display_name or self.name

    def resolved_api_key(self) -> str | None:
        return self.api_key.get_secret_value() if self.api_key else None

    @abstractmethod
    def _stream(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition],
        system_prompt: str,
        max_tokens: int,
        abort_signal: AbortSignal | None,
    ) -> AsyncIterator[ProviderEvent]:
        """
        Vendor-specific streaming, implemented as an async generator.

        May raise; ``stream_turn`` classifies the exception.
        """

    async def aclose(self) -> None:
        """Release network clients held by the provider."""


__all__ = [
    "Provider",
    "ProviderEvent",
    "TextDelta",
    "ToolCallStart",
    "ToolCallDelta",
    "ToolCallEnd",
    "Done",
    "ErrorEvent",
    "TERMINAL_EVENTS",
]
