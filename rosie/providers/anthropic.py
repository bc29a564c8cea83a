"""
Anthropic provider - native streaming through the Anthropic SDK.
"""

import json
from typing import Any, AsyncIterator

from anthropic import APIConnectionError, APITimeoutError, AsyncAnthropic
from pydantic import ConfigDict, Field, PrivateAttr

from rosie.domain.messages import (
    ChatMessage,
    MessageRole,
    TextBlock,
    TokenUsage,
    ToolResultBlock,
    ToolUseBlock,
)
from rosie.domain.tools import ToolDefinition
from rosie.providers.base import (
    Done,
    Provider,
    ProviderEvent,
    TextDelta,
    ToolCallDelta,
    ToolCallEnd,
    ToolCallStart,
)
from rosie.runtime.control import AbortSignal
from rosie.utils.logging import get_logger
from rosie.utils.retry import retry_async

logger = get_logger(__name__)

# Retried only while opening the stream
ANTHROPIC_RETRYABLE = (
    APIConnectionError,
    APITimeoutError,
)


class AnthropicProvider(Provider):
    """
    Anthropic Claude provider.

    Text deltas, tool_use blocks and their partial JSON input map one-to-one
    onto ProviderEvents.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    name: str = "anthropic"
    display_name: str = "Anthropic (Claude)"
    client: AsyncAnthropic | None = Field(default=None, exclude=True)
    connect_attempts: int = Field(default=3, ge=1)

    _owns_client: bool = PrivateAttr(default=False)

    def model_post_init(self, __context) -> None:
        """Initialize AsyncAnthropic client after model creation."""
        if self.client is None:
            client_kwargs: dict[str, Any] = {"api_key": self.resolved_api_key()}
            if self.base_url:
                client_kwargs["base_url"] = self.base_url
            self.client = AsyncAnthropic(**client_kwargs)
            self._owns_client = True

        logger.info("anthropic_provider_initialized", model_name=self.model_name)

    async def aclose(self) -> None:
        if self._owns_client and self.client is not None:
            await self.client.close()

    @staticmethod
    def convert_messages(messages: list[ChatMessage]) -> list[dict[str, Any]]:
        """Convert history to Anthropic format; system messages travel separately."""
        result: list[dict[str, Any]] = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                continue
            role = "assistant" if msg.role == MessageRole.ASSISTANT else "user"

            if isinstance(msg.content, str):
                if msg.role == MessageRole.TOOL and msg.tool_call_id:
                    content: Any = [
                        {
                            "type": "tool_result",
                            "tool_use_id": msg.tool_call_id,
                            "content": msg.content,
                        }
                    ]
                else:
                    content = msg.content
                result.append({"role": role, "content": content})
                continue

            blocks: list[dict[str, Any]] = []
            for block in msg.content:
                if isinstance(block, TextBlock):
                    blocks.append({"type": "text", "text": block.text})
                elif isinstance(block, ToolUseBlock):
                    blocks.append(
                        {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
                    )
                elif isinstance(block, ToolResultBlock):
                    blocks.append(
                        {
                            "type": "tool_result",
                            "tool_use_id": block.tool_call_id,
                            "content": block.content,
                            "is_error": block.is_error,
                        }
                    )
            result.append({"role": role, "content": blocks})
        return result

    @staticmethod
    def convert_tools(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
        return [
            {
                "name": t.name,
                "description": t.description,
                "input_schema": t.input_schema.model_dump(),
            }
            for t in tools
        ]

    async def _stream(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition],
        system_prompt: str,
        max_tokens: int,
        abort_signal: AbortSignal | None,
    ) -> AsyncIterator[ProviderEvent]:
        params: dict[str, Any] = {
            "model": self.model_name,
            "max_tokens": max_tokens,
            "messages": self.convert_messages(messages),
            "stream": True,
        }
        if system_prompt:
            params["system"] = system_prompt
        if tools:
            params["tools"] = self.convert_tools(tools)

        logger.info(
            "llm_request",
            provider=self.name,
            model=self.model_name,
            messages_count=len(params["messages"]),
            tools_count=len(tools),
            max_tokens=max_tokens,
        )

        stream = None
        async for attempt in retry_async(
            max_attempts=self.connect_attempts, exceptions=ANTHROPIC_RETRYABLE
        ):
            with attempt:
                stream = await self.client.messages.create(**params)

        # Track tool_use blocks being built during streaming, keyed by block index
        tool_calls_buffer: dict[int, dict[str, str]] = {}
        usage = TokenUsage()

        try:
            async for event in stream:
                if event.type == "message_start":
                    message_usage = getattr(event.message, "usage", None)
                    if message_usage is not None:
                        usage = TokenUsage(
                            input_tokens=getattr(message_usage, "input_tokens", 0) or 0,
                            output_tokens=getattr(message_usage, "output_tokens", 0) or 0,
                        )

                elif event.type == "content_block_start":
                    block = event.content_block
                    if block.type == "tool_use":
                        tool_calls_buffer[event.index] = {
                            "id": block.id,
                            "name": block.name,
                            "input": "",
                        }
                        yield ToolCallStart(id=block.id, name=block.name)

                elif event.type == "content_block_delta":
                    delta = event.delta
                    if delta.type == "text_delta":
                        yield TextDelta(text=delta.text)
                    elif delta.type == "input_json_delta" and event.index in tool_calls_buffer:
                        call = tool_calls_buffer[event.index]
                        call["input"] += delta.partial_json
                        yield ToolCallDelta(id=call["id"], arguments_delta=delta.partial_json)

                elif event.type == "content_block_stop":
                    call = tool_calls_buffer.pop(event.index, None)
                    if call is not None:
                        yield ToolCallEnd(
                            id=call["id"], name=call["name"], input=_decode_input(call)
                        )

                elif event.type == "message_delta":
                    delta_usage = getattr(event, "usage", None)
                    if delta_usage is not None:
                        usage = TokenUsage(
                            input_tokens=getattr(delta_usage, "input_tokens", None)
                            or usage.input_tokens,
                            output_tokens=getattr(delta_usage, "output_tokens", None)
                            or usage.output_tokens,
                        )

                elif event.type == "message_stop":
                    break
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                await close()

        logger.info(
            "llm_response",
            provider=self.name,
            model=self.model_name,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        yield Done(usage=usage)


def _decode_input(call: dict[str, str]) -> dict[str, Any]:
    if not call["input"]:
        return {}
    try:
        parsed = json.loads(call["input"])
    except json.JSONDecodeError:
        logger.error("failed_to_decode_tool_arguments", tool_name=call["name"], arguments=call["input"])
        return {}
    return parsed if isinstance(parsed, dict) else {}


__all__ = ["AnthropicProvider", "ANTHROPIC_RETRYABLE"]
