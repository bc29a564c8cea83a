"""
OpenAI-compatible provider - streamed chat completions over raw HTTP.

Covers xAI, OpenAI, Google, OpenRouter and custom/local endpoints that speak
the chat-completions wire format. The SSE stream is parsed incrementally, so
no vendor SDK is involved.
"""

import json
from dataclasses import dataclass
from typing import Any, AsyncIterator

import httpx
from pydantic import ConfigDict, Field, PrivateAttr

from rosie.domain.errors import error_kind_for
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
    ErrorEvent,
    Provider,
    ProviderEvent,
    TextDelta,
    ToolCallDelta,
    ToolCallEnd,
    ToolCallStart,
)
from rosie.providers.sse import LineKind, SSELineBuffer, parse_data_line
from rosie.runtime.control import AbortSignal
from rosie.utils.logging import get_logger
from rosie.utils.retry import retry_async

logger = get_logger(__name__)

# Only connection establishment is retried; a started stream never is.
CONNECT_RETRYABLE = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.PoolTimeout,
)

DEFAULT_TIMEOUT = httpx.Timeout(connect=30.0, read=300.0, write=30.0, pool=30.0)


# ============================================================================
# Tool call accumulation
# ============================================================================


@dataclass
class _PendingToolCall:
    id: str
    name: str
    arguments: str


class ToolCallAccumulator:
    """
    Accumulate streaming tool calls.

    Tool calls arrive as index-keyed fragments; a fragment carrying an ``id``
    opens a new call at its index, later fragments append argument text.
    """

    def __init__(self):
        self._calls: dict[int, _PendingToolCall] = {}

    def accumulate(self, delta_calls: list[dict]) -> list[ProviderEvent]:
        """Accumulate incremental tool calls; return the events they produce."""
        events: list[ProviderEvent] = []
        for tc in delta_calls:
            idx = tc.get("index") or 0
            fn = tc.get("function") or {}
            name = fn.get("name") or ""
            arguments = fn.get("arguments") or ""

            if tc.get("id"):
                self._calls[idx] = _PendingToolCall(id=tc["id"], name=name, arguments=arguments)
                if name:
                    events.append(ToolCallStart(id=tc["id"], name=name))
                continue

            pending = self._calls.get(idx)
            if pending is None:
                logger.debug("orphan_tool_call_fragment", index=idx)
                continue
            if name:
                pending.name = name
            if arguments:
                pending.arguments += arguments
                events.append(ToolCallDelta(id=pending.id, arguments_delta=arguments))
        return events

    def finalize(self) -> list[ToolCallEnd]:
        """Parse every pending call's arguments and clear the table."""
        completed = []
        for call in self._calls.values():
            completed.append(
                ToolCallEnd(id=call.id, name=call.name, input=_parse_arguments(call))
            )
        self._calls.clear()
        return completed

    def __len__(self) -> int:
        return len(self._calls)


def _parse_arguments(call: _PendingToolCall) -> dict[str, Any]:
    if not call.arguments.strip():
        return {}
    try:
        parsed = json.loads(call.arguments)
    except json.JSONDecodeError:
        logger.warning(
            "failed_to_decode_tool_arguments", tool_name=call.name, arguments=call.arguments
        )
        return {}
    return parsed if isinstance(parsed, dict) else {}


# ============================================================================
# Provider
# ============================================================================


class OpenAICompatibleProvider(Provider):
    """
    Generic chat-completions provider.

    Request: POST {base_url}/chat/completions with
    ``{model, messages, tools?, stream: true, max_tokens}``.
    Response: ``data: <json>`` lines terminated by ``data: [DONE]``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    base_url: str = Field(default="https://api.openai.com/v1")
    extra_headers: dict[str, str] = Field(default_factory=dict)
    client: httpx.AsyncClient | None = Field(default=None, exclude=True)
    connect_attempts: int = Field(default=3, ge=1)

    _owns_client: bool = PrivateAttr(default=False)

    def model_post_init(self, __context) -> None:
        """Create the HTTP client unless one was injected."""
        self.base_url = self.base_url.rstrip("/")
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
            self._owns_client = True

    async def aclose(self) -> None:
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def convert_messages(
        self, messages: list[ChatMessage], system_prompt: str | None
    ) -> list[dict[str, Any]]:
        """Convert history into chat-completions messages, system prompt first."""
        result: list[dict[str, Any]] = []
        if system_prompt:
            result.append({"role": "system", "content": system_prompt})

        for msg in messages:
            if isinstance(msg.content, str):
                if msg.role == MessageRole.TOOL and msg.tool_call_id:
                    result.append(
                        {"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id}
                    )
                else:
                    role = "user" if msg.role == MessageRole.TOOL else msg.role.value
                    result.append({"role": role, "content": msg.content})
                continue

            text_parts: list[str] = []
            tool_calls: list[dict[str, Any]] = []
            tool_results: list[dict[str, Any]] = []
            for block in msg.content:
                if isinstance(block, TextBlock):
                    text_parts.append(block.text)
                elif isinstance(block, ToolUseBlock):
                    tool_calls.append(
                        {
                            "id": block.id,
                            "type": "function",
                            "function": {
                                "name": block.name,
                                "arguments": json.dumps(block.input),
                            },
                        }
                    )
                elif isinstance(block, ToolResultBlock):
                    tool_results.append(
                        {
                            "role": "tool",
                            "content": block.content,
                            "tool_call_id": block.tool_call_id,
                        }
                    )

            if msg.role == MessageRole.ASSISTANT:
                assistant: dict[str, Any] = {
                    "role": "assistant",
                    "content": "\n".join(text_parts) or None,
                }
                if tool_calls:
                    assistant["tool_calls"] = tool_calls
                result.append(assistant)
            elif tool_results:
                # Tool results travel as separate tool messages
                result.extend(tool_results)
            else:
                role = "user" if msg.role == MessageRole.TOOL else msg.role.value
                result.append({"role": role, "content": "\n".join(text_parts)})

        return result

    @staticmethod
    def convert_tools(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": t.input_schema.model_dump(),
                },
            }
            for t in tools
        ]

    def _build_request(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition],
        system_prompt: str,
        max_tokens: int,
    ) -> httpx.Request:
        body: dict[str, Any] = {
            "model": self.model_name,
            "messages": self.convert_messages(messages, system_prompt),
            "stream": True,
            "max_tokens": max_tokens,
        }
        if tools:
            body["tools"] = self.convert_tools(tools)

        headers = {"Content-Type": "application/json", **self.extra_headers}
        api_key = self.resolved_api_key()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        logger.info(
            "llm_request",
            provider=self.name,
            model=self.model_name,
            messages_count=len(body["messages"]),
            tools_count=len(tools),
            max_tokens=max_tokens,
        )
        return self.client.build_request(
            "POST", f"{self.base_url}/chat/completions", json=body, headers=headers
        )

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def _stream(
        self,
        messages: list[ChatMessage],
        tools: list[ToolDefinition],
        system_prompt: str,
        max_tokens: int,
        abort_signal: AbortSignal | None,
    ) -> AsyncIterator[ProviderEvent]:
        request = self._build_request(messages, tools, system_prompt, max_tokens)

        response: httpx.Response | None = None
        async for attempt in retry_async(
            max_attempts=self.connect_attempts, exceptions=CONNECT_RETRYABLE
        ):
            with attempt:
                response = await self.client.send(request, stream=True)

        try:
            if not response.is_success:
                body = (await response.aread()).decode("utf-8", errors="replace")
                message = f"{self.label} API error {response.status_code}: {body}"
                logger.error(
                    "llm_request_failed",
                    provider=self.name,
                    model=self.model_name,
                    status_code=response.status_code,
                )
                yield ErrorEvent(
                    message=message,
                    kind=error_kind_for(response.status_code, message),
                    status_code=response.status_code,
                )
                return

            async for event in self._parse_stream(response.aiter_text()):
                yield event
        finally:
            await response.aclose()

    async def _parse_stream(self, chunks: AsyncIterator[str]) -> AsyncIterator[ProviderEvent]:
        """Turn raw text chunks into ProviderEvents, ending with Done."""
        buffer = SSELineBuffer()
        accumulator = ToolCallAccumulator()
        usage = TokenUsage()

        async def lines() -> AsyncIterator[str]:
            async for chunk in chunks:
                for line in buffer.feed(chunk):
                    yield line
            for line in buffer.flush():
                yield line

        async for line in lines():
            parsed = parse_data_line(line)
            if parsed.kind == LineKind.MALFORMED:
                logger.debug("sse_line_skipped", provider=self.name, reason=parsed.error.reason)
                continue
            if parsed.kind != LineKind.PAYLOAD:
                continue

            payload = parsed.payload
            if payload.get("usage"):
                # Overwrites: usage is assumed to be reported once, near stream end.
                usage = _usage_from(payload["usage"])

            choices = payload.get("choices") or []
            if not choices or not isinstance(choices[0], dict):
                continue
            choice = choices[0]
            delta = choice.get("delta") or {}

            if delta.get("content"):
                yield TextDelta(text=delta["content"])

            if delta.get("tool_calls"):
                for event in accumulator.accumulate(delta["tool_calls"]):
                    yield event

            if choice.get("finish_reason"):
                for event in accumulator.finalize():
                    yield event

        # Some endpoints close the stream without a finish_reason
        for event in accumulator.finalize():
            yield event

        logger.info(
            "llm_response",
            provider=self.name,
            model=self.model_name,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
        )
        yield Done(usage=usage)


def _usage_from(raw: dict[str, Any]) -> TokenUsage:
    return TokenUsage(
        input_tokens=raw.get("prompt_tokens") or raw.get("input_tokens") or 0,
        output_tokens=raw.get("completion_tokens") or raw.get("output_tokens") or 0,
    )


__all__ = ["OpenAICompatibleProvider", "ToolCallAccumulator", "CONNECT_RETRYABLE"]
