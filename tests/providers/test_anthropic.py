"""Anthropic streaming adapter tests"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from anthropic import AsyncAnthropic

from rosie.domain import ChatMessage, MessageRole, ProviderErrorKind, ToolDefinition, ToolInputSchema
from rosie.domain.messages import ToolResultBlock, ToolUseBlock
from rosie.providers.anthropic import AnthropicProvider
from rosie.providers.base import Done, ErrorEvent, TextDelta, ToolCallDelta, ToolCallEnd, ToolCallStart


class FakeStream:
    """Stands in for the SDK's raw event stream."""

    def __init__(self, events):
        self._events = list(events)
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self._events:
            yield event

    async def close(self):
        self.closed = True


def ev(type_, **fields):
    return SimpleNamespace(type=type_, **fields)


RAW_EVENTS = [
    ev("message_start", message=SimpleNamespace(usage=SimpleNamespace(input_tokens=12, output_tokens=1))),
    ev("content_block_start", index=0, content_block=SimpleNamespace(type="text", text="")),
    ev("content_block_delta", index=0, delta=SimpleNamespace(type="text_delta", text="Let me look.")),
    ev("content_block_stop", index=0),
    ev(
        "content_block_start",
        index=1,
        content_block=SimpleNamespace(type="tool_use", id="toolu_1", name="read_file"),
    ),
    ev("content_block_delta", index=1, delta=SimpleNamespace(type="input_json_delta", partial_json='{"path":')),
    ev("content_block_delta", index=1, delta=SimpleNamespace(type="input_json_delta", partial_json=' "a.txt"}')),
    ev("content_block_stop", index=1),
    ev("message_delta", delta=SimpleNamespace(stop_reason="tool_use"), usage=SimpleNamespace(output_tokens=7)),
    ev("message_stop"),
]


def make_provider(create: AsyncMock) -> AnthropicProvider:
    client = MagicMock(spec=AsyncAnthropic)
    client.messages = MagicMock()
    client.messages.create = create
    return AnthropicProvider(model_name="claude-test", api_key="sk-ant-test", client=client)


async def collect(provider, messages=None, tools=None):
    return [
        event
        async for event in provider.stream_turn(
            messages or [ChatMessage.user("hi")], tools or [], "Be brief.", 512
        )
    ]


class TestAnthropicStreaming:
    @pytest.mark.asyncio
    async def test_raw_events_are_normalized(self):
        stream = FakeStream(RAW_EVENTS)
        provider = make_provider(AsyncMock(return_value=stream))

        events = await collect(provider)

        assert events == [
            TextDelta(text="Let me look."),
            ToolCallStart(id="toolu_1", name="read_file"),
            ToolCallDelta(id="toolu_1", arguments_delta='{"path":'),
            ToolCallDelta(id="toolu_1", arguments_delta=' "a.txt"}'),
            ToolCallEnd(id="toolu_1", name="read_file", input={"path": "a.txt"}),
            Done(usage={"input_tokens": 12, "output_tokens": 7}),
        ]
        assert stream.closed

    @pytest.mark.asyncio
    async def test_request_parameters(self):
        create = AsyncMock(return_value=FakeStream([ev("message_stop")]))
        provider = make_provider(create)
        tool = ToolDefinition(
            name="bash",
            description="Run a command",
            input_schema=ToolInputSchema(properties={"command": {"type": "string"}}, required=["command"]),
        )
        history = [
            ChatMessage(role=MessageRole.SYSTEM, content="ignored"),
            ChatMessage.user("list files"),
            ChatMessage(
                role=MessageRole.ASSISTANT,
                content=[ToolUseBlock(id="t1", name="bash", input={"command": "ls"})],
            ),
            ChatMessage(
                role=MessageRole.USER,
                content=[ToolResultBlock(tool_call_id="t1", content="a.txt", is_error=False)],
            ),
        ]

        await collect(provider, messages=history, tools=[tool])

        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 512
        assert kwargs["stream"] is True
        assert kwargs["system"] == "Be brief."
        assert kwargs["tools"][0]["input_schema"]["required"] == ["command"]
        assert [m["role"] for m in kwargs["messages"]] == ["user", "assistant", "user"]
        assert kwargs["messages"][2]["content"] == [
            {"type": "tool_result", "tool_use_id": "t1", "content": "a.txt", "is_error": False}
        ]

    @pytest.mark.asyncio
    async def test_tool_role_string_becomes_tool_result(self):
        converted = AnthropicProvider.convert_messages(
            [ChatMessage(role=MessageRole.TOOL, content="out", tool_call_id="t9")]
        )
        assert converted == [
            {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "t9", "content": "out"}]}
        ]

    @pytest.mark.asyncio
    async def test_authentication_failure(self):
        create = AsyncMock(side_effect=RuntimeError("Error code: 401 - authentication_error"))
        provider = make_provider(create)

        events = await collect(provider)

        assert len(events) == 1
        assert isinstance(events[0], ErrorEvent)
        assert events[0].kind == ProviderErrorKind.AUTHENTICATION

    @pytest.mark.asyncio
    async def test_mid_stream_failure_yields_single_error(self):
        class BrokenStream(FakeStream):
            async def _iterate(self):
                yield ev("content_block_delta", index=0, delta=SimpleNamespace(type="text_delta", text="par"))
                raise RuntimeError("529 overloaded_error")

        stream = BrokenStream([])
        provider = make_provider(AsyncMock(return_value=stream))

        events = await collect(provider)

        assert events[0] == TextDelta(text="par")
        assert len(events) == 2
        assert events[1].kind == ProviderErrorKind.OVERLOADED
        assert stream.closed
