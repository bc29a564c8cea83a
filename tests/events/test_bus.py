"""EventBus tests"""

import asyncio

import pytest

from rosie.events import (
    AgentText,
    EventBus,
    EventType,
    SessionCleared,
    SystemError,
    ToolApproved,
    parse_event,
)


class TestDelivery:
    def test_handlers_run_in_subscription_order(self, bus):
        calls = []
        bus.subscribe(EventType.AGENT_TEXT, lambda e: calls.append(("first", e.delta)))
        bus.subscribe(EventType.AGENT_TEXT, lambda e: calls.append(("second", e.delta)))

        bus.publish(AgentText(delta="hi"))

        assert calls == [("first", "hi"), ("second", "hi")]

    def test_only_matching_tag_is_delivered(self, bus):
        calls = []
        bus.subscribe(EventType.TOOL_APPROVED, calls.append)
        bus.publish(AgentText(delta="x"))
        assert calls == []

    def test_unsubscribe_is_idempotent(self, bus):
        calls = []
        unsubscribe = bus.subscribe(EventType.AGENT_TEXT, calls.append)
        unsubscribe()
        unsubscribe()
        bus.publish(AgentText(delta="x"))
        assert calls == []
        assert bus.subscriber_count(EventType.AGENT_TEXT) == 0

    def test_handler_may_unsubscribe_itself_during_delivery(self, bus):
        calls = []
        holder = {}

        def once(event):
            calls.append("once")
            holder["unsubscribe"]()

        holder["unsubscribe"] = bus.subscribe(EventType.AGENT_TEXT, once)
        bus.subscribe(EventType.AGENT_TEXT, lambda e: calls.append("other"))

        bus.publish(AgentText(delta="a"))
        bus.publish(AgentText(delta="b"))

        assert calls == ["once", "other", "other"]

    def test_handler_removed_mid_delivery_is_skipped(self, bus):
        calls = []
        holder = {}

        def remover(event):
            calls.append("remover")
            holder["victim"]()

        bus.subscribe(EventType.AGENT_TEXT, remover)
        holder["victim"] = bus.subscribe(EventType.AGENT_TEXT, lambda e: calls.append("victim"))

        bus.publish(AgentText(delta="a"))

        assert calls == ["remover"]


class TestFailures:
    def test_handler_error_becomes_system_error(self, bus):
        errors = []
        later = []
        bus.subscribe(EventType.SYSTEM_ERROR, errors.append)

        def broken(event):
            raise ValueError("boom")

        bus.subscribe(EventType.AGENT_TEXT, broken)
        bus.subscribe(EventType.AGENT_TEXT, later.append)

        bus.publish(AgentText(delta="x"))

        assert len(later) == 1
        assert len(errors) == 1
        assert errors[0].message == "boom"
        assert errors[0].fatal is False
        assert errors[0].source_event == EventType.AGENT_TEXT

    def test_failing_system_error_handler_does_not_recurse(self, bus):
        calls = []

        def broken(event):
            calls.append(event)
            raise RuntimeError("still broken")

        bus.subscribe(EventType.SYSTEM_ERROR, broken)
        bus.publish(SystemError(message="original"))

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_async_handler_failure_becomes_system_error(self, bus):
        errors = []
        bus.subscribe(EventType.SYSTEM_ERROR, errors.append)

        async def broken(event):
            await asyncio.sleep(0)
            raise ValueError("async boom")

        bus.subscribe(EventType.SESSION_CLEARED, broken)
        bus.publish(SessionCleared())
        await bus.drain()

        assert [e.message for e in errors] == ["async boom"]
        assert errors[0].source_event == EventType.SESSION_CLEARED

    @pytest.mark.asyncio
    async def test_async_handler_runs(self, bus):
        seen = []

        async def handler(event):
            seen.append(event.tool_id)

        bus.subscribe(EventType.TOOL_APPROVED, handler)
        bus.publish(ToolApproved(tool_id="t1"))
        await bus.drain()

        assert seen == ["t1"]


class TestHistory:
    def test_history_is_bounded(self):
        bus = EventBus(max_history=3)
        for i in range(5):
            bus.publish(AgentText(delta=str(i)))
        assert [e.delta for e in bus.history()] == ["2", "3", "4"]

    def test_history_filters_by_type(self, bus):
        bus.publish(AgentText(delta="a"))
        bus.publish(SessionCleared())
        bus.publish(AgentText(delta="b"))
        assert [e.delta for e in bus.history(EventType.AGENT_TEXT)] == ["a", "b"]
        assert len(bus.history(EventType.SESSION_CLEARED)) == 1

    def test_clear_drops_subscriptions_and_history(self, bus):
        calls = []
        bus.subscribe(EventType.AGENT_TEXT, calls.append)
        bus.publish(AgentText(delta="a"))
        bus.clear()
        bus.publish(AgentText(delta="b"))
        assert calls[0].delta == "a" and len(calls) == 1
        assert [e.delta for e in bus.history()] == ["b"]


def test_events_round_trip_through_json():
    event = ToolApproved(tool_id="abc")
    rebuilt = parse_event(event.model_dump(mode="json"))
    assert rebuilt == event
    assert rebuilt.type == EventType.TOOL_APPROVED
    assert event.timestamp > 0
