"""
EventBus - typed, synchronous publish/subscribe hub.

Design:
- One bus per process, constructed at startup and passed explicitly to every
  component that publishes or listens
- publish() delivers to every handler registered for the event's tag, in
  subscription order, before returning
- A failing handler never propagates to the publisher: the failure becomes a
  ``system:error`` event on the same bus
- A bounded rolling history (most recent 1,000 events) supports replay and
  debugging

Usage:
    bus = EventBus()
    unsubscribe = bus.subscribe(EventType.AGENT_TEXT, lambda e: print(e.delta))
    bus.publish(AgentText(delta="hi"))
    unsubscribe()
"""

import asyncio
import inspect
from collections import deque
from typing import Any, Awaitable, Callable

from rosie.events.events import BaseEvent, EventType, SystemError
from rosie.utils.logging import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Any], "Awaitable[None] | None"]

DEFAULT_MAX_HISTORY = 1000


class _Subscription:
    __slots__ = ("handler", "active")

    def __init__(self, handler: EventHandler) -> None:
        self.handler = handler
        self.active = True


class EventBus:
    """In-process typed event hub."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY) -> None:
        self._subscriptions: dict[EventType, list[_Subscription]] = {}
        self._history: deque[BaseEvent] = deque(maxlen=max_history)
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], None]:
        """
        Register a handler for one event tag.

        Returns:
            A function that removes this subscription. Safe to call during
            delivery (including from the handler itself) and idempotent.
        """
        subscription = _Subscription(handler)
        self._subscriptions.setdefault(EventType(event_type), []).append(subscription)

        def unsubscribe() -> None:
            if not subscription.active:
                return
            subscription.active = False
            subscribers = self._subscriptions.get(EventType(event_type))
            if subscribers and subscription in subscribers:
                subscribers.remove(subscription)

        return unsubscribe

    def publish(self, event: BaseEvent) -> None:
        """Deliver ``event`` synchronously to its current subscribers."""
        event_type: EventType = event.type  # type: ignore[attr-defined]
        self._history.append(event)

        # Snapshot so subscribe/unsubscribe during delivery cannot break iteration.
        for subscription in list(self._subscriptions.get(event_type, ())):
            if not subscription.active:
                continue
            try:
                result = subscription.handler(event)
            except Exception as exc:
                self._report_failure(event_type, exc)
                continue

            if inspect.isawaitable(result):
                self._schedule(event_type, result)

    def history(self, event_type: EventType | None = None) -> list[BaseEvent]:
        """Retained events, oldest first, optionally filtered by tag."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]  # type: ignore[attr-defined]

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._subscriptions.get(EventType(event_type), ()))

    def clear(self) -> None:
        """Drop every subscription and the retained history."""
        for subscribers in self._subscriptions.values():
            for subscription in subscribers:
                subscription.active = False
        self._subscriptions.clear()
        self._history.clear()

    async def drain(self) -> None:
        """Wait for every scheduled async handler to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule(self, event_type: EventType, awaitable: Awaitable[None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("event_handler_without_loop", event_type=event_type.value)
            close = getattr(awaitable, "close", None)
            if close is not None:
                close()
            return

        task = loop.create_task(self._await_handler(awaitable))
        self._pending.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                self._report_failure(event_type, exc)

        task.add_done_callback(_done)

    @staticmethod
    async def _await_handler(awaitable: Awaitable[None]) -> None:
        await awaitable

    def _report_failure(self, event_type: EventType, exc: BaseException) -> None:
        logger.warning(
            "event_handler_failed",
            event_type=event_type.value,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        # A failing system:error handler is only logged, never re-published.
        if event_type == EventType.SYSTEM_ERROR:
            return
        self.publish(
            SystemError(
                message=str(exc) or type(exc).__name__,
                fatal=False,
                source_event=event_type,
            )
        )


__all__ = ["EventBus", "EventHandler", "DEFAULT_MAX_HISTORY"]
