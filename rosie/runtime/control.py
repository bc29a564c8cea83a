"""
Control flow utilities for agent execution.

This module consolidates:
- AbortSignal: Graceful cancellation mechanism
- race_abort: Race an awaitable against an abort signal
- iterate_with_abort: Pull from an async iterator until aborted
"""

import asyncio
from typing import AsyncIterator, Awaitable, TypeVar

from rosie.domain.errors import OperationAborted

T = TypeVar("T")


# ============================================================================
# AbortSignal
# ============================================================================


class AbortSignal:
    """
    Abort signal for graceful cancellation of long-running operations.

    Based on asyncio.Event, supports:
    - Synchronous abort status check
    - Async wait for abort signal
    - Recording abort reason

    Examples:
        >>> signal = AbortSignal()
        >>>
        >>> # Trigger abort from the caller
        >>> signal.abort("User cancelled")
        >>>
        >>> # Check in tool execution
        >>> if signal.is_aborted():
        >>>     return  # Early exit
        >>>
        >>> # Or async wait
        >>> await signal.wait()
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._reason: str | None = None
        self._children: list["AbortSignal"] = []

    def abort(self, reason: str = "Operation cancelled"):
        """Trigger abort signal. Later calls keep the first reason."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        for child in self._children:
            child.abort(reason)
        self._children.clear()

    def is_aborted(self) -> bool:
        """Check if abort has been triggered."""
        return self._event.is_set()

    async def wait(self):
        """Async wait for abort signal."""
        await self._event.wait()

    @property
    def reason(self) -> str | None:
        """Get abort reason."""
        return self._reason

    def child(self) -> "AbortSignal":
        """
        A signal that fires whenever this one does, but can also be aborted
        on its own without affecting this one.
        """
        child = AbortSignal()
        if self.is_aborted():
            child.abort(self._reason or "Operation cancelled")
        else:
            self._children.append(child)
        return child


# ============================================================================
# Racing
# ============================================================================


async def race_abort(awaitable: Awaitable[T], abort_signal: AbortSignal | None) -> T:
    """
    Await ``awaitable`` unless ``abort_signal`` fires first.

    The loser of the race is cancelled and awaited before returning, so no
    task outlives this call.

    Raises:
        OperationAborted: the signal fired before the operation finished
    """
    if abort_signal is None:
        return await awaitable
    if abort_signal.is_aborted():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise OperationAborted(abort_signal.reason)

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(abort_signal.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        waiter.cancel()
        await asyncio.gather(work, waiter, return_exceptions=True)
        raise

    if work.done():
        waiter.cancel()
        await asyncio.gather(waiter, return_exceptions=True)
        return work.result()

    work.cancel()
    await asyncio.gather(work, return_exceptions=True)
    raise OperationAborted(abort_signal.reason)


async def iterate_with_abort(
    iterator: AsyncIterator[T], abort_signal: AbortSignal | None
) -> AsyncIterator[T]:
    """Yield from ``iterator``, raising OperationAborted as soon as the signal fires."""
    while True:
        try:
            item = await race_abort(iterator.__anext__(), abort_signal)
        except StopAsyncIteration:
            return
        yield item


__all__ = ["AbortSignal", "race_abort", "iterate_with_abort"]
