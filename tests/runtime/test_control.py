"""Abort signal and racing helper tests"""

import asyncio

import pytest

from rosie.domain import OperationAborted
from rosie.runtime.control import AbortSignal, iterate_with_abort, race_abort


class TestAbortSignal:
    def test_first_reason_wins(self):
        signal = AbortSignal()
        signal.abort("first")
        signal.abort("second")
        assert signal.is_aborted()
        assert signal.reason == "first"

    def test_parent_abort_reaches_child(self):
        parent = AbortSignal()
        child = parent.child()
        parent.abort("stop")
        assert child.is_aborted()
        assert child.reason == "stop"

    def test_child_abort_leaves_parent(self):
        parent = AbortSignal()
        child = parent.child()
        child.abort("timeout")
        assert not parent.is_aborted()

    def test_child_of_aborted_parent_starts_aborted(self):
        parent = AbortSignal()
        parent.abort("gone")
        assert parent.child().reason == "gone"


class TestRaceAbort:
    @pytest.mark.asyncio
    async def test_result_when_work_finishes_first(self):
        async def work():
            return 42

        assert await race_abort(work(), AbortSignal()) == 42

    @pytest.mark.asyncio
    async def test_no_signal_awaits_directly(self):
        async def work():
            return "ok"

        assert await race_abort(work(), None) == "ok"

    @pytest.mark.asyncio
    async def test_abort_cancels_work(self):
        signal = AbortSignal()
        cancelled = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        asyncio.get_running_loop().call_later(0.05, signal.abort, "stop")
        with pytest.raises(OperationAborted) as exc_info:
            await race_abort(work(), signal)
        assert exc_info.value.reason == "stop"
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_already_aborted_never_starts_work(self):
        signal = AbortSignal()
        signal.abort()
        started = []

        async def work():
            started.append(True)

        with pytest.raises(OperationAborted):
            await race_abort(work(), signal)
        assert started == []


@pytest.mark.asyncio
async def test_iterate_with_abort_stops_mid_stream():
    signal = AbortSignal()

    async def numbers():
        yield 1
        yield 2
        await asyncio.sleep(10)
        yield 3

    seen = []
    asyncio.get_running_loop().call_later(0.05, signal.abort)
    with pytest.raises(OperationAborted):
        async for n in iterate_with_abort(numbers(), signal):
            seen.append(n)
    assert seen == [1, 2]
