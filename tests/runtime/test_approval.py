"""Approval gate tests"""

import pytest

from rosie.runtime.approval import ApprovalGate


@pytest.mark.asyncio
async def test_resolve_settles_and_clears():
    gate = ApprovalGate()
    pending = gate.acquire("t1", "write_file", {"path": "a"})
    assert gate.pending is pending

    assert gate.resolve("t1", True)
    assert gate.pending is None
    assert await gate.wait(pending) is True


@pytest.mark.asyncio
async def test_second_acquire_is_a_contract_violation():
    gate = ApprovalGate()
    gate.acquire("t1", "bash", {})
    with pytest.raises(RuntimeError):
        gate.acquire("t2", "bash", {})


@pytest.mark.asyncio
async def test_mismatched_decision_is_ignored():
    gate = ApprovalGate()
    pending = gate.acquire("t1", "bash", {})
    assert not gate.resolve("other", True)
    assert gate.pending is pending


@pytest.mark.asyncio
async def test_deny_pending():
    gate = ApprovalGate()
    pending = gate.acquire("t1", "bash", {})
    gate.deny_pending()
    assert await gate.wait(pending) is False
    gate.deny_pending()
    assert gate.pending is None
