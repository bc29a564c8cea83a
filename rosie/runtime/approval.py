"""
Single-slot approval gate.

At most one confirmation request is outstanding per agent loop. Acquiring the
slot while it is occupied is a programming error; resolving it always clears
it.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from rosie.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PendingApproval:
    tool_id: str
    tool_name: str
    input: dict[str, Any]
    future: asyncio.Future = field(repr=False)


class ApprovalGate:
    """Holds the one PendingApproval of an agent loop, if any."""

    def __init__(self) -> None:
        self._pending: PendingApproval | None = None

    @property
    def pending(self) -> PendingApproval | None:
        return self._pending

    def acquire(self, tool_id: str, tool_name: str, tool_input: dict[str, Any]) -> PendingApproval:
        """
        Occupy the slot.

        Raises:
            RuntimeError: an approval is already pending
        """
        if self._pending is not None:
            raise RuntimeError(
                f"Approval already pending for {self._pending.tool_id}; "
                f"cannot request another for {tool_id}"
            )
        future = asyncio.get_running_loop().create_future()
        self._pending = PendingApproval(
            tool_id=tool_id, tool_name=tool_name, input=tool_input, future=future
        )
        return self._pending

    def resolve(self, tool_id: str, approved: bool) -> bool:
        """Settle the pending approval if it matches ``tool_id``; True if it did."""
        pending = self._pending
        if pending is None or pending.tool_id != tool_id:
            logger.debug("approval_decision_ignored", tool_id=tool_id, approved=approved)
            return False
        self._pending = None
        if not pending.future.done():
            pending.future.set_result(approved)
        return True

    def deny_pending(self) -> None:
        """Settle whatever is pending as denied (used on cancellation)."""
        if self._pending is not None:
            self.resolve(self._pending.tool_id, False)

    async def wait(self, pending: PendingApproval) -> bool:
        try:
            return await pending.future
        finally:
            if self._pending is pending:
                self._pending = None


__all__ = ["ApprovalGate", "PendingApproval"]
