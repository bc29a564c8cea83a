"""
Sliding-window trimming of the conversation history.

Message size is estimated as serialized length / 4. When the estimate
exceeds the budget, messages are dropped starting just after the first
(anchor) message until the total is under 80% of the budget or only two
messages remain.
"""

from rosie.domain.messages import ChatMessage

TRIM_TARGET_RATIO = 0.8


def estimate_history_tokens(history: list[ChatMessage]) -> int:
    return sum(message.estimate_tokens() for message in history)


def trim_history(history: list[ChatMessage], budget: int) -> int:
    """
    Trim ``history`` in place.

    Returns:
        Number of messages removed (0 when within budget)
    """
    total = estimate_history_tokens(history)
    if total <= budget or not history:
        return 0

    anchor = history[0]
    removed = 0
    target = budget * TRIM_TARGET_RATIO

    while len(history) > 2 and total > target:
        total -= history.pop(1).estimate_tokens()
        removed += 1

    # A tool-result wrapper whose tool_use was dropped would be rejected by providers
    while len(history) > 2 and history[1].is_tool_result_wrapper():
        history.pop(1)
        removed += 1

    if history[0] is not anchor:
        history.insert(0, anchor)

    return removed


__all__ = ["trim_history", "estimate_history_tokens", "TRIM_TARGET_RATIO"]
