"""
Destructive command patterns refused by the bash tool.

Matching is a best-effort deterrent, not a security boundary: a shell is
Turing-complete and these patterns only catch common spellings. The approval
gate is the real protection.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class BlockedPattern:
    pattern: re.Pattern[str]
    reason: str


def _p(regex: str, reason: str) -> BlockedPattern:
    return BlockedPattern(re.compile(regex), reason)


# Applied to the lowercased command with runs of whitespace collapsed to one space
BLOCKED_PATTERNS: tuple[BlockedPattern, ...] = (
    _p(r"\brm\s+(-[a-z-]*\s+)*/\*?($|\s|;|&|\|)", "rm at filesystem root"),
    _p(r"\bmkfs(\.\w+)?\b", "filesystem formatting"),
    _p(r"\bdd\s+.*\bof=/dev/", "raw device write"),
    _p(r"\b(shutdown|reboot|halt|poweroff)\b", "system power control"),
    _p(r">\s*/dev/sd[a-z]", "raw device write"),
    _p(r">\s*/dev/nvme", "raw device write"),
    _p(r"\bchmod\s+(-r\s+)?[0-7]*\s+/($|\s)", "recursive permission change at root"),
    _p(r"\bchown\s+(-r\s+)?.*\s+/($|\s)", "recursive ownership change at root"),
    _p(r"\bcurl\s.*\|\s*(sudo\s+)?(bash|sh|zsh)\b", "pipe remote script to shell"),
    _p(r"\bwget\s.*\|\s*(sudo\s+)?(bash|sh|zsh)\b", "pipe remote script to shell"),
)

# Applied to the lowercased command with all whitespace removed, so spacing
# variants such as ":(){ :|:& };:" are caught
FORK_BOMB = _p(r":\(\)\{.*\|.*&.*\};:", "fork bomb")


def normalize_command(command: str) -> str:
    return " ".join(command.lower().split())


def find_blocked_reason(command: str) -> str | None:
    """Return the reason ``command`` is refused, or None if it may run."""
    normalized = normalize_command(command)
    if FORK_BOMB.pattern.search("".join(normalized.split())):
        return FORK_BOMB.reason
    for blocked in BLOCKED_PATTERNS:
        if blocked.pattern.search(normalized):
            return blocked.reason
    return None


def blocked_message(reason: str) -> str:
    return f"Command blocked: {reason}. If this is intentional, run it directly in your terminal."


__all__ = ["BLOCKED_PATTERNS", "BlockedPattern", "find_blocked_reason", "blocked_message"]
