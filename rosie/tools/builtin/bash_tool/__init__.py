from .bash_tool import BashTool
from .blocked_patterns import find_blocked_reason

__all__ = ["BashTool", "find_blocked_reason"]
