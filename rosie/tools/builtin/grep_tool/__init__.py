from .grep_tool import GrepTool

__all__ = ["GrepTool"]
