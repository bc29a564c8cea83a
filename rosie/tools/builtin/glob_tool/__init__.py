from .glob_tool import GlobTool

__all__ = ["GlobTool"]
