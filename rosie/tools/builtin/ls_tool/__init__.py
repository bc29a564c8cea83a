from .ls_tool import LSTool

__all__ = ["LSTool"]
