from .file_read_tool import FileReadTool

__all__ = ["FileReadTool"]
