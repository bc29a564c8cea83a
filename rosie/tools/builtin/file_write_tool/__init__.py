from .file_write_tool import FileWriteTool

__all__ = ["FileWriteTool"]
