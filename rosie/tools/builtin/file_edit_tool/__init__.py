from .file_edit_tool import FileEditTool

__all__ = ["FileEditTool"]
