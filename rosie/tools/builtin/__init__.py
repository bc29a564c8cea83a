"""Builtin tools for rosie agents."""

from rosie.tools.builtin.bash_tool import BashTool
from rosie.tools.builtin.file_edit_tool import FileEditTool
from rosie.tools.builtin.file_read_tool import FileReadTool
from rosie.tools.builtin.file_write_tool import FileWriteTool
from rosie.tools.builtin.glob_tool import GlobTool
from rosie.tools.builtin.grep_tool import GrepTool
from rosie.tools.builtin.ls_tool import LSTool

__all__ = [
    "BashTool",
    "FileEditTool",
    "FileReadTool",
    "FileWriteTool",
    "GlobTool",
    "GrepTool",
    "LSTool",
]
