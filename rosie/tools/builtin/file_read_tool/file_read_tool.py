"""
FileReadTool - File reading tool.
"""

import os
from typing import Any

from rosie.domain.errors import PathTraversalError
from rosie.domain.tools import ToolResult
from rosie.runtime.control import AbortSignal
from rosie.tools.builtin.common.file_operation_base import FileOperationBaseTool
from rosie.tools.builtin.config import FileReadConfig
from rosie.tools.sandbox import MAX_READ_SIZE, Sandbox, is_binary_file
from rosie.utils.logging import get_logger

logger = get_logger(__name__)


class FileReadTool(FileOperationBaseTool):
    """File reading tool."""

    def __init__(self, *, config: FileReadConfig | None = None, sandbox: Sandbox | None = None):
        super().__init__(sandbox=sandbox)
        self._config = config or FileReadConfig()

    def get_name(self) -> str:
        return "read_file"

    def get_description(self) -> str:
        return (
            "Read the contents of a file at the given path. Returns the file content "
            "with line numbers. Paths are relative to the project root."
        )

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": (
                        "Path to the file to read (relative to project root or absolute "
                        "within project)"
                    ),
                },
                "offset": {
                    "type": "number",
                    "description": "Line number to start reading from (1-indexed). Optional.",
                },
                "limit": {
                    "type": "number",
                    "description": (
                        f"Maximum number of lines to read. Optional, defaults to "
                        f"{self._config.default_line_limit}."
                    ),
                },
            },
            "required": ["path"],
        }

    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """Execute file reading."""
        input_path = parameters["path"]
        offset = int(parameters.get("offset") or 1)
        limit = int(parameters.get("limit") or self._config.default_line_limit)
        if offset < 1:
            offset = 1
        if limit < 1:
            limit = self._config.default_line_limit

        if abort_signal and abort_signal.is_aborted():
            return self._create_abort_result()

        try:
            resolved = self.sandbox.resolve(input_path)
        except PathTraversalError as e:
            return self._create_error_result(str(e))

        stat = self.sandbox.stat_safe(input_path)
        if stat is None:
            if os.path.lexists(resolved) and not self.sandbox.contains(os.path.realpath(resolved)):
                return self._create_error_result(
                    f"Access denied: {input_path} goes through a symbolic link pointing "
                    "outside the project root."
                )
            return self._create_error_result(f"File not found: {input_path}")
        if stat.is_directory:
            return self._create_error_result(
                f"{input_path} is a directory. Use list_directory to inspect it."
            )

        if stat.size > MAX_READ_SIZE:
            return self._create_error_result(
                f"File is too large ({stat.size / 1024 / 1024:.1f}MB). "
                f"Maximum: {MAX_READ_SIZE // 1024 // 1024}MB. Use offset/limit to read portions."
            )
        if is_binary_file(resolved):
            return self._create_error_result(
                f"File appears to be binary ({stat.size} bytes). Cannot display binary content."
            )

        try:
            with open(resolved, encoding="utf-8", errors="replace") as f:
                content = f.read()
        except PermissionError:
            return self._create_error_result(f"Permission denied: {input_path}")
        except OSError as e:
            logger.warning("file_read_failed", path=input_path, error=str(e))
            return self._create_error_result(f"Error reading file: {e}")

        return ToolResult(content=self._format(content, offset, limit))

    def _format(self, content: str, offset: int, limit: int) -> str:
        if not content:
            return "(empty file)"

        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()

        start = offset - 1
        end = min(len(lines), start + limit)
        width = len(str(end))
        max_len = self._config.max_line_length

        numbered = []
        for number, line in enumerate(lines[start:end], start=start + 1):
            if len(line) > max_len:
                line = line[:max_len] + "..."
            numbered.append(f"{number:>{width}}\t{line}")

        body = "\n".join(numbered) or "(empty file)"
        if end < len(lines) or start > 0:
            body += f"\n(showing lines {start + 1}-{end} of {len(lines)})"
        return body
