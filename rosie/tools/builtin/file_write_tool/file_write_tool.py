"""
FileWriteTool - File writing tool.
"""

from typing import Any

from rosie.domain.errors import PathTraversalError
from rosie.domain.tools import ToolResult
from rosie.runtime.control import AbortSignal
from rosie.tools.builtin.common.file_operation_base import FileOperationBaseTool
from rosie.utils.logging import get_logger

logger = get_logger(__name__)


class FileWriteTool(FileOperationBaseTool):
    """File writing tool."""

    def get_name(self) -> str:
        return "write_file"

    def get_description(self) -> str:
        return (
            "Write content to a file. Creates the file if it does not exist. Overwrites if "
            "it does. Creates parent directories as needed. Writes atomically via temp file."
        )

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Path to the file to write (relative to project root)",
                },
                "content": {
                    "type": "string",
                    "description": "The content to write to the file",
                },
            },
            "required": ["path", "content"],
        }

    def requires_confirmation(self) -> bool:
        return True

    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """Execute file writing."""
        input_path = parameters["path"]
        content = parameters["content"]

        if abort_signal and abort_signal.is_aborted():
            return self._create_abort_result()

        try:
            target = self.sandbox.resolve_real(input_path)
        except PathTraversalError as e:
            return self._create_error_result(str(e))

        if target.is_dir():
            return self._create_error_result(f"{input_path} is a directory.")

        try:
            self._write_text(target, content)
        except OSError as e:
            logger.warning("file_write_failed", path=input_path, error=str(e))
            return self._create_error_result(f"Error writing file: {e}")

        line_count = len(content.split("\n"))
        size = len(content.encode("utf-8"))
        logger.info("file_written", path=str(target), bytes=size)
        return ToolResult(content=f"Written: {target} ({size} bytes, {line_count} lines)")
