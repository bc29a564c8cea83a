"""
FileEditTool - File editing tool.

Replaces exactly one occurrence of a search string. Zero or multiple
occurrences fail without touching the file.
"""

from typing import Any

from rosie.domain.errors import PathTraversalError
from rosie.domain.tools import ToolResult
from rosie.runtime.control import AbortSignal
from rosie.tools.builtin.common.file_operation_base import FileOperationBaseTool
from rosie.utils.logging import get_logger

logger = get_logger(__name__)


class FileEditTool(FileOperationBaseTool):
    """File editing tool."""

    def get_name(self) -> str:
        return "edit_file"

    def get_description(self) -> str:
        return (
            "Edit a file by replacing an exact string match with new content. The "
            "old_string must appear exactly once in the file; include enough surrounding "
            "context to make it unique. Writes atomically via temp file."
        )

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Path to the file to edit",
                },
                "old_string": {
                    "type": "string",
                    "description": (
                        "The exact string to find and replace. Must be unique in the file."
                    ),
                },
                "new_string": {
                    "type": "string",
                    "description": "The replacement string",
                },
            },
            "required": ["path", "old_string", "new_string"],
        }

    def requires_confirmation(self) -> bool:
        return True

    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """Execute file editing."""
        input_path = parameters["path"]
        old_string = parameters["old_string"]
        new_string = parameters["new_string"]

        if old_string == new_string:
            return self._create_error_result(
                "old_string and new_string are identical. No change needed."
            )
        if old_string == "":
            return self._create_error_result(
                "old_string must not be empty. Use write_file to create or overwrite a file."
            )

        try:
            target = self.sandbox.resolve_real(input_path)
        except PathTraversalError as e:
            return self._create_error_result(str(e))

        if abort_signal and abort_signal.is_aborted():
            return self._create_abort_result()

        try:
            content = self._read_text(target)
        except FileNotFoundError:
            return self._create_error_result(f"File not found: {input_path}")
        except IsADirectoryError:
            return self._create_error_result(f"{input_path} is a directory.")
        except UnicodeDecodeError:
            return self._create_error_result(f"{input_path} is not a valid UTF-8 text file.")
        except OSError as e:
            return self._create_error_result(f"Error editing file: {e}")

        matches = content.count(old_string)
        if matches == 0:
            return self._create_error_result(
                f"String not found in {input_path}. Verify the exact content including "
                "whitespace and newlines."
            )
        if matches > 1:
            return self._create_error_result(
                f"Found {matches} occurrences of old_string in {input_path}. Must be unique: "
                "provide more surrounding context to disambiguate."
            )

        try:
            self._write_text(target, content.replace(old_string, new_string, 1))
        except OSError as e:
            logger.warning("file_edit_failed", path=input_path, error=str(e))
            return self._create_error_result(f"Error editing file: {e}")

        delta = len(new_string.split("\n")) - len(old_string.split("\n"))
        delta_str = f"+{delta}" if delta > 0 else (str(delta) if delta < 0 else "±0")
        logger.info("file_edited", path=str(target), line_delta=delta)
        return ToolResult(
            content=(
                f"Edited: {target} (replaced {len(old_string)} → {len(new_string)} chars, "
                f"{delta_str} lines)"
            )
        )
