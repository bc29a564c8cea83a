"""
LSTool - Directory listing tool.
"""

import os
from pathlib import Path
from typing import Any

from rosie.domain.errors import PathTraversalError
from rosie.domain.tools import ToolResult
from rosie.runtime.control import AbortSignal
from rosie.tools.base import BaseTool
from rosie.tools.builtin.config import LSConfig
from rosie.tools.sandbox import Sandbox

SKIP_DIRS = frozenset({"node_modules", ".git", "dist", ".next", "__pycache__", ".venv", "venv"})

# Hidden entries that are still listed
VISIBLE_DOTFILES = frozenset({".env.example"})


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


class LSTool(BaseTool):
    """Directory listing tool."""

    def __init__(self, *, config: LSConfig | None = None, sandbox: Sandbox | None = None):
        self._config = config or LSConfig()
        super().__init__(sandbox=sandbox)

    def get_name(self) -> str:
        return "list_directory"

    def get_description(self) -> str:
        return (
            "List files and directories at a given path. Shows directories first, then "
            "files with sizes. Useful for understanding project structure."
        )

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Directory path to list. Defaults to project root.",
                },
                "recursive": {
                    "type": "boolean",
                    "description": (
                        f"List recursively (max {self._config.max_depth} levels deep). "
                        "Default: false"
                    ),
                },
            },
            "required": [],
        }

    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """Execute directory listing."""
        input_path = parameters.get("path") or "."
        recursive = bool(parameters.get("recursive") or False)

        try:
            target = self.sandbox.resolve(input_path)
        except PathTraversalError as e:
            return self._create_error_result(str(e))

        if not target.exists():
            return self._create_error_result(f"Directory not found: {input_path}")
        if not target.is_dir():
            return self._create_error_result(f"Not a directory: {input_path}")

        lines: list[str] = []
        max_depth = self._config.max_depth if recursive else 1
        try:
            self._walk(target, "", lines, max_depth, 0, abort_signal)
        except OSError as e:
            return self._create_error_result(f"Error listing directory: {e}")

        if not lines:
            return ToolResult(content="(empty directory)")
        return ToolResult(content="\n".join(lines))

    def _walk(
        self,
        directory: Path,
        prefix: str,
        lines: list[str],
        max_depth: int,
        depth: int,
        abort_signal: AbortSignal | None,
    ) -> bool:
        """Append entries of ``directory``; returns False once the entry cap is hit."""
        if depth >= max_depth:
            return True
        if abort_signal and abort_signal.is_aborted():
            return False

        with os.scandir(directory) as it:
            entries = sorted(
                it, key=lambda e: (not e.is_dir(follow_symlinks=False), e.name.lower(), e.name)
            )

        for entry in entries:
            if entry.name.startswith(".") and entry.name not in VISIBLE_DOTFILES:
                continue
            if len(lines) >= self._config.max_entries:
                lines.append(f"... (truncated at {self._config.max_entries} entries)")
                return False

            if entry.is_dir(follow_symlinks=False):
                if entry.name in SKIP_DIRS:
                    lines.append(f"{prefix}{entry.name}/  (skipped)")
                    continue
                lines.append(f"{prefix}{entry.name}/")
                if not self._walk(
                    Path(entry.path), prefix + "  ", lines, max_depth, depth + 1, abort_signal
                ):
                    return False
            else:
                try:
                    lines.append(f"{prefix}{entry.name}  {format_size(entry.stat().st_size)}")
                except OSError:
                    lines.append(f"{prefix}{entry.name}")
        return True
