"""
GrepTool - Content search tool.

Prefers ripgrep and falls back to grep. The pattern is always passed as an
argument, never interpolated into a shell string.
"""

import shutil
from pathlib import Path
from typing import Any

from rosie.domain.errors import PathTraversalError
from rosie.domain.tools import ToolResult
from rosie.runtime.control import AbortSignal
from rosie.tools.base import BaseTool
from rosie.tools.builtin.common.process import run_command
from rosie.tools.builtin.config import GrepConfig
from rosie.tools.sandbox import Sandbox
from rosie.utils.logging import get_logger

logger = get_logger(__name__)


class GrepTool(BaseTool):
    """Content search tool."""

    def __init__(self, *, config: GrepConfig | None = None, sandbox: Sandbox | None = None):
        super().__init__(sandbox=sandbox)
        self._config = config or GrepConfig()

    def get_name(self) -> str:
        return "grep_search"

    def get_description(self) -> str:
        return (
            "Search file contents using ripgrep (rg) or grep. Returns matching lines with "
            "file paths and line numbers. Supports regex."
        )

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Regex pattern to search for",
                },
                "path": {
                    "type": "string",
                    "description": "Directory or file to search in. Defaults to project root.",
                },
                "glob": {
                    "type": "string",
                    "description": 'File glob pattern to filter (e.g., "*.ts", "*.py")',
                },
                "case_insensitive": {
                    "type": "boolean",
                    "description": "Case insensitive search. Default: false",
                },
            },
            "required": ["pattern"],
        }

    def build_command(
        self,
        pattern: str,
        search_path: Path,
        glob: str | None,
        case_insensitive: bool,
        use_ripgrep: bool,
    ) -> list[str]:
        max_count = f"--max-count={self._config.max_count_per_file}"
        if use_ripgrep:
            argv = ["rg", "--line-number", "--no-heading", "--color=never", max_count]
            if case_insensitive:
                argv.append("-i")
            if glob:
                argv.extend(["--glob", glob])
        else:
            argv = ["grep", "-rn", max_count]
            if case_insensitive:
                argv.append("-i")
            if glob:
                argv.append(f"--include={glob}")
        argv.extend(["--", pattern, str(search_path)])
        return argv

    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """Execute content search."""
        pattern = parameters["pattern"]
        glob = parameters.get("glob") or None
        case_insensitive = bool(parameters.get("case_insensitive") or False)

        try:
            search_path = self.sandbox.resolve(parameters.get("path") or ".")
        except PathTraversalError as e:
            return self._create_error_result(str(e))

        if abort_signal and abort_signal.is_aborted():
            return self._create_abort_result()

        use_ripgrep = shutil.which("rg") is not None
        argv = self.build_command(pattern, search_path, glob, case_insensitive, use_ripgrep)

        try:
            output = await run_command(argv, self._config.timeout_seconds)
        except FileNotFoundError:
            return self._create_error_result(f"Search error: {argv[0]} is not installed")
        except TimeoutError as e:
            return self._create_error_result(f"Search error: {e}")

        # Exit code 1 = no matches (grep/rg convention), 2 = pattern or I/O error
        if output.returncode == 1:
            return ToolResult(content="No matches found.")
        if output.returncode == 2:
            if output.stdout.strip():
                logger.debug("grep_partial_errors", stderr=output.stderr.strip()[:500])
            else:
                return self._create_error_result(
                    f'Invalid search pattern: "{pattern}". Check regex syntax.'
                )
        elif output.returncode != 0:
            return self._create_error_result(f"Search error: {output.stderr.strip()}")

        return ToolResult(content=self._format(output.stdout))

    def _format(self, stdout: str) -> str:
        lines = [line for line in stdout.strip().split("\n") if line]
        if not lines:
            return "No matches found."

        root_prefix = str(self.sandbox.root).rstrip("/") + "/"
        lines = [line[len(root_prefix):] if line.startswith(root_prefix) else line for line in lines]

        limit = self._config.max_results
        if len(lines) > limit:
            return "\n".join(lines[:limit]) + f"\n\n(showing {limit} of {len(lines)} matches)"
        return "\n".join(lines)
