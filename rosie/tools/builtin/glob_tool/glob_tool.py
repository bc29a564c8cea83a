"""
GlobTool - File name search tool.
"""

from typing import Any

from rosie.domain.errors import PathTraversalError
from rosie.domain.tools import ToolResult
from rosie.runtime.control import AbortSignal
from rosie.tools.base import BaseTool
from rosie.tools.builtin.common.process import run_command
from rosie.tools.builtin.config import GlobConfig
from rosie.tools.sandbox import Sandbox

EXCLUDED_DIRS = ("node_modules", ".git", "dist")


class GlobTool(BaseTool):
    """File name search tool backed by ``find -name``."""

    def __init__(self, *, config: GlobConfig | None = None, sandbox: Sandbox | None = None):
        super().__init__(sandbox=sandbox)
        self._config = config or GlobConfig()

    def get_name(self) -> str:
        return "glob_search"

    def get_description(self) -> str:
        return "Find files matching a glob pattern. Uses the find command. Returns file paths."

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": (
                        'Glob-style pattern (e.g., "*.ts", "*.test.js"). Matches file names, '
                        "not full paths."
                    ),
                },
                "path": {
                    "type": "string",
                    "description": "Base directory to search from. Defaults to project root.",
                },
            },
            "required": ["pattern"],
        }

    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """Execute file name search."""
        pattern = parameters["pattern"]
        try:
            search_path = self.sandbox.resolve(parameters.get("path") or ".")
        except PathTraversalError as e:
            return self._create_error_result(str(e))

        if abort_signal and abort_signal.is_aborted():
            return self._create_abort_result()

        argv = ["find", str(search_path)]
        for name in EXCLUDED_DIRS:
            argv.extend(["-not", "-path", f"*/{name}/*"])
        argv.extend(["-type", "f", "-name", pattern])

        try:
            output = await run_command(argv, self._config.timeout_seconds)
        except (FileNotFoundError, TimeoutError) as e:
            return self._create_error_result(f"Search error: {e}")

        files = [line for line in output.stdout.strip().split("\n") if line]
        if output.returncode != 0 and not files:
            return self._create_error_result(f"Search error: {output.stderr.strip()}")
        if not files:
            return ToolResult(content="No files found.")

        relative = sorted(self.sandbox.relative(f) for f in files)
        limit = self._config.max_results
        if len(relative) > limit:
            return ToolResult(
                content="\n".join(relative[:limit])
                + f"\n\n(showing {limit} of {len(relative)} files)"
            )
        return ToolResult(content="\n".join(relative))
