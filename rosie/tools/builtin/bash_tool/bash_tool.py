"""
BashTool - Command execution tool.

Commands run through ``bash -c`` in the project root with stdin closed and
stdout/stderr combined. Known destructive patterns are refused before any
process is spawned.
"""

import asyncio
import os
import signal
from typing import Any

from rosie.domain.tools import ToolResult
from rosie.runtime.control import AbortSignal
from rosie.tools.base import BaseTool
from rosie.tools.builtin.bash_tool.blocked_patterns import blocked_message, find_blocked_reason
from rosie.tools.builtin.config import BashConfig
from rosie.tools.sandbox import Sandbox
from rosie.utils.logging import get_logger

logger = get_logger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class BashTool(BaseTool):
    """Command execution tool."""

    def __init__(self, *, config: BashConfig | None = None, sandbox: Sandbox | None = None):
        self._config = config or BashConfig()
        super().__init__(sandbox=sandbox)

    def get_name(self) -> str:
        return "bash"

    def get_description(self) -> str:
        return (
            "Execute a bash command and return stdout + stderr. Commands run in the project "
            "root directory. Dangerous commands are blocked."
        )

    def get_parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The bash command to execute",
                },
                "timeout": {
                    "type": "number",
                    "description": (
                        f"Timeout in milliseconds. Default: {self._config.timeout_ms}"
                    ),
                },
            },
            "required": ["command"],
        }

    def requires_confirmation(self) -> bool:
        return True

    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: AbortSignal | None = None,
    ) -> ToolResult:
        """Execute bash command."""
        command = parameters["command"]
        timeout_ms = int(parameters.get("timeout") or self._config.timeout_ms)

        reason = find_blocked_reason(command)
        if reason:
            logger.warning("bash_command_blocked", reason=reason)
            return self._create_error_result(blocked_message(reason))

        if abort_signal and abort_signal.is_aborted():
            return self._create_abort_result()

        try:
            process = await asyncio.create_subprocess_exec(
                self._config.shell,
                "-c",
                command,
                cwd=str(self.sandbox.root),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            return self._create_error_result(f"Failed to execute: {e}")

        logger.info("bash_command_started", pid=process.pid, timeout_ms=timeout_ms)
        try:
            return await self._supervise(process, timeout_ms, abort_signal)
        finally:
            if process.returncode is None:
                _signal_group(process, signal.SIGKILL)

    async def _supervise(
        self,
        process: asyncio.subprocess.Process,
        timeout_ms: int,
        abort_signal: AbortSignal | None,
    ) -> ToolResult:
        buffer = bytearray()
        reader = asyncio.ensure_future(self._collect(process.stdout, buffer))
        waiter = asyncio.ensure_future(process.wait())
        watchers = {waiter}
        aborter = None
        if abort_signal is not None:
            aborter = asyncio.ensure_future(abort_signal.wait())
            watchers.add(aborter)

        killed_note = None
        try:
            done, _ = await asyncio.wait(
                watchers, timeout=timeout_ms / 1000, return_when=asyncio.FIRST_COMPLETED
            )
            if waiter not in done:
                if aborter is not None and aborter in done:
                    killed_note = "(killed: cancelled)"
                else:
                    killed_note = f"(killed: timeout after {timeout_ms}ms)"
                await self._terminate(process, waiter)

            # Background children may keep the pipe open after bash exits
            try:
                truncated = await asyncio.wait_for(
                    asyncio.shield(reader), timeout=self._config.kill_grace_seconds
                )
            except asyncio.TimeoutError:
                truncated = len(buffer) >= self._config.max_output_bytes
        finally:
            for task in (reader, waiter, aborter):
                if task is not None and not task.done():
                    task.cancel()

        output = buffer.decode("utf-8", errors="replace")
        if truncated:
            output += f"\n... (output truncated at {self._config.max_output_bytes // 1024}KB)"
        if killed_note:
            output += f"\n{killed_note}"

        code = process.returncode
        logger.info("bash_command_finished", pid=process.pid, exit_code=code, killed=bool(killed_note))
        return ToolResult(
            content=output or f"(no output, exit code: {code})",
            is_error=code != 0,
        )

    async def _collect(self, stream: asyncio.StreamReader, buffer: bytearray) -> bool:
        """Read until EOF, keeping at most max_output_bytes; True if anything was dropped."""
        cap = self._config.max_output_bytes
        truncated = False
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                return truncated
            remaining = cap - len(buffer)
            if remaining > 0:
                buffer.extend(chunk[:remaining])
            if len(chunk) > remaining:
                truncated = True

    async def _terminate(self, process: asyncio.subprocess.Process, waiter: asyncio.Future) -> None:
        """SIGTERM, then SIGKILL if the process outlives the grace period."""
        _signal_group(process, signal.SIGTERM)
        try:
            await asyncio.wait_for(asyncio.shield(waiter), timeout=self._config.kill_grace_seconds)
        except asyncio.TimeoutError:
            logger.warning("bash_command_force_kill", pid=process.pid)
            _signal_group(process, signal.SIGKILL)
            await waiter


def _signal_group(process: asyncio.subprocess.Process, sig: int) -> None:
    try:
        os.killpg(process.pid, sig)
    except ProcessLookupError:
        pass
    except PermissionError:
        process.send_signal(sig)
