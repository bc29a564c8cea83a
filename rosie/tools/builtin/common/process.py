"""Argument-list subprocess helper for the search tools (never a shell string)."""

import asyncio
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CommandOutput:
    returncode: int
    stdout: str
    stderr: str


async def run_command(argv: list[str], timeout_seconds: float, cwd: Path | None = None) -> CommandOutput:
    """
    Run ``argv`` and capture its output.

    Raises:
        FileNotFoundError: the executable is not installed
        TimeoutError: the command did not finish in time (it is killed)
    """
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
    )

    try:
        stdout_data, stderr_data = await asyncio.wait_for(
            process.communicate(), timeout=timeout_seconds
        )
    except asyncio.TimeoutError as error:
        process.kill()
        await process.wait()
        raise TimeoutError(f"{argv[0]} timed out after {timeout_seconds}s") from error
    except BaseException:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    return CommandOutput(
        returncode=process.returncode or 0,
        stdout=(stdout_data or b"").decode("utf-8", errors="replace"),
        stderr=(stderr_data or b"").decode("utf-8", errors="replace"),
    )


__all__ = ["CommandOutput", "run_command"]
