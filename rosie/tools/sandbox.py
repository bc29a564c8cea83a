"""
Security sandbox for tool execution.

Every file path a tool touches is resolved and validated against a single
project root. Command blocking lives with the bash tool; this module only
deals with paths.
"""

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from rosie.domain.errors import PathTraversalError, SandboxError
from rosie.utils.logging import get_logger

logger = get_logger(__name__)

# Maximum file size for a full read (10 MiB)
MAX_READ_SIZE = 10 * 1024 * 1024

# Leading bytes inspected by the binary check
BINARY_SNIFF_BYTES = 8192


@dataclass(frozen=True)
class SafeStat:
    """Result of a successful stat_safe() call."""

    path: Path
    is_file: bool
    is_directory: bool
    is_symlink: bool
    size: int


class Sandbox:
    """Path resolution bound to one project root."""

    def __init__(self, root: str | os.PathLike[str]):
        self._root = Path(os.path.realpath(os.path.abspath(root)))

    @property
    def root(self) -> Path:
        return self._root

    def contains(self, candidate: str | os.PathLike[str]) -> bool:
        """True when ``candidate`` equals the root or lies strictly inside it."""
        candidate = os.fspath(candidate)
        root = os.fspath(self._root)
        return candidate == root or candidate.startswith(root.rstrip(os.sep) + os.sep)

    def resolve(self, input_path: str) -> Path:
        """
        Resolve ``input_path`` against the root and validate it.

        Relative paths are taken relative to the root; ``..`` segments are
        normalized away before the check. Symbolic links are not followed
        here (see ``stat_safe``).

        Raises:
            PathTraversalError: the normalized path is outside the root
        """
        normalized = os.path.normpath(os.path.join(self._root, os.path.expanduser(input_path)))
        if not self.contains(normalized):
            raise PathTraversalError(input_path, str(self._root))
        return Path(normalized)

    def resolve_real(self, input_path: str) -> Path:
        """
        resolve(), plus a check that following symbolic links anywhere along
        the path still lands inside the root.

        Raises:
            PathTraversalError: the normalized or the link-resolved path is outside the root
        """
        resolved = self.resolve(input_path)
        real = os.path.realpath(resolved)
        if not self.contains(real):
            logger.warning("symlink_escapes_sandbox", path=input_path, target=real)
            raise PathTraversalError(input_path, str(self._root))
        return resolved

    def relative(self, path: str | os.PathLike[str]) -> str:
        """Root-relative display form of an absolute path inside the sandbox."""
        rel = os.path.relpath(path, self._root)
        return "." if rel == os.curdir else rel

    def stat_safe(self, input_path: str) -> SafeStat | None:
        """
        Like resolve(), but also follows symbolic links.

        Returns None (never raises) when the path escapes the root, does not
        exist, or any link along it (the final component or a parent
        directory) points outside the root.
        """
        try:
            resolved = self.resolve(input_path)
            is_symlink = resolved.is_symlink()
            target = os.path.realpath(resolved)
            if not self.contains(target):
                logger.warning("symlink_escapes_sandbox", path=input_path, target=target)
                return None
            target_stat = os.stat(target)
            return SafeStat(
                path=resolved,
                is_file=stat.S_ISREG(target_stat.st_mode),
                is_directory=stat.S_ISDIR(target_stat.st_mode),
                is_symlink=is_symlink,
                size=target_stat.st_size,
            )
        except (PathTraversalError, OSError):
            return None


def is_binary_file(file_path: str | os.PathLike[str]) -> bool:
    """A file is treated as binary if its first 8 KiB contain a null byte."""
    try:
        with open(file_path, "rb") as f:
            head = f.read(BINARY_SNIFF_BYTES)
    except OSError:
        return False
    return b"\x00" in head


# ============================================================================
# Process-wide root
# ============================================================================

_sandbox: Sandbox | None = None


def configure_sandbox(root: str | os.PathLike[str]) -> Sandbox:
    """
    Set the process-wide project root. Allowed once per process; calling it
    again with the same root is a no-op.

    Raises:
        SandboxError: a different root was already configured
    """
    global _sandbox
    candidate = Sandbox(root)
    if _sandbox is not None:
        if _sandbox.root != candidate.root:
            raise SandboxError(
                f"Project root already set to {_sandbox.root}; cannot change it to {candidate.root}"
            )
        return _sandbox
    _sandbox = candidate
    logger.info("sandbox_configured", root=str(candidate.root))
    return _sandbox


def get_sandbox() -> Sandbox:
    """The process-wide sandbox, defaulting to the current working directory."""
    if _sandbox is None:
        return configure_sandbox(os.getcwd())
    return _sandbox


__all__ = [
    "Sandbox",
    "SafeStat",
    "MAX_READ_SIZE",
    "BINARY_SNIFF_BYTES",
    "is_binary_file",
    "configure_sandbox",
    "get_sandbox",
]
