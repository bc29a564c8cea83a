"""Shared helpers for file operation tools."""

import os
import shutil
import tempfile
from pathlib import Path

from rosie.tools.base import BaseTool
from rosie.utils.logging import get_logger

logger = get_logger(__name__)


def atomic_write(target: Path, content: str) -> None:
    """
    Write ``content`` to ``target`` so the target is never observed half-written.

    The data goes to a temporary file in the system scratch directory first,
    then replaces the target in one rename. When the rename crosses devices,
    the temp file is copied next to the target and renamed from there.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".rosie-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        _apply_mode(Path(tmp_name), target)
        try:
            os.replace(tmp_name, target)
        except OSError:
            logger.debug("atomic_write_cross_device", target=str(target))
            _copy_then_replace(Path(tmp_name), target)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def _apply_mode(tmp: Path, target: Path) -> None:
    # mkstemp creates 0600 files; keep the existing mode or honour the umask
    if target.exists():
        shutil.copymode(target, tmp)
        return
    umask = os.umask(0)
    os.umask(umask)
    os.chmod(tmp, 0o666 & ~umask)


def _copy_then_replace(source: Path, target: Path) -> None:
    sibling_fd, sibling = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
    )
    os.close(sibling_fd)
    try:
        shutil.copyfile(source, sibling)
        shutil.copymode(source, sibling)
        os.replace(sibling, target)
    finally:
        if os.path.exists(sibling):
            os.unlink(sibling)


class FileOperationBaseTool(BaseTool):
    """Base class that provides shared read/write helpers."""

    def _read_text(self, path: Path) -> str:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()

    def _write_text(self, path: Path, content: str) -> None:
        atomic_write(path, content)


__all__ = ["FileOperationBaseTool", "atomic_write"]
