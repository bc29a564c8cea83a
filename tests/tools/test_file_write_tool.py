"""FileWriteTool tests"""

import os
import stat

import pytest

from rosie.tools.builtin.common.file_operation_base import atomic_write
from rosie.tools.builtin.file_write_tool import FileWriteTool


class TestFileWriteTool:
    @pytest.fixture
    def tool(self, sandbox):
        return FileWriteTool(sandbox=sandbox)

    def test_requires_confirmation(self, tool):
        assert tool.requires_confirmation()

    @pytest.mark.asyncio
    async def test_creates_file_and_parents(self, tool, project):
        result = await tool.execute({"path": "src/pkg/new.py", "content": "a = 1\nb = 2\n"})
        assert not result.is_error
        assert (project / "src" / "pkg" / "new.py").read_text() == "a = 1\nb = 2\n"
        assert "(12 bytes, 3 lines)" in result.content

    @pytest.mark.asyncio
    async def test_overwrites_existing(self, tool, project):
        (project / "a.txt").write_text("old")
        await tool.execute({"path": "a.txt", "content": "new"})
        assert (project / "a.txt").read_text() == "new"

    @pytest.mark.asyncio
    async def test_traversal_is_rejected(self, tool, tmp_path):
        result = await tool.execute({"path": "../escape.txt", "content": "x"})
        assert result.is_error
        assert not (tmp_path / "escape.txt").exists()

    @pytest.mark.asyncio
    async def test_symlinked_directory_outside_root_is_rejected(self, tool, project, tmp_path):
        host_dir = tmp_path / "hostdir"
        host_dir.mkdir()
        os.symlink(host_dir, project / "linkdir")
        result = await tool.execute({"path": "linkdir/planted.txt", "content": "x"})
        assert result.is_error
        assert not (host_dir / "planted.txt").exists()

    @pytest.mark.asyncio
    async def test_directory_target_is_rejected(self, tool, project):
        (project / "pkg").mkdir()
        result = await tool.execute({"path": "pkg", "content": "x"})
        assert result.is_error


def test_atomic_write_preserves_mode(tmp_path):
    target = tmp_path / "script.sh"
    target.write_text("echo old\n")
    os.chmod(target, 0o755)

    atomic_write(target, "echo new\n")

    assert target.read_text() == "echo new\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o755


def test_atomic_write_falls_back_to_copy(tmp_path, monkeypatch):
    target = tmp_path / "data.txt"
    real_replace = os.replace
    calls = []

    def flaky_replace(src, dst):
        calls.append(src)
        if len(calls) == 1:
            raise OSError(18, "Invalid cross-device link")
        return real_replace(src, dst)

    monkeypatch.setattr(os, "replace", flaky_replace)
    atomic_write(target, "payload")

    assert target.read_text() == "payload"
    assert len(calls) == 2
    assert [p.name for p in tmp_path.iterdir()] == ["data.txt"]


def test_atomic_write_keeps_crlf(tmp_path):
    target = tmp_path / "win.txt"
    atomic_write(target, "a\r\nb\r\n")
    assert target.read_bytes() == b"a\r\nb\r\n"
