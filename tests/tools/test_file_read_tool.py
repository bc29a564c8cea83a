"""FileReadTool tests"""

import os

import pytest

from rosie.runtime.control import AbortSignal
from rosie.tools.builtin.config import FileReadConfig
from rosie.tools.builtin.file_read_tool import FileReadTool


class TestFileReadTool:
    @pytest.fixture
    def tool(self, sandbox):
        return FileReadTool(sandbox=sandbox)

    @pytest.mark.asyncio
    async def test_numbered_lines(self, tool, project):
        (project / "hello.py").write_text("print('a')\nprint('b')\n")
        result = await tool.execute({"path": "hello.py"})
        assert not result.is_error
        assert result.content == "1\tprint('a')\n2\tprint('b')"

    @pytest.mark.asyncio
    async def test_offset_and_limit_add_footer(self, tool, project):
        (project / "lines.txt").write_text("".join(f"line {i}\n" for i in range(1, 11)))
        result = await tool.execute({"path": "lines.txt", "offset": 3, "limit": 2})
        assert result.content.splitlines() == [
            "3\tline 3",
            "4\tline 4",
            "(showing lines 3-4 of 10)",
        ]

    @pytest.mark.asyncio
    async def test_long_lines_are_truncated(self, sandbox, project):
        tool = FileReadTool(sandbox=sandbox, config=FileReadConfig(max_line_length=5))
        (project / "wide.txt").write_text("abcdefghij\n")
        result = await tool.execute({"path": "wide.txt"})
        assert result.content == "1\tabcde..."

    @pytest.mark.asyncio
    async def test_empty_file(self, tool, project):
        (project / "empty.txt").write_text("")
        result = await tool.execute({"path": "empty.txt"})
        assert result.content == "(empty file)"
        assert not result.is_error

    @pytest.mark.asyncio
    async def test_missing_file(self, tool):
        result = await tool.execute({"path": "nope.txt"})
        assert result.is_error
        assert result.content == "File not found: nope.txt"

    @pytest.mark.asyncio
    async def test_traversal_is_rejected(self, tool):
        result = await tool.execute({"path": "../outside.txt"})
        assert result.is_error
        assert "outside project root" in result.content

    @pytest.mark.asyncio
    async def test_symlink_escape_is_rejected(self, tool, project, tmp_path):
        os.symlink(tmp_path / "outside.txt", project / "leak.txt")
        result = await tool.execute({"path": "leak.txt"})
        assert result.is_error
        assert "symbolic link" in result.content
        assert "secret" not in result.content

    @pytest.mark.asyncio
    async def test_directory_is_rejected(self, tool, project):
        (project / "pkg").mkdir()
        result = await tool.execute({"path": "pkg"})
        assert result.is_error
        assert "is a directory" in result.content

    @pytest.mark.asyncio
    async def test_binary_is_rejected(self, tool, project):
        (project / "image.bin").write_bytes(b"\x89PNG\x00\x00")
        result = await tool.execute({"path": "image.bin"})
        assert result.is_error
        assert "binary" in result.content

    @pytest.mark.asyncio
    async def test_aborted_before_start(self, tool, project):
        (project / "a.txt").write_text("x\n")
        signal = AbortSignal()
        signal.abort()
        result = await tool.execute({"path": "a.txt"}, abort_signal=signal)
        assert result.is_error
        assert result.content == "Operation was aborted"


@pytest.mark.asyncio
async def test_symlinked_directory_cannot_leak_host_files(sandbox, project, tmp_path):
    host_dir = tmp_path / "hostdir"
    host_dir.mkdir()
    (host_dir / "secret.txt").write_text("TOP-SECRET\n")
    os.symlink(host_dir, project / "linkdir")

    result = await FileReadTool(sandbox=sandbox).execute({"path": "linkdir/secret.txt"})

    assert result.is_error
    assert "TOP-SECRET" not in result.content
    assert result.content.startswith("Access denied")
