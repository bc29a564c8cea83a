"""Shared fixtures."""

from pathlib import Path

import pytest

from rosie.events import EventBus
from rosie.tools.sandbox import Sandbox


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project root inside the pytest temp dir, with the sandbox-escape target beside it."""
    root = tmp_path / "project"
    root.mkdir()
    (tmp_path / "outside.txt").write_text("secret\n")
    return root


@pytest.fixture
def sandbox(project: Path) -> Sandbox:
    return Sandbox(project)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()
