"""Session recorder tests"""

import json
import os
import time

import pytest

from rosie.events import (
    AgentText,
    AgentTextDone,
    EventType,
    ToolComplete,
    UserInput,
)
from rosie.session import SessionRecorder, list_sessions


def read_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


@pytest.fixture
def sessions_dir(tmp_path):
    return tmp_path / "sessions"


class TestSessionRecorder:
    def test_start_writes_header_and_publishes(self, bus, sessions_dir):
        recorder = SessionRecorder(bus, sessions_dir, cwd="/work/app")
        recorder.start()
        recorder.close()

        (header,) = read_lines(recorder.path)
        assert header["type"] == "session:started"
        assert header["session_id"] == recorder.session_id
        assert header["cwd"] == "/work/app"
        assert bus.history(EventType.SESSION_STARTED)[0].session_id == recorder.session_id
        assert recorder.path.name == f"{recorder.session_id}.jsonl"

    def test_records_selected_events_only(self, bus, sessions_dir):
        recorder = SessionRecorder(bus, sessions_dir)
        recorder.start()

        bus.publish(UserInput(message="hi"))
        bus.publish(AgentText(delta="he"))
        bus.publish(AgentTextDone(full_text="hello"))
        bus.publish(
            ToolComplete(tool_id="t1", tool_name="ls", content="a.txt", is_error=False, duration_ms=3)
        )
        recorder.close()
        bus.publish(UserInput(message="after close"))

        entries = read_lines(recorder.path)
        assert [e["type"] for e in entries] == [
            "session:started",
            "user:input",
            "agent:text:done",
            "tool:complete",
        ]
        assert entries[1]["message"] == "hi"
        assert recorder.message_count == 3

    def test_unwritable_directory_does_not_break_session(self, bus, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        recorder = SessionRecorder(bus, blocker)

        recorder.start()
        bus.publish(UserInput(message="still works"))
        recorder.close()

        assert len(bus.history(EventType.SESSION_STARTED)) == 1

    def test_prune_keeps_newest(self, bus, sessions_dir):
        sessions_dir.mkdir()
        now = time.time()
        for i in range(5):
            path = sessions_dir / f"old-{i}.jsonl"
            path.write_text(json.dumps({"type": "session:started", "timestamp": now - 1000}) + "\n")
            os.utime(path, (now - 1000 + i, now - 1000 + i))

        recorder = SessionRecorder(bus, sessions_dir, max_sessions=3)
        recorder.start()
        recorder.close()

        remaining = sorted(p.stem for p in sessions_dir.iterdir())
        assert remaining == sorted([recorder.session_id, "old-3", "old-4"])


def test_list_sessions_newest_first(sessions_dir):
    sessions_dir.mkdir()
    older = sessions_dir / "older.jsonl"
    newer = sessions_dir / "newer.jsonl"
    older.write_text(
        json.dumps({"type": "session:started", "timestamp": 100.0, "cwd": "/a"})
        + "\n"
        + json.dumps({"type": "user:input", "message": "x"})
        + "\n"
    )
    newer.write_text(json.dumps({"type": "session:started", "timestamp": 200.0}) + "\n")
    (sessions_dir / "notes.txt").write_text("ignored")
    os.utime(older, (1000, 1000))
    os.utime(newer, (2000, 2000))

    sessions = list_sessions(sessions_dir)

    assert [s.id for s in sessions] == ["newer", "older"]
    assert sessions[1].started_at == 100.0
    assert sessions[1].cwd == "/a"
    assert sessions[1].message_count == 2
    assert sessions[1].last_activity == 1000


def test_list_sessions_missing_dir(tmp_path):
    assert list_sessions(tmp_path / "nope") == []
