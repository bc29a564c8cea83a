"""
Append-only JSONL session recorder.

The recorder is a pure EventBus subscriber: it never calls into the agent
loop. Each session is one ``<session_id>.jsonl`` file whose first line is a
header, followed by one line per recorded event.
"""

import json
import uuid
from pathlib import Path
from typing import IO, Callable

from pydantic import BaseModel

from rosie.events import BaseEvent, EventBus, EventType, SessionStarted
from rosie.utils.logging import get_logger

logger = get_logger(__name__)

RECORDED_EVENTS = (
    EventType.USER_INPUT,
    EventType.AGENT_TEXT_DONE,
    EventType.AGENT_TOOL_REQUEST,
    EventType.TOOL_COMPLETE,
    EventType.AGENT_ERROR,
    EventType.SESSION_CONTEXT_TRIMMED,
)

DEFAULT_MAX_SESSIONS = 20
SESSION_SUFFIX = ".jsonl"


class SessionMeta(BaseModel):
    """Summary of one recorded session file."""

    id: str
    started_at: float
    last_activity: float
    message_count: int
    cwd: str = ""


class SessionRecorder:
    """
    Records a session's events to disk.

    Examples:
        >>> recorder = SessionRecorder(bus, settings.sessions_dir, cwd=str(root))
        >>> recorder.start()
        >>> ...
        >>> recorder.close()
    """

    def __init__(
        self,
        bus: EventBus,
        sessions_dir: Path,
        *,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        cwd: str = "",
    ):
        self.bus = bus
        self.sessions_dir = Path(sessions_dir)
        self.max_sessions = max_sessions
        self.cwd = cwd
        self.session_id = str(uuid.uuid4())
        self.path = self.sessions_dir / f"{self.session_id}{SESSION_SUFFIX}"
        self.message_count = 0
        self._file: IO[str] | None = None
        self._unsubscribers: list[Callable[[], None]] = []

    def start(self) -> None:
        """Open the session file, write the header and begin recording."""
        try:
            self.sessions_dir.mkdir(parents=True, exist_ok=True, mode=0o700)
            self._file = open(self.path, "a", encoding="utf-8")
        except OSError as e:
            logger.warning("session_open_failed", path=str(self.path), error=str(e))
            self._file = None

        started = SessionStarted(session_id=self.session_id, cwd=self.cwd)
        self._write(started.model_dump(mode="json"))

        for event_type in RECORDED_EVENTS:
            self._unsubscribers.append(self.bus.subscribe(event_type, self._record))

        self.bus.publish(started)
        logger.info("session_started", session_id=self.session_id, path=str(self.path))

        self.prune()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        if self._file is not None:
            try:
                self._file.close()
            except OSError as e:
                logger.warning("session_close_failed", path=str(self.path), error=str(e))
            self._file = None

    def prune(self) -> int:
        """Delete the oldest sessions beyond ``max_sessions``; returns how many were removed."""
        sessions = list_sessions(self.sessions_dir)
        removed = 0
        for meta in sessions[self.max_sessions:]:
            if meta.id == self.session_id:
                continue
            try:
                (self.sessions_dir / f"{meta.id}{SESSION_SUFFIX}").unlink()
                removed += 1
            except OSError as e:
                logger.debug("session_prune_failed", session_id=meta.id, error=str(e))
        if removed:
            logger.info("sessions_pruned", removed=removed)
        return removed

    def _record(self, event: BaseEvent) -> None:
        self._write(event.model_dump(mode="json"))
        self.message_count += 1

    def _write(self, entry: dict) -> None:
        if self._file is None:
            return
        try:
            self._file.write(json.dumps(entry) + "\n")
            self._file.flush()
        except (OSError, TypeError, ValueError) as e:
            # Recording must never break the session it records.
            logger.warning("session_write_failed", path=str(self.path), error=str(e))


def list_sessions(sessions_dir: Path) -> list[SessionMeta]:
    """Recorded sessions, most recently active first."""
    sessions_dir = Path(sessions_dir)
    if not sessions_dir.is_dir():
        return []

    files = []
    for entry in sessions_dir.iterdir():
        if entry.suffix != SESSION_SUFFIX or not entry.is_file():
            continue
        try:
            files.append((entry, entry.stat().st_mtime))
        except OSError:
            continue
    files.sort(key=lambda item: item[1], reverse=True)

    return [_read_meta(path, mtime) for path, mtime in files]


def _read_meta(path: Path, mtime: float) -> SessionMeta:
    started_at = mtime
    message_count = 0
    cwd = ""
    try:
        lines = path.read_text(encoding="utf-8").strip().splitlines()
        message_count = len(lines)
        if lines:
            header = json.loads(lines[0])
            started_at = header.get("timestamp") or mtime
            cwd = header.get("cwd") or ""
    except (OSError, ValueError) as e:
        logger.debug("session_meta_unreadable", path=str(path), error=str(e))

    return SessionMeta(
        id=path.stem,
        started_at=started_at,
        last_activity=mtime,
        message_count=message_count,
        cwd=cwd,
    )


__all__ = [
    "SessionRecorder",
    "SessionMeta",
    "list_sessions",
    "RECORDED_EVENTS",
    "DEFAULT_MAX_SESSIONS",
]
