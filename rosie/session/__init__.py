"""
Session persistence (JSONL event recording).
"""

from .recorder import DEFAULT_MAX_SESSIONS, RECORDED_EVENTS, SessionMeta, SessionRecorder, list_sessions

__all__ = [
    "SessionRecorder",
    "SessionMeta",
    "list_sessions",
    "RECORDED_EVENTS",
    "DEFAULT_MAX_SESSIONS",
]
