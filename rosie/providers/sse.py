"""
Incremental parser for "data: <json>" server-sent event streams.

Network reads arrive in arbitrary chunks; SSELineBuffer reassembles complete
lines across chunk boundaries and parse_data_line classifies each one. A
malformed payload is an explicit MALFORMED result, which callers skip rather
than failing the whole stream.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rosie.domain.errors import MalformedStreamChunk

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class LineKind(str, Enum):
    PAYLOAD = "payload"
    IGNORED = "ignored"
    DONE = "done"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedLine:
    kind: LineKind
    payload: dict[str, Any] | None = None
    error: MalformedStreamChunk | None = None


_IGNORED = ParsedLine(LineKind.IGNORED)
_DONE = ParsedLine(LineKind.DONE)


class SSELineBuffer:
    """Splits a chunked text stream into complete lines."""

    def __init__(self):
        self._pending = ""

    def feed(self, chunk: str) -> list[str]:
        """Add a chunk; return every line completed by it."""
        self._pending += chunk
        *lines, self._pending = self._pending.split("\n")
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return the trailing partial line, if any, at end of stream."""
        rest, self._pending = self._pending, ""
        rest = rest.rstrip("\r")
        return [rest] if rest.strip() else []


def parse_data_line(line: str) -> ParsedLine:
    """
    Classify one line of the stream.

    Blank lines, comments and non-data fields are IGNORED; ``data: [DONE]`` is
    DONE; a data line with a JSON object is PAYLOAD; anything else on a data
    line is MALFORMED.
    """
    stripped = line.strip()
    if not stripped or not stripped.startswith(DATA_PREFIX):
        return _IGNORED

    data = stripped[len(DATA_PREFIX):].strip()
    if data == DONE_SENTINEL:
        return _DONE
    if not data:
        return _IGNORED

    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        return ParsedLine(LineKind.MALFORMED, error=MalformedStreamChunk(line, e.msg))

    if not isinstance(payload, dict):
        return ParsedLine(
            LineKind.MALFORMED, error=MalformedStreamChunk(line, "payload is not an object")
        )
    return ParsedLine(LineKind.PAYLOAD, payload=payload)


__all__ = ["SSELineBuffer", "ParsedLine", "LineKind", "parse_data_line", "DONE_SENTINEL"]
