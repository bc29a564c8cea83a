"""
Structured logging for Rosie.

All modules obtain a logger through ``get_logger(__name__)`` and log an
event name plus keyword context:

    logger.info("llm_request", model=model, messages_count=3)

Output goes to stderr so it never interleaves with console output.
"""

import logging
import sys
from typing import Any

import structlog

SENSITIVE_KEYS = ("api_key", "apikey", "authorization", "password", "secret", "token")

# Token *counts* are useful telemetry and must never be redacted.
NON_SENSITIVE_KEYS = frozenset(
    {
        "tokens",
        "total_tokens",
        "input_tokens",
        "output_tokens",
        "prompt_tokens",
        "completion_tokens",
        "max_tokens",
        "context_window_tokens",
    }
)

REDACTED = "***REDACTED***"

_configured = False


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    if lowered in NON_SENSITIVE_KEYS:
        return False
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def filter_sensitive_data(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor that redacts credentials from the event dict."""
    for key in list(event_dict.keys()):
        if key == "event":
            continue
        if _is_sensitive(key) and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ERROR)
        json_output: Render JSON lines instead of the console renderer
    """
    global _configured

    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            filter_sensitive_data,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger bound to ``name``."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger", "filter_sensitive_data", "REDACTED"]
