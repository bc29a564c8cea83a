"""Shared utilities: logging and retry helpers."""

from rosie.utils.logging import configure_logging, get_logger
from rosie.utils.retry import retry_async

__all__ = ["configure_logging", "get_logger", "retry_async"]
