"""
Per-tool limits for the builtin tools.

A value passed to the constructor wins; otherwise the matching ROSIE_*
environment variable is read, and failing that the default below applies.
"""

import os
from dataclasses import dataclass, field


def _get_env_int(key: str, default: str) -> int:
    """Get int from environment variable."""
    return int(os.getenv(key, default))


def _get_env_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.getenv(key, default)


@dataclass
class FileReadConfig:
    """Configuration for FileReadTool."""

    default_line_limit: int = field(
        default_factory=lambda: _get_env_int("ROSIE_FILE_READ_LINE_LIMIT", "2000")
    )
    max_line_length: int = field(
        default_factory=lambda: _get_env_int("ROSIE_FILE_READ_MAX_LINE_LENGTH", "2000")
    )


@dataclass
class LSConfig:
    """Configuration for LSTool."""

    max_entries: int = field(default_factory=lambda: _get_env_int("ROSIE_LS_MAX_ENTRIES", "500"))
    max_depth: int = field(default_factory=lambda: _get_env_int("ROSIE_LS_MAX_DEPTH", "3"))


@dataclass
class GrepConfig:
    """Configuration for GrepTool."""

    timeout_seconds: int = field(default_factory=lambda: _get_env_int("ROSIE_GREP_TIMEOUT", "30"))
    max_count_per_file: int = field(
        default_factory=lambda: _get_env_int("ROSIE_GREP_MAX_COUNT", "200")
    )
    max_results: int = field(default_factory=lambda: _get_env_int("ROSIE_GREP_MAX_RESULTS", "100"))


@dataclass
class GlobConfig:
    """Configuration for GlobTool."""

    timeout_seconds: int = field(default_factory=lambda: _get_env_int("ROSIE_GLOB_TIMEOUT", "30"))
    max_results: int = field(default_factory=lambda: _get_env_int("ROSIE_GLOB_MAX_RESULTS", "100"))


@dataclass
class BashConfig:
    """Configuration for BashTool."""

    timeout_ms: int = field(default_factory=lambda: _get_env_int("ROSIE_BASH_TIMEOUT_MS", "120000"))
    max_output_bytes: int = field(
        default_factory=lambda: _get_env_int("ROSIE_BASH_MAX_OUTPUT_BYTES", str(200 * 1024))
    )
    kill_grace_seconds: int = field(
        default_factory=lambda: _get_env_int("ROSIE_BASH_KILL_GRACE_SECONDS", "5")
    )
    shell: str = field(default_factory=lambda: _get_env_str("ROSIE_BASH_SHELL", "bash"))


__all__ = [
    "FileReadConfig",
    "LSConfig",
    "GrepConfig",
    "GlobConfig",
    "BashConfig",
]
