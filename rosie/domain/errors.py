"""
Exception hierarchy for Rosie.

Tool-level failures are normally converted into ``ToolResult(is_error=True)``
and fed back to the model; these exceptions exist so that the conversion
points have something specific to catch.
"""

from enum import Enum


class RosieError(Exception):
    """Base exception for all Rosie errors."""


# ============================================================================
# Sandbox
# ============================================================================


class SandboxError(RosieError):
    """Sandbox misconfiguration (e.g. the project root set twice)."""


class PathTraversalError(RosieError):
    """A path resolved outside of the sandbox root."""

    def __init__(self, input_path: str, root: str):
        self.input_path = input_path
        self.root = root
        super().__init__(
            f'Path "{input_path}" resolves outside project root "{root}". Access denied.'
        )


# ============================================================================
# Tools
# ============================================================================


class ToolValidationError(RosieError):
    """Tool input failed the declared schema check; the tool was not invoked."""

    def __init__(self, tool_name: str, errors: list[str]):
        self.tool_name = tool_name
        self.errors = errors
        super().__init__(f"Invalid input for {tool_name}: {'; '.join(errors)}")


class ToolTimeoutError(RosieError):
    """A tool exceeded its allotted time."""

    def __init__(self, tool_name: str, timeout_ms: int):
        self.tool_name = tool_name
        self.timeout_ms = timeout_ms
        super().__init__(f"Tool {tool_name} timed out after {timeout_ms}ms")


class ApprovalDeniedError(RosieError):
    """The user declined a confirmation-gated tool call. A normal tool outcome."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__("Tool execution denied by user.")


# ============================================================================
# Providers
# ============================================================================


class ProviderErrorKind(str, Enum):
    """Classification of provider failures."""

    RATE_LIMITED = "rate_limited"
    AUTHENTICATION = "authentication"
    OVERLOADED = "overloaded"
    CANCELLED = "cancelled"
    GENERIC = "provider"


class ProviderError(RosieError):
    """A model provider failed to produce a turn."""

    def __init__(
        self,
        message: str,
        kind: ProviderErrorKind = ProviderErrorKind.GENERIC,
        status_code: int | None = None,
    ):
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)

    @property
    def recoverable(self) -> bool:
        """Authentication failures keep failing until credentials change."""
        return self.kind != ProviderErrorKind.AUTHENTICATION

    @property
    def cancelled(self) -> bool:
        return self.kind == ProviderErrorKind.CANCELLED


class MalformedStreamChunk(RosieError):
    """A single unparsable line inside an otherwise healthy stream."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed stream chunk ({reason}): {line[:120]}")


_FRIENDLY_MESSAGES = {
    ProviderErrorKind.RATE_LIMITED: "Rate limited. Wait a moment and try again.",
    ProviderErrorKind.AUTHENTICATION: (
        "API key is invalid or expired. Check your key and try again."
    ),
    ProviderErrorKind.OVERLOADED: "The provider is overloaded. Try again shortly.",
    ProviderErrorKind.CANCELLED: "Request cancelled.",
}


def error_kind_for(status_code: int | None, message: str) -> ProviderErrorKind:
    """Classify a failure by HTTP status, falling back to the message text."""
    lowered = message.lower()
    if status_code in (401, 403) or (
        "authentication" in lowered
        or "401" in lowered
        or ("invalid" in lowered and "key" in lowered)
    ):
        return ProviderErrorKind.AUTHENTICATION
    if status_code == 429 or (
        "rate limit" in lowered or "429" in lowered or "too many requests" in lowered
    ):
        return ProviderErrorKind.RATE_LIMITED
    if status_code in (503, 529) or "overloaded" in lowered:
        return ProviderErrorKind.OVERLOADED
    return ProviderErrorKind.GENERIC


def friendly_provider_message(kind: ProviderErrorKind, message: str) -> str:
    """User-facing text for a provider failure; generic failures keep their own text."""
    return _FRIENDLY_MESSAGES.get(kind, message)


def classify_provider_error(exc: BaseException) -> ProviderError:
    """
    Map an arbitrary exception onto a classified ``ProviderError``.

    Uses the HTTP status code when the exception carries one, and falls back
    to inspecting the message text.
    """
    if isinstance(exc, ProviderError):
        return exc

    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        response = getattr(exc, "response", None)
        status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int):
        status_code = None

    message = str(exc) or type(exc).__name__
    kind = error_kind_for(status_code, message)
    friendly = friendly_provider_message(kind, message)
    return ProviderError(friendly, kind=kind, status_code=status_code)


# ============================================================================
# Agent loop
# ============================================================================


class AgentBusyError(RosieError):
    """process_message was called while the loop was not idle."""

    def __init__(self, state: str):
        self.state = state
        super().__init__("Agent is busy. Wait for current turn to complete.")


class MaxTurnsExceededError(RosieError):
    """The per-message turn ceiling was exhausted."""

    def __init__(self, max_turns: int):
        self.max_turns = max_turns
        super().__init__(
            f"Hit maximum turns ({max_turns}). Stopping to prevent infinite loop."
        )


class OperationAborted(RosieError):
    """An awaited operation lost the race against an abort signal."""

    def __init__(self, reason: str | None = None):
        self.reason = reason or "Operation cancelled"
        super().__init__(self.reason)


__all__ = [
    "RosieError",
    "SandboxError",
    "PathTraversalError",
    "ToolValidationError",
    "ToolTimeoutError",
    "ApprovalDeniedError",
    "ProviderErrorKind",
    "ProviderError",
    "MalformedStreamChunk",
    "error_kind_for",
    "friendly_provider_message",
    "classify_provider_error",
    "AgentBusyError",
    "MaxTurnsExceededError",
    "OperationAborted",
]
