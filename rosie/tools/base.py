"""Base abstractions for tools within the rosie stack."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from rosie.domain.tools import ToolDefinition, ToolInputSchema, ToolResult
from rosie.tools.sandbox import Sandbox, get_sandbox

if TYPE_CHECKING:
    from rosie.runtime.control import AbortSignal


class BaseTool(ABC):
    """Common interface that every concrete tool must implement."""

    def __init__(self, *, sandbox: Sandbox | None = None) -> None:
        self.sandbox = sandbox or get_sandbox()
        self.name = self.get_name()
        self.description = self.get_description()

    @abstractmethod
    def get_name(self) -> str:
        """Return the tool name."""

    @abstractmethod
    def get_description(self) -> str:
        """Return the tool description used for prompting."""

    @abstractmethod
    def get_parameters(self) -> dict[str, Any]:
        """Return the JSON schema describing `execute` parameters."""

    def requires_confirmation(self) -> bool:
        """Whether the user must approve each call before it runs."""
        return False

    @abstractmethod
    async def execute(
        self,
        parameters: dict[str, Any],
        abort_signal: "AbortSignal | None" = None,
    ) -> ToolResult:
        """
        Execute the tool and return a ToolResult.

        Failures are reported as ``ToolResult(is_error=True)``, not raised.

        Args:
            parameters: Tool parameters, already validated against the schema
            abort_signal: Optional abort signal for cancellation
        """

    def get_input_schema(self) -> ToolInputSchema:
        return ToolInputSchema.model_validate(self.get_parameters())

    def get_definition(self) -> ToolDefinition:
        """Construct a `ToolDefinition` for LLM-facing registration."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.get_input_schema(),
        )

    def _create_error_result(self, error: str) -> ToolResult:
        return ToolResult.error(error)

    def _create_abort_result(self) -> ToolResult:
        return ToolResult.error("Operation was aborted")


__all__ = ["BaseTool"]
