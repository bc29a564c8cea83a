"""
Provider adapters.

create_provider() is the single entry point; the rest of the application
never instantiates a concrete adapter directly.
"""

from pydantic import BaseModel, ConfigDict, SecretStr

from rosie.config.settings import ProviderName

from .anthropic import AnthropicProvider
from .base import (
    Done,
    ErrorEvent,
    Provider,
    ProviderEvent,
    TextDelta,
    ToolCallDelta,
    ToolCallEnd,
    ToolCallStart,
)
from .catalog import (
    MODEL_CATALOG,
    PROVIDER_DISPLAY_NAMES,
    ModelInfo,
    detect_provider_from_key,
    get_default_model,
    get_model_info,
    get_models_for_provider,
    get_provider_base_url,
)
from .openai_compatible import OpenAICompatibleProvider

OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/dopexthrone/moth",
    "X-Title": "Rosie CLI",
}


class ProviderConfig(BaseModel):
    """What the user supplies to connect to a model vendor."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    provider: ProviderName
    api_key: SecretStr | None = None
    model: str | None = None
    base_url: str | None = None


def create_provider(config: ProviderConfig) -> Provider:
    """Create the adapter for ``config.provider``."""
    model = config.model or get_default_model(config.provider)

    if config.provider == "anthropic":
        return AnthropicProvider(
            model_name=model, api_key=config.api_key, base_url=config.base_url
        )

    display_name = PROVIDER_DISPLAY_NAMES[config.provider]
    if config.provider == "custom" and config.base_url:
        display_name = config.base_url

    return OpenAICompatibleProvider(
        name=config.provider,
        display_name=display_name,
        model_name=model,
        api_key=config.api_key,
        base_url=config.base_url or get_provider_base_url(config.provider),
        extra_headers=dict(OPENROUTER_HEADERS) if config.provider == "openrouter" else {},
    )


__all__ = [
    "Provider",
    "ProviderConfig",
    "OPENROUTER_HEADERS",
    "ProviderEvent",
    "create_provider",
    "AnthropicProvider",
    "OpenAICompatibleProvider",
    "TextDelta",
    "ToolCallStart",
    "ToolCallDelta",
    "ToolCallEnd",
    "Done",
    "ErrorEvent",
    "MODEL_CATALOG",
    "ModelInfo",
    "detect_provider_from_key",
    "get_default_model",
    "get_model_info",
    "get_models_for_provider",
    "get_provider_base_url",
]
