"""
Model catalog - known models, defaults and endpoints per provider.
"""

from pydantic import BaseModel, ConfigDict

from rosie.config.settings import ProviderName


class ModelInfo(BaseModel):
    """Catalog entry for one model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    provider: ProviderName
    context_window: int
    supports_tools: bool = True
    supports_streaming: bool = True


def _info(id: str, name: str, provider: ProviderName, context_window: int) -> ModelInfo:
    return ModelInfo(id=id, name=name, provider=provider, context_window=context_window)


MODEL_CATALOG: list[ModelInfo] = [
    # xAI
    _info("grok-4", "Grok 4", "xai", 131_072),
    _info("grok-3-beta", "Grok 3 Beta", "xai", 131_072),
    _info("grok-3-mini-beta", "Grok 3 Mini Beta", "xai", 131_072),
    # Anthropic
    _info("claude-opus-4-6", "Claude Opus 4.6", "anthropic", 200_000),
    _info("claude-sonnet-4-6", "Claude Sonnet 4.6", "anthropic", 1_000_000),
    _info("claude-haiku-4-5-20251001", "Claude Haiku 4.5", "anthropic", 200_000),
    # OpenAI
    _info("gpt-4.5-preview", "GPT-4.5 Preview", "openai", 128_000),
    _info("gpt-4.1", "GPT-4.1", "openai", 1_047_576),
    _info("gpt-4.1-mini", "GPT-4.1 Mini", "openai", 1_047_576),
    _info("o3", "o3", "openai", 200_000),
    _info("o3-mini", "o3-mini", "openai", 200_000),
    _info("o4-mini", "o4-mini", "openai", 200_000),
    # Google
    _info("gemini-3.1-pro-preview", "Gemini 3.1 Pro Preview", "google", 1_000_000),
    _info("gemini-3-flash", "Gemini 3 Flash", "google", 1_000_000),
    _info("gemini-2.5-pro", "Gemini 2.5 Pro", "google", 1_048_576),
    _info("gemini-2.5-flash", "Gemini 2.5 Flash", "google", 1_048_576),
    # OpenRouter (pass-through)
    _info("anthropic/claude-sonnet-4-6", "Claude Sonnet 4.6 (via OpenRouter)", "openrouter", 1_000_000),
    _info("x-ai/grok-4", "Grok 4 (via OpenRouter)", "openrouter", 131_072),
    _info("openai/gpt-4.1", "GPT-4.1 (via OpenRouter)", "openrouter", 1_047_576),
    _info("google/gemini-3-flash", "Gemini 3 Flash (via OpenRouter)", "openrouter", 1_000_000),
]

DEFAULT_MODELS: dict[str, str] = {
    "xai": "grok-3-beta",
    "anthropic": "claude-sonnet-4-6",
    "openai": "gpt-4.1-mini",
    "google": "gemini-3-flash",
    "openrouter": "anthropic/claude-sonnet-4-6",
    "custom": "default",
}

PROVIDER_BASE_URLS: dict[str, str] = {
    "xai": "https://api.x.ai/v1",
    "anthropic": "https://api.anthropic.com",
    "openai": "https://api.openai.com/v1",
    "google": "https://generativelanguage.googleapis.com/v1beta",
    "openrouter": "https://openrouter.ai/api/v1",
    "custom": "http://localhost:11434/v1",
}

PROVIDER_DISPLAY_NAMES: dict[str, str] = {
    "xai": "xAI (Grok)",
    "anthropic": "Anthropic",
    "openai": "OpenAI",
    "google": "Google (Gemini)",
    "openrouter": "OpenRouter",
    "custom": "Custom",
}

# Checked in order: more specific prefixes first.
_KEY_PREFIXES: list[tuple[str, ProviderName]] = [
    ("sk-ant-", "anthropic"),
    ("xai-", "xai"),
    ("sk-or-", "openrouter"),
    ("sk-", "openai"),
]


def get_default_model(provider: str) -> str:
    return DEFAULT_MODELS[provider]


def get_models_for_provider(provider: str) -> list[ModelInfo]:
    return [m for m in MODEL_CATALOG if m.provider == provider]


def get_model_info(model_id: str) -> ModelInfo | None:
    return next((m for m in MODEL_CATALOG if m.id == model_id), None)


def get_provider_base_url(provider: str) -> str:
    return PROVIDER_BASE_URLS[provider]


def detect_provider_from_key(api_key: str) -> ProviderName | None:
    """Guess the vendor from an API key prefix."""
    for prefix, provider in _KEY_PREFIXES:
        if api_key.startswith(prefix):
            return provider
    return None


__all__ = [
    "ModelInfo",
    "MODEL_CATALOG",
    "DEFAULT_MODELS",
    "PROVIDER_BASE_URLS",
    "PROVIDER_DISPLAY_NAMES",
    "get_default_model",
    "get_models_for_provider",
    "get_model_info",
    "get_provider_base_url",
    "detect_provider_from_key",
]
