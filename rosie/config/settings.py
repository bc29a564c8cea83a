"""
Global settings from environment variables.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

ProviderName = Literal["anthropic", "xai", "openai", "google", "openrouter", "custom"]

# Conventional vendor variables consulted when ROSIE_API_KEY is unset.
VENDOR_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "xai": "XAI_API_KEY",
    "google": "GOOGLE_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}


def _default_sessions_dir() -> Path:
    return Path.home() / ".config" / "rosie" / "sessions"


class RosieSettings(BaseSettings):
    """
    Global configuration loaded from environment variables.

    Environment variables should be prefixed with ROSIE_
    Example: ROSIE_PROVIDER=openai, ROSIE_MODEL=gpt-4.1-mini
    """

    model_config = SettingsConfigDict(
        env_prefix="ROSIE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # Core settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_json: bool = False

    # Provider settings
    provider: ProviderName = "anthropic"
    model: str | None = None
    api_key: SecretStr | None = None
    base_url: str | None = None

    # Agent loop settings
    max_tokens: int = Field(default=8192, ge=1)
    max_turns: int = Field(default=25, ge=1)
    tool_timeout_ms: int = Field(default=120_000, ge=1)
    confirm_destructive: bool = True
    context_window_tokens: int = Field(default=180_000, ge=1)

    # Sandbox
    project_root: Path | None = None

    # Session log
    sessions_dir: Path = Field(default_factory=_default_sessions_dir)
    max_sessions: int = Field(default=20, ge=1)

    def resolve_api_key(self, provider: str | None = None) -> str | None:
        """Resolve API key: ROSIE_API_KEY > vendor environment variable."""
        if self.api_key:
            return self.api_key.get_secret_value()
        env_name = VENDOR_KEY_ENV.get(provider or self.provider)
        if env_name:
            return os.getenv(env_name)
        return None


# Global settings instance (singleton)
settings = RosieSettings()


__all__ = ["RosieSettings", "ProviderName", "settings"]
