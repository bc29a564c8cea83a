"""Settings and AgentConfig tests"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from rosie.config.schema import AgentConfig
from rosie.config.settings import RosieSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in (
        "ROSIE_API_KEY",
        "ROSIE_PROVIDER",
        "ROSIE_MAX_TURNS",
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


class TestRosieSettings:
    def test_defaults(self):
        settings = RosieSettings()
        assert settings.provider == "anthropic"
        assert settings.max_turns == 25
        assert settings.confirm_destructive is True
        assert settings.sessions_dir == Path.home() / ".config" / "rosie" / "sessions"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ROSIE_PROVIDER", "openai")
        monkeypatch.setenv("ROSIE_MAX_TURNS", "3")
        settings = RosieSettings()
        assert settings.provider == "openai"
        assert settings.max_turns == 3

    def test_unknown_provider_rejected(self, monkeypatch):
        monkeypatch.setenv("ROSIE_PROVIDER", "acme")
        with pytest.raises(ValidationError):
            RosieSettings()

    def test_api_key_precedence(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "vendor-key")
        assert RosieSettings().resolve_api_key("anthropic") == "vendor-key"

        monkeypatch.setenv("ROSIE_API_KEY", "rosie-key")
        assert RosieSettings().resolve_api_key("anthropic") == "rosie-key"

    def test_no_key_for_custom_provider(self):
        assert RosieSettings().resolve_api_key("custom") is None


def test_agent_config_from_settings(monkeypatch):
    monkeypatch.setenv("ROSIE_MAX_TURNS", "7")
    config = AgentConfig.from_settings(RosieSettings())
    assert config.max_turns_per_message == 7
    assert config.tool_timeout_ms == 120_000


def test_agent_config_is_frozen():
    config = AgentConfig()
    with pytest.raises(ValidationError):
        config.max_tokens = 1
