"""
Configuration for Rosie.

- Global settings from environment variables
- Per-loop AgentConfig
"""

from rosie.config.schema import AgentConfig
from rosie.config.settings import ProviderName, RosieSettings, settings

__all__ = ["AgentConfig", "ProviderName", "RosieSettings", "settings"]
