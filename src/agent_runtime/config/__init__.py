"""Configuration system for the agent runtime."""

from .parser import ConfigParser
from .schema import AgentConfig, RateLimits
from .settings import RuntimeSettings, configure_logging, get_settings, reset_settings

__all__ = [
    "AgentConfig",
    "ConfigParser",
    "RateLimits",
    "RuntimeSettings",
    "configure_logging",
    "get_settings",
    "reset_settings",
]
