"""
Process settings for the Agent Runtime.

Uses Pydantic Settings to load environment variables.
All settings prefixed with AGENT_RUNTIME_ for namespace isolation.
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeSettings(BaseSettings):
    """
    Settings for the agent runtime.

    All environment variables are prefixed with AGENT_RUNTIME_.
    Example: AGENT_RUNTIME_LOG_LEVEL, AGENT_RUNTIME_TOOL_TIMEOUT_SECONDS
    """

    # Tool Router
    tool_timeout_seconds: float | None = Field(
        None,
        description="Per-invocation tool handler timeout in seconds (unset = none)",
        gt=0,
    )

    # Audit Logger
    audit_buffer_limit: int = Field(
        1000,
        description="Buffered audit entries at which a host should flush",
        ge=1,
    )

    # Agent definitions
    agents_config_path: str | None = Field(
        None,
        description="Path to a YAML file with agent definitions",
    )

    # Logging
    log_level: str = Field(
        "INFO",
        description="Logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="AGENT_RUNTIME_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate log level is valid.

        Args:
            v: Log level string.

        Returns:
            Uppercase log level.

        Raises:
            ValueError: If log level is invalid.
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


_settings: RuntimeSettings | None = None


def get_settings() -> RuntimeSettings:
    """
    Get runtime settings from environment.

    Returns:
        RuntimeSettings instance.
    """
    global _settings
    if _settings is None:
        _settings = RuntimeSettings()  # type: ignore[call-arg]
    return _settings


def reset_settings() -> None:
    """
    Reset settings for testing.

    Clears the cached settings instance.
    """
    global _settings
    _settings = None


def configure_logging(settings: RuntimeSettings | None = None) -> None:
    """
    Configure root logging for a host process.

    Args:
        settings: Settings to read the level from (defaults to get_settings()).
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
