"""
Configuration Parser for Agent Runtime

Loads agent definitions from a YAML file and converts them to typed
AgentConfig objects. Supports environment variable expansion using
${VAR} or ${VAR:-default} syntax.

Example file:

    agents:
      - id: recruiter-1
        name: "Recruiter"
        role: recruiter
        tenantId: ${TENANT_ID:-t1}
        allowedTools: [consultant.search, email.send]
        approvalRequired:
          email.send: [account_manager]
        rateLimits: {perMinute: 5, perHour: 50, daily: 200}
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from ..logic.exceptions import ConfigurationError
from .schema import AgentConfig, RateLimits


class ConfigParser:
    """
    YAML agent definition parser with environment variable expansion.

    Usage:
        parser = ConfigParser("config/agents.yaml")
        configs = parser.load()
    """

    def __init__(self, config_path: str | Path) -> None:
        """
        Initialize parser with configuration file path.

        Args:
            config_path: Path to YAML configuration file

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

    def load(self) -> list[AgentConfig]:
        """
        Load and parse configuration file.

        Returns:
            Parsed agent configurations, in file order

        Raises:
            yaml.YAMLError: If YAML parsing fails
            ConfigurationError: If configuration is invalid
        """
        with open(self.config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if not isinstance(raw_config, dict):
            raise ConfigurationError(
                f"Invalid configuration: expected dict, got {type(raw_config).__name__}"
            )

        expanded = self._expand_env_vars(raw_config)
        return self._parse_agents(expanded)

    def _expand_env_vars(self, config: Any) -> Any:
        """
        Recursively expand ${ENV_VAR} and ${ENV_VAR:-default} placeholders.

        Args:
            config: Configuration value (can be dict, list, str, etc.)

        Returns:
            Configuration with environment variables expanded
        """
        pattern = re.compile(r"\$\{([^}:]+)(?::-(.*?))?\}")

        def replacer(match: re.Match[str]) -> str:
            return os.getenv(match.group(1), match.group(2) or "")

        def expand_value(value: Any) -> Any:
            if isinstance(value, str):
                return pattern.sub(replacer, value)
            elif isinstance(value, dict):
                return {k: expand_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [expand_value(v) for v in value]
            else:
                return value

        return expand_value(config)

    def _parse_agents(self, raw: dict[str, Any]) -> list[AgentConfig]:
        """
        Parse the ``agents`` list into AgentConfig objects.

        Args:
            raw: Raw configuration dictionary

        Returns:
            Validated agent configurations

        Raises:
            ConfigurationError: If the list is missing, an entry is invalid,
                or ids are duplicated
        """
        agents_raw = raw.get("agents")
        if not isinstance(agents_raw, list) or not agents_raw:
            raise ConfigurationError("No agents defined in configuration")

        configs = [self._parse_agent(index, a) for index, a in enumerate(agents_raw)]

        agent_ids = [c.id for c in configs]
        duplicates = {i for i in agent_ids if agent_ids.count(i) > 1}
        if duplicates:
            raise ConfigurationError(f"Agent IDs must be unique, duplicated: {sorted(duplicates)}")

        return configs

    def _parse_agent(self, index: int, raw: Any) -> AgentConfig:
        """
        Parse a single agent definition.

        Args:
            index: Position in the agents list (for error messages)
            raw: Raw agent dictionary

        Returns:
            Parsed agent configuration
        """
        if not isinstance(raw, dict):
            raise ConfigurationError(f"agents[{index}] must be a mapping")

        try:
            limits_raw = raw["rateLimits"]
            return AgentConfig(
                id=str(raw["id"]),
                name=str(raw["name"]),
                role=str(raw["role"]),
                tenant_id=str(raw["tenantId"]),
                rate_limits=RateLimits(
                    per_minute=self._budget(limits_raw["perMinute"]),
                    per_hour=self._budget(limits_raw["perHour"]),
                    daily=self._budget(limits_raw["daily"]),
                ),
                allowed_tools=tuple(raw.get("allowedTools") or []),
                approval_required=raw.get("approvalRequired") or {},
            )
        except KeyError as e:
            raise ConfigurationError(
                f"agents[{index}] is missing required key {e.args[0]!r}"
            ) from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"agents[{index}] is invalid: {e}") from e

    @staticmethod
    def _budget(value: Any) -> Any:
        """
        Normalise a rate budget value.

        Digit strings (e.g. from ${VAR} expansion) become ints. Everything
        else passes through unchanged for RateLimits to validate, so floats
        and booleans are rejected rather than truncated.

        Args:
            value: Raw budget from YAML

        Returns:
            Budget value for RateLimits
        """
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value
