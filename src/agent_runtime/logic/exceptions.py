"""
Agent runtime domain exceptions.

Only wiring mistakes raise to the caller. Policy denials, pending
approvals, rate-limit exceedances and tool failures are returned as
results from the gated call path, never raised.
"""


class AgentRuntimeError(Exception):
    """Base exception for agent runtime errors."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        """
        Initialize agent runtime error.

        Args:
            message: Error message.
            retryable: Whether the operation can be retried.
        """
        self.message = message
        self.retryable = retryable
        super().__init__(message)


class AgentAlreadyRegisteredError(AgentRuntimeError):
    """An agent with the same id is already registered."""

    def __init__(self, agent_id: str) -> None:
        """
        Initialize duplicate registration error.

        Args:
            agent_id: The id that is already taken.
        """
        self.agent_id = agent_id
        super().__init__(f'Agent with id "{agent_id}" is already registered')


class AgentNotFoundError(AgentRuntimeError, KeyError):
    """No agent with the requested id is registered."""

    def __init__(self, agent_id: str) -> None:
        """
        Initialize missing agent error.

        Args:
            agent_id: The id that was looked up.
        """
        self.agent_id = agent_id
        super().__init__(f'Agent with id "{agent_id}" not found in registry')

    def __str__(self) -> str:
        return self.message


class ConfigurationError(AgentRuntimeError, ValueError):
    """Agent definition file is malformed."""

    def __init__(self, message: str) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error message describing the invalid configuration.
        """
        super().__init__(message, retryable=False)


class ToolTimeoutError(AgentRuntimeError):
    """A tool handler did not finish within the configured timeout."""

    def __init__(self, tool: str, timeout_seconds: float) -> None:
        """
        Initialize tool timeout error.

        Args:
            tool: Name of the tool that timed out.
            timeout_seconds: Timeout that was exceeded.
        """
        self.tool = tool
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f'Tool "{tool}" timed out after {timeout_seconds}s',
            retryable=True,
        )
