"""
Configuration Schema for Agent Runtime

Defines the per-agent configuration consumed by the gated tool-call path.
Configuration objects are frozen dataclasses: once an agent is wired up,
nothing may change its allowlist, tenant or budgets.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class RateLimits:
    """
    Invocation budgets for a single agent.

    Attributes:
        per_minute: Maximum tool executions in any 60 second window
        per_hour: Maximum tool executions in any 3600 second window
        daily: Maximum tool executions in any 24 hour window
    """

    per_minute: int
    per_hour: int
    daily: int

    def __post_init__(self) -> None:
        """
        Validate budgets after initialization.

        Raises:
            ValueError: If any budget is not a positive integer.
        """
        for name in ("per_minute", "per_hour", "daily"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(
                    f"Invalid rate limit {name}={value!r}. Must be a positive integer"
                )


@dataclass(frozen=True)
class AgentConfig:
    """
    Configuration for a single agent.

    Attributes:
        id: Unique agent identifier
        name: Human-readable agent name
        role: Capability class (e.g. "recruiter", "compliance")
        tenant_id: Tenant the agent is scoped to
        rate_limits: Invocation budgets
        allowed_tools: Tool names the agent may invoke
        approval_required: Tool name -> approver roles that must sign off
    """

    id: str
    name: str
    role: str
    tenant_id: str
    rate_limits: RateLimits
    allowed_tools: tuple[str, ...] = ()
    approval_required: Mapping[str, tuple[str, ...]] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        """
        Validate and normalise agent config after initialization.

        Raises:
            ValueError: If identity fields are empty or the approval
                mapping is malformed.
        """
        for name in ("id", "name", "role", "tenant_id"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"{name} cannot be empty")

        if isinstance(self.allowed_tools, str):
            raise ValueError("allowed_tools must be a list of tool names, not a string")
        object.__setattr__(self, "allowed_tools", tuple(self.allowed_tools))

        approvals: dict[str, tuple[str, ...]] = {}
        for tool, roles in dict(self.approval_required).items():
            if isinstance(roles, str) or not all(isinstance(r, str) for r in roles):
                raise ValueError(
                    f"approval_required['{tool}'] must be a list of role names"
                )
            approvals[tool] = tuple(roles)
        object.__setattr__(self, "approval_required", MappingProxyType(approvals))

        if not isinstance(self.rate_limits, RateLimits):
            raise ValueError(
                f"rate_limits must be RateLimits, got {type(self.rate_limits).__name__}"
            )

    def approvers_for(self, tool: str) -> tuple[str, ...]:
        """
        Get the approver roles required for a tool.

        Args:
            tool: Tool name

        Returns:
            Approver roles, empty when no approval is needed
        """
        return self.approval_required.get(tool, ())
