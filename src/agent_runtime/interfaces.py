"""
Component interfaces for the gated tool-call path.

The gateway depends on these protocols rather than on the concrete
PolicyEngine, RateLimiter, ToolRouter and AuditLogger, so any of them can
be swapped for an alternate or mock implementation.
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .config.schema import AgentConfig, RateLimits
from .models import AuditEntry, PolicyDecision, ToolCall, ToolResult

if TYPE_CHECKING:
    from .logic.rate_limiter import RateLimitCheck

ToolHandler = Callable[
    [dict[str, Any]],
    Awaitable[ToolResult | dict[str, Any]] | ToolResult | dict[str, Any],
]


@runtime_checkable
class PolicyDecider(Protocol):
    """Decides allow, deny or require-approval for a tool call."""

    def check(self, config: AgentConfig, tool_call: ToolCall) -> PolicyDecision: ...


@runtime_checkable
class RateGate(Protocol):
    """Per-agent invocation budget."""

    def configure(self, agent_id: str, limits: RateLimits) -> None: ...

    def acquire(self, agent_id: str) -> "RateLimitCheck": ...


@runtime_checkable
class ToolDispatcher(Protocol):
    """Executes a tool call against a registered handler."""

    async def execute(self, tool_call: ToolCall) -> ToolResult: ...


@runtime_checkable
class AuditSink(Protocol):
    """Append-only destination for audit entries."""

    def log(self, entry: AuditEntry) -> AuditEntry: ...
