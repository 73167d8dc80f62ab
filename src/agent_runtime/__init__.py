"""
Agent Runtime - authorization and accountability layer for agent tool calls

This package provides:
- A single gated tool-call path (policy, approval, rate limit, dispatch)
- An ordered-rule policy engine with tenant isolation
- A per-agent sliding-window rate limiter (minute/hour/day)
- A tool router with timing, timeouts and failure capture
- An append-only, queryable audit ledger
- An agent registry for orchestrators
"""

from .agent import Agent
from .config import AgentConfig, ConfigParser, RateLimits, RuntimeSettings, get_settings
from .gateway import ExecutionLog, ToolCallGateway
from .logic.audit_logger import AuditFilter, AuditLogger
from .logic.exceptions import (
    AgentAlreadyRegisteredError,
    AgentNotFoundError,
    AgentRuntimeError,
    ConfigurationError,
    ToolTimeoutError,
)
from .logic.rate_limiter import RateLimitCheck, RateLimiter
from .models import (
    AgentContext,
    AgentResult,
    AuditEntry,
    AuditStatus,
    EscalationEvent,
    EscalationSummary,
    PolicyDecision,
    ToolCall,
    ToolCallOutcome,
    ToolResult,
)
from .policy import PolicyEngine
from .registry import AgentRegistry
from .runtime import AgentRuntime
from .tools import ToolRouter

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "AgentAlreadyRegisteredError",
    "AgentConfig",
    "AgentContext",
    "AgentNotFoundError",
    "AgentRegistry",
    "AgentResult",
    "AgentRuntime",
    "AgentRuntimeError",
    "AuditEntry",
    "AuditFilter",
    "AuditLogger",
    "AuditStatus",
    "ConfigParser",
    "ConfigurationError",
    "EscalationEvent",
    "EscalationSummary",
    "ExecutionLog",
    "PolicyDecision",
    "PolicyEngine",
    "RateLimitCheck",
    "RateLimiter",
    "RateLimits",
    "RuntimeSettings",
    "ToolCall",
    "ToolCallGateway",
    "ToolCallOutcome",
    "ToolResult",
    "ToolRouter",
    "ToolTimeoutError",
    "get_settings",
]
