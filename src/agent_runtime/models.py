"""
Runtime records exchanged along the gated tool-call path.

ToolCall, PolicyDecision and ToolResult are transient per-call values.
AuditEntry and EscalationEvent are frozen once built and are the records
handed to observability and escalation consumers.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditStatus(str, Enum):
    """Outcome recorded for a gated call attempt."""

    SUCCESS = "success"
    FAILURE = "failure"
    ESCALATED = "escalated"
    DENIED = "denied"


class ToolCall(BaseModel):
    """A single proposed tool invocation."""

    agent_id: str = Field(..., description="Calling agent id")
    agent_role: str = Field(..., description="Calling agent role")
    tenant_id: str = Field(..., description="Tenant the call targets")
    tool: str = Field(..., description="Tool name")
    input: dict[str, Any] = Field(default_factory=dict, description="Tool input payload")
    reason: str = Field("", description="Human-readable justification")
    workflow_id: str | None = Field(None, description="Workflow correlation id")


class ToolResult(BaseModel):
    """Outcome of an executed or short-circuited tool call."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(..., description="Whether the tool succeeded")
    output: dict[str, Any] = Field(default_factory=dict, description="Tool output payload")
    duration_ms: float = Field(
        0,
        ge=0,
        alias="durationMs",
        description="Wall-clock execution time, 0 when the tool never ran",
    )


class ToolCallOutcome(ToolResult):
    """ToolResult returned by the gateway, tagged with its audit status."""

    status: AuditStatus = Field(..., description="Audit status of the attempt")


class PolicyDecision(BaseModel):
    """Verdict of the policy engine for one tool call."""

    allowed: bool = Field(..., description="Whether the call may proceed")
    reason: str = Field(..., description="Explanation for allow or deny")
    requires_approval: bool = Field(False, description="Human approval needed first")
    approver_roles: list[str] = Field(
        default_factory=list, description="Roles that must approve the call"
    )


class AuditEntry(BaseModel):
    """Immutable record of one gated call attempt."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Entry id")
    agent_id: str
    agent_role: str
    tenant_id: str
    tool: str
    input: dict[str, Any] = Field(default_factory=dict)
    output: dict[str, Any] = Field(default_factory=dict)
    reason: str = ""
    workflow_id: str | None = None
    duration_ms: float = Field(0, ge=0)
    status: AuditStatus
    timestamp: datetime = Field(default_factory=_utcnow)


class EscalationEvent(BaseModel):
    """A decision or action that needs human attention."""

    model_config = ConfigDict(frozen=True)

    agent_id: str
    agent_role: str
    tenant_id: str
    workflow_id: str | None = None
    reason: str
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utcnow)


class EscalationSummary(BaseModel):
    """Top-level escalation a business agent chooses to surface."""

    reason: str
    context: dict[str, Any] = Field(default_factory=dict)


class AgentContext(BaseModel):
    """Input handed to an agent execution by its host."""

    workflow_id: str = Field(..., description="Workflow correlation id")
    tenant_id: str = Field(..., description="Tenant the execution runs for")
    input: dict[str, Any] = Field(default_factory=dict, description="Free-form input payload")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional context")


class AgentResult(BaseModel):
    """Final result of an agent execution."""

    success: bool = Field(..., description="Whether the agent achieved its goal")
    output: dict[str, Any] = Field(default_factory=dict, description="Agent output payload")
    tool_calls: list[AuditEntry] = Field(
        default_factory=list, description="Audit entries produced during the execution"
    )
    escalations: list[EscalationEvent] = Field(
        default_factory=list, description="Escalations raised during the execution"
    )
    escalation: EscalationSummary | None = Field(
        None, description="Escalation chosen by the agent to surface"
    )
