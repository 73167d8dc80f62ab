"""
Tool-call gateway - the single gated path from an agent to its tools.

Every call_tool() runs:
    policy check  ->  approval gate  ->  rate limit  ->  dispatch

and writes exactly one audit entry at whichever step it exits. Agents hold
a gateway by composition and never touch the policy engine, rate limiter,
router or audit ledger directly.

Per-execution state (the call log and escalations that end up in the
AgentResult) lives in a context variable, so concurrent executions of the
same agent in separate asyncio tasks or threads never see each other's
trace.
"""

import copy
import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .config.schema import AgentConfig
from .interfaces import AuditSink, PolicyDecider, RateGate, ToolDispatcher
from .models import (
    AgentContext,
    AgentResult,
    AuditEntry,
    AuditStatus,
    EscalationEvent,
    EscalationSummary,
    ToolCall,
    ToolCallOutcome,
    ToolResult,
)

logger = logging.getLogger(__name__)


@dataclass
class ExecutionLog:
    """
    Trace of a single agent execution.

    Attributes:
        tenant_id: Tenant the execution runs for (None = agent's own tenant).
        workflow_id: Default workflow id for calls that don't pass one.
        calls: Audit entries produced, in call order.
        escalations: Escalations raised, in order.
    """

    tenant_id: str | None = None
    workflow_id: str | None = None
    calls: list[AuditEntry] = field(default_factory=list)
    escalations: list[EscalationEvent] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


# gateway id -> active ExecutionLog for the current task or thread
_active_logs: ContextVar[Mapping[int, ExecutionLog]] = ContextVar(
    "agent_runtime_execution_logs", default=MappingProxyType({})
)


class ToolCallGateway:
    """
    Gated tool access for one agent.

    Usage:
        gateway = ToolCallGateway(config, policy, limiter, router, audit)
        gateway.begin_execution(context)
        outcome = await gateway.call_tool("consultant.search", {...}, "sourcing")
        return gateway.build_result(True, {...})
    """

    def __init__(
        self,
        config: AgentConfig,
        policy: PolicyDecider,
        rate_gate: RateGate,
        dispatcher: ToolDispatcher,
        audit: AuditSink,
    ) -> None:
        """
        Initialize the gateway and register the agent's rate budgets.

        Args:
            config: Configuration of the owning agent.
            policy: Policy decider consulted first on every call.
            rate_gate: Rate limiter consulted after policy.
            dispatcher: Tool router that executes permitted calls.
            audit: Audit sink receiving one entry per call.
        """
        self.config = config
        self.policy = policy
        self.rate_gate = rate_gate
        self.dispatcher = dispatcher
        self.audit = audit
        self._fallback_log = ExecutionLog()
        self.rate_gate.configure(config.id, config.rate_limits)

    # --- execution scope ---------------------------------------------------

    def _current_log(self) -> ExecutionLog:
        return _active_logs.get().get(id(self), self._fallback_log)

    def begin_execution(self, context: AgentContext | None = None) -> ExecutionLog:
        """
        Start a fresh call log and escalation list for this execution.

        Args:
            context: Execution context; its tenant and workflow id become
                the defaults for calls made during the execution.

        Returns:
            The new ExecutionLog.
        """
        log = ExecutionLog(
            tenant_id=context.tenant_id if context else None,
            workflow_id=context.workflow_id if context else None,
        )
        logs = dict(_active_logs.get())
        logs[id(self)] = log
        _active_logs.set(MappingProxyType(logs))
        return log

    @contextmanager
    def execution(self, context: AgentContext | None = None) -> Iterator[ExecutionLog]:
        """
        Scope an execution; the previous scope is restored on exit.

        Args:
            context: Execution context passed to begin_execution().

        Yields:
            The ExecutionLog for the execution.
        """
        token = _active_logs.set(_active_logs.get())
        try:
            yield self.begin_execution(context)
        finally:
            _active_logs.reset(token)

    @property
    def call_log(self) -> tuple[AuditEntry, ...]:
        """Audit entries produced during the current execution."""
        log = self._current_log()
        with log.lock:
            return tuple(e.model_copy(deep=True) for e in log.calls)

    @property
    def escalations(self) -> tuple[EscalationEvent, ...]:
        """Escalations raised during the current execution."""
        log = self._current_log()
        with log.lock:
            return tuple(log.escalations)

    # --- gated call path ---------------------------------------------------

    async def call_tool(
        self,
        tool: str,
        input: dict[str, Any],
        reason: str,
        workflow_id: str | None = None,
    ) -> ToolCallOutcome:
        """
        Request a tool invocation through policy, approval and rate gates.

        Never raises for denials, pending approvals, rate limits or tool
        failures; each is returned as a ToolCallOutcome and audited.

        Args:
            tool: Tool name.
            input: Tool input payload.
            reason: Human-readable justification.
            workflow_id: Workflow correlation id (defaults to the execution's).

        Returns:
            ToolCallOutcome tagged with the audit status.
        """
        log = self._current_log()
        tool_call = ToolCall(
            agent_id=self.config.id,
            agent_role=self.config.role,
            tenant_id=log.tenant_id or self.config.tenant_id,
            tool=tool,
            input=copy.deepcopy(input),
            reason=reason,
            workflow_id=workflow_id or log.workflow_id,
        )

        decision = self.policy.check(self.config, tool_call)

        if not decision.allowed:
            result = ToolResult(success=False, output={"error": decision.reason})
            return self._finish(log, tool_call, result, AuditStatus.DENIED)

        if decision.requires_approval:
            result = ToolResult(
                success=False,
                output={
                    "pending_approval": True,
                    "approver_roles": list(decision.approver_roles),
                },
            )
            self._append_escalation(
                log,
                EscalationEvent(
                    agent_id=self.config.id,
                    agent_role=self.config.role,
                    tenant_id=tool_call.tenant_id,
                    workflow_id=tool_call.workflow_id,
                    reason=decision.reason,
                    context={
                        "tool": tool,
                        "input": copy.deepcopy(tool_call.input),
                        "approver_roles": list(decision.approver_roles),
                    },
                ),
            )
            return self._finish(log, tool_call, result, AuditStatus.ESCALATED)

        rate = self.rate_gate.acquire(self.config.id)
        if not rate.allowed:
            result = ToolResult(
                success=False,
                output={
                    "error": "Rate limit exceeded",
                    "retry_after_ms": rate.retry_after_ms,
                    "window": rate.window,
                },
            )
            return self._finish(log, tool_call, result, AuditStatus.DENIED)

        try:
            result = await self.dispatcher.execute(tool_call)
        except Exception as e:
            logger.exception(f"🔧 Dispatcher failed for tool '{tool}': {e}")
            result = ToolResult(success=False, output={"error": str(e) or type(e).__name__})

        status = AuditStatus.SUCCESS if result.success else AuditStatus.FAILURE
        return self._finish(log, tool_call, result, status)

    def escalate(
        self,
        reason: str,
        context: dict[str, Any],
        workflow_id: str | None = None,
    ) -> EscalationEvent:
        """
        Raise an escalation from business logic.

        Args:
            reason: Why human attention is needed.
            context: Free-form details for the escalation handler.
            workflow_id: Workflow correlation id (defaults to the execution's).

        Returns:
            The recorded EscalationEvent.
        """
        log = self._current_log()
        event = EscalationEvent(
            agent_id=self.config.id,
            agent_role=self.config.role,
            tenant_id=log.tenant_id or self.config.tenant_id,
            workflow_id=workflow_id or log.workflow_id,
            reason=reason,
            context=copy.deepcopy(context),
        )
        self._append_escalation(log, event)
        return event

    def build_result(
        self,
        success: bool,
        output: dict[str, Any],
        escalation: EscalationSummary | dict[str, Any] | None = None,
    ) -> AgentResult:
        """
        Assemble the AgentResult for the current execution.

        Outside an execution scope the calls accumulate in the gateway's
        fallback log; building a result closes that log, so the next
        unscoped run starts with an empty trace.

        Args:
            success: Whether the agent achieved its goal.
            output: Agent output payload.
            escalation: Optional top-level escalation chosen by the agent.

        Returns:
            AgentResult with the execution's full call trace.
        """
        log = self._current_log()
        if isinstance(escalation, dict):
            escalation = EscalationSummary.model_validate(escalation)
        with log.lock:
            calls = [e.model_copy(deep=True) for e in log.calls]
            escalations = [e.model_copy(deep=True) for e in log.escalations]
        if log is self._fallback_log:
            self._fallback_log = ExecutionLog()
        return AgentResult(
            success=success,
            output=output,
            tool_calls=calls,
            escalations=escalations,
            escalation=escalation,
        )

    # --- internals ---------------------------------------------------------

    def _append_escalation(self, log: ExecutionLog, event: EscalationEvent) -> None:
        logger.warning(
            f"🚨 Escalation from agent '{event.agent_id}' "
            f"(tenant={event.tenant_id}, workflow={event.workflow_id}): {event.reason}"
        )
        with log.lock:
            log.escalations.append(event)

    def _finish(
        self,
        log: ExecutionLog,
        tool_call: ToolCall,
        result: ToolResult,
        status: AuditStatus,
    ) -> ToolCallOutcome:
        """Audit the attempt, append it to the call log and build the outcome."""
        executed = status in (AuditStatus.SUCCESS, AuditStatus.FAILURE)
        duration_ms = result.duration_ms if executed else 0
        entry = self.audit.log(
            AuditEntry(
                agent_id=tool_call.agent_id,
                agent_role=tool_call.agent_role,
                tenant_id=tool_call.tenant_id,
                tool=tool_call.tool,
                input=tool_call.input,
                output=result.output,
                reason=tool_call.reason,
                workflow_id=tool_call.workflow_id,
                duration_ms=duration_ms,
                status=status,
            )
        )
        with log.lock:
            log.calls.append(entry)

        if status is AuditStatus.SUCCESS:
            logger.info(
                f"🔧 Agent '{tool_call.agent_id}' called '{tool_call.tool}' "
                f"({duration_ms:.1f}ms)"
            )
        else:
            logger.info(
                f"🔧 Agent '{tool_call.agent_id}' call to '{tool_call.tool}' "
                f"ended {status.value}"
            )

        return ToolCallOutcome(
            success=result.success,
            output=result.output,
            duration_ms=duration_ms,
            status=status,
        )
