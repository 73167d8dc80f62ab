"""
Pytest configuration and fixtures for agent runtime tests.
"""

from collections.abc import Callable
from typing import Any

import pytest

from agent_runtime.config.schema import AgentConfig, RateLimits
from agent_runtime.config.settings import RuntimeSettings, reset_settings
from agent_runtime.gateway import ToolCallGateway
from agent_runtime.logic.audit_logger import AuditLogger
from agent_runtime.logic.rate_limiter import RateLimiter
from agent_runtime.models import AgentContext, AgentResult
from agent_runtime.policy.engine import PolicyEngine
from agent_runtime.registry import AgentRegistry
from agent_runtime.tools.router import ToolRouter


class ScriptedAgent:
    """
    Test agent that replays a list of tool calls.

    Each step is a (tool, input, reason) tuple; the agent succeeds when
    every call succeeded.
    """

    def __init__(
        self,
        config: AgentConfig,
        gateway: ToolCallGateway,
        steps: list[tuple[str, dict[str, Any], str]] | None = None,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.steps = steps or []

    async def execute(self, context: AgentContext) -> AgentResult:
        self.gateway.begin_execution(context)
        outputs = []
        for tool, payload, reason in self.steps:
            outcome = await self.gateway.call_tool(tool, payload, reason)
            outputs.append(outcome.output)
        success = all(entry.status.value == "success" for entry in self.gateway.call_log)
        return self.gateway.build_result(success, {"outputs": outputs})


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep cached settings and the shared registry from leaking between tests."""
    for var in (
        "AGENT_RUNTIME_LOG_LEVEL",
        "AGENT_RUNTIME_TOOL_TIMEOUT_SECONDS",
        "AGENT_RUNTIME_AUDIT_BUFFER_LIMIT",
        "AGENT_RUNTIME_AGENTS_CONFIG_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    AgentRegistry.reset_instance()
    yield
    reset_settings()
    AgentRegistry.reset_instance()


@pytest.fixture
def make_config() -> Callable[..., AgentConfig]:
    """Factory for AgentConfig with test defaults."""

    def _make(
        id: str = "recruiter-1",
        name: str = "Recruiter",
        role: str = "recruiter",
        tenant_id: str = "t1",
        allowed_tools: tuple[str, ...] | list[str] = ("consultant.search",),
        approval_required: dict[str, list[str]] | None = None,
        per_minute: int = 5,
        per_hour: int = 50,
        daily: int = 200,
    ) -> AgentConfig:
        return AgentConfig(
            id=id,
            name=name,
            role=role,
            tenant_id=tenant_id,
            rate_limits=RateLimits(per_minute=per_minute, per_hour=per_hour, daily=daily),
            allowed_tools=tuple(allowed_tools),
            approval_required=approval_required or {},
        )

    return _make


@pytest.fixture
def test_settings() -> RuntimeSettings:
    """Settings with defaults only."""
    return RuntimeSettings()


@pytest.fixture
def policy_engine() -> PolicyEngine:
    return PolicyEngine()


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter()


@pytest.fixture
def tool_router() -> ToolRouter:
    return ToolRouter()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def make_gateway(
    policy_engine: PolicyEngine,
    rate_limiter: RateLimiter,
    tool_router: ToolRouter,
    audit_logger: AuditLogger,
) -> Callable[[AgentConfig], ToolCallGateway]:
    """Factory for gateways wired to the shared test components."""

    def _make(config: AgentConfig) -> ToolCallGateway:
        return ToolCallGateway(
            config=config,
            policy=policy_engine,
            rate_gate=rate_limiter,
            dispatcher=tool_router,
            audit=audit_logger,
        )

    return _make


@pytest.fixture
def context() -> AgentContext:
    return AgentContext(workflow_id="wf-1", tenant_id="t1", input={"skills": ["go"]})


@pytest.fixture
def scripted_agent_cls() -> type[ScriptedAgent]:
    return ScriptedAgent
