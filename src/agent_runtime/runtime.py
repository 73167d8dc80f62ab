"""
Agent runtime wiring.

Bundles the shared policy engine, rate limiter, tool router, audit logger
and agent registry, hands out per-agent gateways, and runs registered
agents on behalf of an orchestrator.
"""

import logging
from pathlib import Path

from .agent import Agent
from .config.parser import ConfigParser
from .config.schema import AgentConfig
from .config.settings import RuntimeSettings, get_settings
from .gateway import ToolCallGateway
from .interfaces import AuditSink, PolicyDecider, RateGate, ToolDispatcher
from .logic.audit_logger import AuditLogger
from .logic.rate_limiter import RateLimiter
from .models import AgentContext, AgentResult
from .policy.engine import PolicyEngine
from .registry import AgentRegistry
from .tools.router import ToolRouter

logger = logging.getLogger(__name__)


class AgentRuntime:
    """
    Shared components for a set of agents.

    Every component is injectable; defaults are built from RuntimeSettings.

    Usage:
        runtime = AgentRuntime()
        runtime.tool_router.register_tool("consultant.search", search)
        gateway = runtime.create_gateway(config)
        runtime.register_agent(RecruiterAgent(config, gateway))
        result = await runtime.run(config.id, context)
    """

    def __init__(
        self,
        settings: RuntimeSettings | None = None,
        policy_engine: PolicyDecider | None = None,
        rate_limiter: RateGate | None = None,
        tool_router: ToolDispatcher | None = None,
        audit_logger: AuditSink | None = None,
        registry: AgentRegistry | None = None,
    ) -> None:
        """
        Initialize runtime.

        Args:
            settings: Runtime settings (defaults to get_settings())
            policy_engine: Policy decider override
            rate_limiter: Rate gate override
            tool_router: Tool dispatcher override
            audit_logger: Audit sink override
            registry: Agent registry override
        """
        self.settings = settings or get_settings()
        self.policy_engine = policy_engine or PolicyEngine()
        self.rate_limiter = rate_limiter or RateLimiter()
        self.tool_router = tool_router or ToolRouter(
            timeout_seconds=self.settings.tool_timeout_seconds
        )
        self.audit_logger = audit_logger or AuditLogger(
            buffer_limit=self.settings.audit_buffer_limit
        )
        self.registry = registry or AgentRegistry()

        logger.info("🤖 AgentRuntime initialized")

    def create_gateway(self, config: AgentConfig) -> ToolCallGateway:
        """
        Create a gateway for an agent, registering its rate budgets.

        Args:
            config: Agent configuration

        Returns:
            ToolCallGateway bound to the shared components
        """
        return ToolCallGateway(
            config=config,
            policy=self.policy_engine,
            rate_gate=self.rate_limiter,
            dispatcher=self.tool_router,
            audit=self.audit_logger,
        )

    def load_agent_configs(self, path: str | Path | None = None) -> list[AgentConfig]:
        """
        Load agent definitions from YAML.

        Args:
            path: Definition file (defaults to settings.agents_config_path)

        Returns:
            Parsed agent configurations

        Raises:
            ValueError: If no path is given or configured
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If the file is invalid
        """
        path = path or self.settings.agents_config_path
        if not path:
            raise ValueError(
                "No agent definition file given and AGENT_RUNTIME_AGENTS_CONFIG_PATH is unset"
            )
        configs = ConfigParser(path).load()
        logger.info(f"🤖 Loaded {len(configs)} agent definitions from {path}")
        return configs

    def register_agent(self, agent: Agent) -> None:
        """
        Register an agent in the runtime's registry.

        Args:
            agent: Agent instance

        Raises:
            AgentAlreadyRegisteredError: If the id is already registered
        """
        self.registry.register(agent)

    async def run(self, agent_id: str, context: AgentContext) -> AgentResult:
        """
        Locate a registered agent and execute it in a fresh execution scope.

        Args:
            agent_id: Agent identifier
            context: Execution context

        Returns:
            The agent's result

        Raises:
            AgentNotFoundError: If no agent has this id
        """
        agent = self.registry.get(agent_id)
        logger.info(
            f"🏃 Running agent '{agent_id}' "
            f"(workflow={context.workflow_id}, tenant={context.tenant_id})"
        )
        with agent.gateway.execution(context):
            result = await agent.execute(context)
        logger.info(
            f"✅ Agent '{agent_id}' finished (success={result.success}, "
            f"calls={len(result.tool_calls)}, escalations={len(result.escalations)})"
        )
        return result
