"""
Agent execution contract.

A business agent is any object with a config, a ToolCallGateway and an
``async execute(context)`` method. Agents hold the gateway by composition;
the gateway is the only sanctioned way for them to reach a tool.

Example:

    class RecruiterAgent:
        def __init__(self, config: AgentConfig, gateway: ToolCallGateway) -> None:
            self.config = config
            self.gateway = gateway

        async def execute(self, context: AgentContext) -> AgentResult:
            self.gateway.begin_execution(context)
            found = await self.gateway.call_tool(
                "consultant.search", {"skills": context.input["skills"]}, "sourcing"
            )
            return self.gateway.build_result(found.success, found.output)
"""

from typing import Protocol, runtime_checkable

from .config.schema import AgentConfig
from .gateway import ToolCallGateway
from .models import AgentContext, AgentResult


@runtime_checkable
class Agent(Protocol):
    """Shape every business agent fulfils."""

    config: AgentConfig
    gateway: ToolCallGateway

    async def execute(self, context: AgentContext) -> AgentResult:
        """
        Run the agent's decision logic for one context.

        Args:
            context: Workflow, tenant and input for this execution.

        Returns:
            AgentResult assembled via gateway.build_result().
        """
        ...
