"""
Agent Registry

Directory of live agent instances keyed by agent id. Construct one and
inject it where agent lookup is needed; get_instance() offers a shared
process-wide instance for hosts that want one, and reset_instance()
clears it for test isolation.
"""

import logging
import threading
from typing import ClassVar

from .agent import Agent
from .logic.exceptions import AgentAlreadyRegisteredError, AgentNotFoundError

logger = logging.getLogger(__name__)


class AgentRegistry:
    """
    Thread-safe map from agent id to agent instance.

    Usage:
        registry = AgentRegistry()
        registry.register(recruiter)
        agent = registry.get("recruiter-1")
    """

    _instance: ClassVar["AgentRegistry | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._agents: dict[str, Agent] = {}
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> "AgentRegistry":
        """
        Get the shared process-wide registry, creating it on first use.

        Returns:
            The shared AgentRegistry.
        """
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the shared registry so the next get_instance() starts empty."""
        with cls._instance_lock:
            cls._instance = None

    def register(self, agent: Agent) -> None:
        """
        Register an agent under its config id.

        Args:
            agent: Agent instance

        Raises:
            AgentAlreadyRegisteredError: If the id is already registered
        """
        agent_id = agent.config.id
        with self._lock:
            if agent_id in self._agents:
                raise AgentAlreadyRegisteredError(agent_id)
            self._agents[agent_id] = agent
        logger.info(f"🤖 Registered agent '{agent_id}' (role={agent.config.role})")

    def get(self, agent_id: str) -> Agent:
        """
        Get agent by id.

        Args:
            agent_id: Agent identifier

        Returns:
            The registered agent

        Raises:
            AgentNotFoundError: If no agent has this id
        """
        with self._lock:
            agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    def get_by_role(self, role: str) -> list[Agent]:
        """
        Get all agents with a role, in registration order.

        Args:
            role: Capability class to match

        Returns:
            Matching agents (possibly empty)
        """
        with self._lock:
            return [a for a in self._agents.values() if a.config.role == role]

    def has(self, agent_id: str) -> bool:
        """Check whether an agent id is registered."""
        with self._lock:
            return agent_id in self._agents

    def unregister(self, agent_id: str) -> bool:
        """
        Remove an agent.

        Args:
            agent_id: Agent identifier

        Returns:
            True if an agent was removed
        """
        with self._lock:
            removed = self._agents.pop(agent_id, None) is not None
        if removed:
            logger.info(f"🤖 Unregistered agent '{agent_id}'")
        return removed

    def list_all(self) -> list[Agent]:
        """Get all registered agents, in registration order."""
        with self._lock:
            return list(self._agents.values())

    def clear(self) -> None:
        """Remove every agent."""
        with self._lock:
            self._agents.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        with self._lock:
            return agent_id in self._agents
