"""
Per-agent tool rate limiter.

Sliding-window log over three nested windows (minute, hour, day).
Each agent id has its own lock so check-then-record is atomic per agent
without serialising unrelated agents.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass

from ..config.schema import RateLimits

logger = logging.getLogger(__name__)

MINUTE_SECONDS = 60
HOUR_SECONDS = 3_600
DAY_SECONDS = 86_400


@dataclass(frozen=True)
class RateLimitCheck:
    """
    Result of a rate limit check.

    Attributes:
        allowed: Whether a new call fits inside every budget.
        retry_after_ms: Time until the exceeded window frees a slot.
        window: Name of the exceeded window ("minute", "hour" or "day").
    """

    allowed: bool
    retry_after_ms: int | None = None
    window: str | None = None


class RateLimiter:
    """
    Sliding-window rate limiter for agent tool calls.

    Limits are opt-in: an agent with no configured limits is always
    allowed. Thread-safe for concurrent access.
    """

    def __init__(self) -> None:
        """Initialize an empty rate limiter."""
        self._limits: dict[str, RateLimits] = {}
        self._windows: dict[str, list[float]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, agent_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(agent_id)
            if lock is None:
                lock = self._locks[agent_id] = threading.Lock()
            return lock

    def configure(self, agent_id: str, limits: RateLimits) -> None:
        """
        Store the budgets for an agent.

        Args:
            agent_id: Agent identifier.
            limits: Budgets to enforce.
        """
        with self._lock_for(agent_id):
            self._limits[agent_id] = limits
        logger.debug(
            f"⏱️ Rate limits for '{agent_id}': {limits.per_minute}/min, "
            f"{limits.per_hour}/h, {limits.daily}/day"
        )

    def get_limits(self, agent_id: str) -> RateLimits | None:
        """
        Get the configured budgets for an agent.

        Args:
            agent_id: Agent identifier.

        Returns:
            RateLimits or None if the agent has no limits.
        """
        return self._limits.get(agent_id)

    def check(self, agent_id: str) -> RateLimitCheck:
        """
        Check whether a new call would fit inside the agent's budgets.

        Does not record the call.

        Args:
            agent_id: Agent identifier.

        Returns:
            RateLimitCheck for the first exceeded window, or allowed.
        """
        with self._lock_for(agent_id):
            return self._check_locked(agent_id, time.time())

    def record(self, agent_id: str) -> None:
        """
        Record an invocation at the current time.

        Args:
            agent_id: Agent identifier.
        """
        with self._lock_for(agent_id):
            self._windows.setdefault(agent_id, []).append(time.time())

    def acquire(self, agent_id: str) -> RateLimitCheck:
        """
        Check and, if allowed, record an invocation in one atomic step.

        Args:
            agent_id: Agent identifier.

        Returns:
            RateLimitCheck; the call was recorded only if allowed.
        """
        with self._lock_for(agent_id):
            now = time.time()
            result = self._check_locked(agent_id, now)
            if result.allowed:
                self._windows.setdefault(agent_id, []).append(now)
            return result

    def reset(self, agent_id: str | None = None) -> None:
        """
        Clear the window for an agent or for all agents.

        Args:
            agent_id: Agent to reset. If None, resets every agent.
        """
        if agent_id is None:
            with self._guard:
                agent_ids = list(self._locks)
            for aid in agent_ids:
                self.reset(aid)
            return

        with self._lock_for(agent_id):
            self._windows.pop(agent_id, None)

    def get_usage(self, agent_id: str) -> dict[str, dict[str, int | None]]:
        """
        Get current per-window usage for an agent.

        Args:
            agent_id: Agent identifier.

        Returns:
            Mapping of window name to count and remaining budget
            (remaining is None when the agent has no limits).
        """
        with self._lock_for(agent_id):
            now = time.time()
            entries = self._prune(agent_id, now)
            limits = self._limits.get(agent_id)
            usage: dict[str, dict[str, int | None]] = {}
            for name, seconds, budget in self._budgets(limits):
                cutoff = now - seconds
                count = sum(1 for ts in entries if ts > cutoff)
                usage[name] = {
                    "count": count,
                    "remaining": max(0, budget - count) if budget is not None else None,
                }
            return usage

    def _budgets(
        self, limits: RateLimits | None
    ) -> list[tuple[str, int, int | None]]:
        return [
            ("minute", MINUTE_SECONDS, limits.per_minute if limits else None),
            ("hour", HOUR_SECONDS, limits.per_hour if limits else None),
            ("day", DAY_SECONDS, limits.daily if limits else None),
        ]

    def _prune(self, agent_id: str, now: float) -> list[float]:
        """Drop timestamps older than 24 hours. Caller holds the agent lock."""
        cutoff = now - DAY_SECONDS
        active = [ts for ts in self._windows.get(agent_id, []) if ts > cutoff]
        self._windows[agent_id] = active
        return active

    def _check_locked(self, agent_id: str, now: float) -> RateLimitCheck:
        limits = self._limits.get(agent_id)
        if limits is None:
            return RateLimitCheck(allowed=True)

        entries = self._prune(agent_id, now)

        for name, seconds, budget in self._budgets(limits):
            cutoff = now - seconds
            in_window = [ts for ts in entries if ts > cutoff]
            if len(in_window) >= budget:
                if in_window:
                    retry_after_ms = math.ceil((in_window[0] - cutoff) * 1000)
                else:
                    retry_after_ms = seconds * 1000
                logger.warning(
                    f"⏱️ Rate limit exceeded for '{agent_id}' "
                    f"({len(in_window)}/{budget} per {name}), "
                    f"retry after {retry_after_ms}ms"
                )
                return RateLimitCheck(
                    allowed=False,
                    retry_after_ms=max(1, retry_after_ms),
                    window=name,
                )

        return RateLimitCheck(allowed=True)
