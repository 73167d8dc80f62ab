"""
Tool Router for Agent Runtime

Maps tool names to host-supplied handlers and executes them, measuring
wall-clock duration. Handler exceptions, timeouts and malformed return
values become failed ToolResults; execute() never raises because of a
misbehaving tool.
"""

import asyncio
import copy
import functools
import inspect
import logging
import time
from typing import Any

from pydantic import ValidationError

from ..interfaces import ToolHandler
from ..logic.exceptions import ToolTimeoutError
from ..models import ToolCall, ToolResult

logger = logging.getLogger(__name__)


def _is_async_handler(handler: ToolHandler) -> bool:
    """Check for an async function or an object with an async __call__."""
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )


class ToolRouter:
    """
    Registry and executor of tool handlers.

    Handlers receive the call's input payload and return a ToolResult or a
    mapping with ``success`` and ``output``. Both ``async def`` handlers and
    plain callables are accepted; plain callables run in the default thread
    pool so a blocking handler never stalls other calls, and the timeout
    applies to both.

    Usage:
        router = ToolRouter(timeout_seconds=30)
        router.register_tool("email.send", send_email)
        result = await router.execute(tool_call)
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        """
        Initialize an empty router.

        Args:
            timeout_seconds: Per-invocation timeout (None = no timeout).
        """
        self.tools: dict[str, ToolHandler] = {}
        self.timeout_seconds = timeout_seconds

    def register_tool(self, name: str, handler: ToolHandler) -> None:
        """
        Install or replace the handler for a tool.

        Args:
            name: Tool name
            handler: Callable taking the input payload
        """
        if name in self.tools:
            logger.info(f"🔧 Replacing handler for tool '{name}'")
        self.tools[name] = handler

    def unregister_tool(self, name: str) -> bool:
        """
        Remove a tool handler.

        Args:
            name: Tool name

        Returns:
            True if a handler was removed
        """
        return self.tools.pop(name, None) is not None

    def has(self, name: str) -> bool:
        """Check whether a handler is registered for a tool."""
        return name in self.tools

    def list_names(self) -> list[str]:
        """
        Get list of all registered tool names.

        Returns:
            Sorted list of tool names
        """
        return sorted(self.tools.keys())

    def count(self) -> int:
        """
        Get count of registered tools.

        Returns:
            Number of tools registered
        """
        return len(self.tools)

    async def execute(self, tool_call: ToolCall) -> ToolResult:
        """
        Execute a tool call through its registered handler.

        Args:
            tool_call: Call to execute

        Returns:
            ToolResult with the router-measured duration. An unknown tool
            yields success=False with zero duration.
        """
        handler = self.tools.get(tool_call.tool)
        if handler is None:
            logger.error(
                f"🔧 Unknown tool '{tool_call.tool}' requested by agent "
                f"'{tool_call.agent_id}' (allowlist and router out of sync)"
            )
            return ToolResult(
                success=False,
                output={"error": f"Unknown tool: {tool_call.tool}"},
                duration_ms=0,
            )

        start = time.perf_counter()
        try:
            raw = await self._invoke(
                tool_call.tool, handler, copy.deepcopy(tool_call.input)
            )
            result = self._coerce(raw)
        except ToolTimeoutError as e:
            logger.error(f"🔧 {e.message}")
            return ToolResult(
                success=False,
                output={"error": e.message},
                duration_ms=self._elapsed_ms(start),
            )
        except ValidationError as e:
            logger.error(f"🔧 Tool '{tool_call.tool}' returned an invalid result: {e}")
            return ToolResult(
                success=False,
                output={"error": f"Invalid result from tool {tool_call.tool}: {e}"},
                duration_ms=self._elapsed_ms(start),
            )
        except Exception as e:
            logger.exception(f"🔧 Tool '{tool_call.tool}' raised: {e}")
            return ToolResult(
                success=False,
                output={"error": str(e) or type(e).__name__},
                duration_ms=self._elapsed_ms(start),
            )

        return result.model_copy(update={"duration_ms": self._elapsed_ms(start)})

    async def _invoke(
        self, name: str, handler: ToolHandler, payload: dict[str, Any]
    ) -> Any:
        async def run() -> Any:
            if _is_async_handler(handler):
                value = handler(payload)
            else:
                # Plain callables may block; run them off the event loop
                loop = asyncio.get_running_loop()
                value = await loop.run_in_executor(
                    None, functools.partial(handler, payload)
                )
            if inspect.isawaitable(value):
                value = await value
            return value

        if self.timeout_seconds is None:
            return await run()
        try:
            return await asyncio.wait_for(run(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ToolTimeoutError(name, self.timeout_seconds) from e

    @staticmethod
    def _coerce(raw: Any) -> ToolResult:
        if isinstance(raw, ToolResult):
            return raw
        return ToolResult.model_validate(raw)

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 3)
