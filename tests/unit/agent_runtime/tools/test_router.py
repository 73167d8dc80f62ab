"""
Unit tests for ToolRouter.

Tests cover registration, introspection and execution, including unknown
tools, handler exceptions, timeouts and malformed results.
"""

import asyncio
import time

import pytest

from agent_runtime.models import ToolCall, ToolResult
from agent_runtime.tools.router import ToolRouter


def make_call(tool: str, payload: dict | None = None) -> ToolCall:
    return ToolCall(
        agent_id="a1",
        agent_role="recruiter",
        tenant_id="t1",
        tool=tool,
        input=payload or {},
        reason="test",
    )


async def search_handler(payload: dict) -> ToolResult:
    return ToolResult(success=True, output={"consultants": [], "skills": payload.get("skills")})


class TestRegistration:
    """Tests for register_tool and introspection."""

    def test_empty_router(self):
        """Test a new router has no tools."""
        router = ToolRouter()
        assert router.count() == 0
        assert router.list_names() == []

    def test_register_and_list(self):
        """Test registered tools are listed sorted."""
        router = ToolRouter()
        router.register_tool("job.create", search_handler)
        router.register_tool("consultant.search", search_handler)

        assert router.list_names() == ["consultant.search", "job.create"]
        assert router.count() == 2
        assert router.has("job.create") is True
        assert router.has("email.send") is False

    def test_register_replaces(self):
        """Test registering an existing name replaces the handler."""
        router = ToolRouter()
        first = lambda payload: {"success": True, "output": {"v": 1}}
        second = lambda payload: {"success": True, "output": {"v": 2}}

        router.register_tool("t", first)
        router.register_tool("t", second)

        assert router.count() == 1
        assert router.tools["t"] is second

    def test_unregister(self):
        """Test unregister removes a handler once."""
        router = ToolRouter()
        router.register_tool("t", search_handler)

        assert router.unregister_tool("t") is True
        assert router.unregister_tool("t") is False
        assert router.has("t") is False


class TestExecute:
    """Tests for execute."""

    @pytest.mark.asyncio
    async def test_async_handler(self):
        """Test an async handler receives the input payload."""
        router = ToolRouter()
        router.register_tool("consultant.search", search_handler)

        result = await router.execute(make_call("consultant.search", {"skills": ["go"]}))

        assert result.success is True
        assert result.output == {"consultants": [], "skills": ["go"]}
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_sync_handler_returning_dict(self):
        """Test a plain callable returning a mapping is accepted."""
        router = ToolRouter()
        router.register_tool(
            "job.query",
            lambda payload: {"success": True, "output": {"jobs": []}, "durationMs": 999},
        )

        result = await router.execute(make_call("job.query"))

        assert result.success is True
        assert result.output == {"jobs": []}

    @pytest.mark.asyncio
    async def test_duration_measured_by_router(self):
        """Test the router overwrites handler-reported duration."""
        async def slow(payload: dict) -> ToolResult:
            await asyncio.sleep(0.05)
            return ToolResult(success=True, output={}, duration_ms=0)

        router = ToolRouter()
        router.register_tool("slow", slow)

        result = await router.execute(make_call("slow"))

        assert result.duration_ms >= 40

    @pytest.mark.asyncio
    async def test_handler_failure_result_passed_through(self):
        """Test a handler reporting failure is not turned into success."""
        router = ToolRouter()
        router.register_tool(
            "email.send", lambda payload: {"success": False, "output": {"error": "bounced"}}
        )

        result = await router.execute(make_call("email.send"))

        assert result.success is False
        assert result.output == {"error": "bounced"}

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        """Test an unknown tool fails with zero duration."""
        router = ToolRouter()

        result = await router.execute(make_call("missing.tool"))

        assert result.success is False
        assert result.output == {"error": "Unknown tool: missing.tool"}
        assert result.duration_ms == 0

    @pytest.mark.asyncio
    async def test_handler_exception_captured(self):
        """Test a raising handler becomes a failed result with its message."""
        async def broken(payload: dict) -> ToolResult:
            raise RuntimeError("database unavailable")

        router = ToolRouter()
        router.register_tool("job.create", broken)

        result = await router.execute(make_call("job.create"))

        assert result.success is False
        assert result.output == {"error": "database unavailable"}
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_sync_handler_exception_captured(self):
        """Test a raising plain callable is captured too."""
        def broken(payload: dict) -> dict:
            raise KeyError("jobId")

        router = ToolRouter()
        router.register_tool("job.update", broken)

        result = await router.execute(make_call("job.update"))

        assert result.success is False
        assert "jobId" in result.output["error"]

    @pytest.mark.asyncio
    async def test_invalid_result_is_failure(self):
        """Test a handler returning garbage yields a failed result."""
        router = ToolRouter()
        router.register_tool("weird", lambda payload: None)

        result = await router.execute(make_call("weird"))

        assert result.success is False
        assert "Invalid result from tool weird" in result.output["error"]

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test a handler exceeding the timeout yields a failed result."""
        async def hang(payload: dict) -> ToolResult:
            await asyncio.sleep(5)
            return ToolResult(success=True)

        router = ToolRouter(timeout_seconds=0.05)
        router.register_tool("hang", hang)

        started = time.perf_counter()
        result = await router.execute(make_call("hang"))
        elapsed = time.perf_counter() - started

        assert result.success is False
        assert result.output == {"error": 'Tool "hang" timed out after 0.05s'}
        assert elapsed < 2

    @pytest.mark.asyncio
    async def test_blocking_sync_handler_times_out(self):
        """Test the timeout also applies to a blocking plain callable."""
        def blocking(payload: dict) -> dict:
            time.sleep(0.5)
            return {"success": True, "output": {}}

        router = ToolRouter(timeout_seconds=0.1)
        router.register_tool("legacy.export", blocking)

        started = time.perf_counter()
        result = await router.execute(make_call("legacy.export"))
        elapsed = time.perf_counter() - started

        assert result.success is False
        assert result.output == {"error": 'Tool "legacy.export" timed out after 0.1s'}
        assert elapsed < 0.4

    @pytest.mark.asyncio
    async def test_sync_handlers_do_not_block_event_loop(self):
        """Test blocking plain callables run concurrently off the event loop."""
        def blocking(payload: dict) -> dict:
            time.sleep(0.2)
            return {"success": True, "output": {"n": payload["n"]}}

        router = ToolRouter()
        router.register_tool("legacy.export", blocking)

        started = time.perf_counter()
        results = await asyncio.gather(
            *(router.execute(make_call("legacy.export", {"n": n})) for n in range(3))
        )
        elapsed = time.perf_counter() - started

        assert [r.output["n"] for r in results] == [0, 1, 2]
        assert elapsed < 0.5

    @pytest.mark.asyncio
    async def test_handler_cannot_mutate_call_input(self):
        """Test a handler gets its own copy of the input payload."""
        async def meddling(payload: dict) -> ToolResult:
            payload["skills"].clear()
            payload["injected"] = True
            return ToolResult(success=True)

        def meddling_sync(payload: dict) -> dict:
            payload["skills"].append("rust")
            return {"success": True}

        router = ToolRouter()
        router.register_tool("consultant.search", meddling)
        router.register_tool("consultant.match", meddling_sync)
        search_call = make_call("consultant.search", {"skills": ["go"]})
        match_call = make_call("consultant.match", {"skills": ["go"]})

        await router.execute(search_call)
        await router.execute(match_call)

        assert search_call.input == {"skills": ["go"]}
        assert match_call.input == {"skills": ["go"]}

    @pytest.mark.asyncio
    async def test_callable_object_with_async_call(self):
        """Test an object with an async __call__ is awaited on the loop."""
        class Handler:
            async def __call__(self, payload: dict) -> ToolResult:
                return ToolResult(success=True, output={"from": "object"})

        router = ToolRouter(timeout_seconds=1)
        router.register_tool("job.query", Handler())

        result = await router.execute(make_call("job.query"))

        assert result.output == {"from": "object"}

    @pytest.mark.asyncio
    async def test_fast_handler_within_timeout(self):
        """Test a handler finishing in time is unaffected by the timeout."""
        router = ToolRouter(timeout_seconds=1)
        router.register_tool("consultant.search", search_handler)

        result = await router.execute(make_call("consultant.search"))

        assert result.success is True
