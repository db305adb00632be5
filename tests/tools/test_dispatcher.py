"""
Tests for ToolDispatcher.

Tests cover:
- Successful sync and async handlers
- Every failure path returns an error result instead of raising
- Timeouts, concurrency and result ordering in dispatch_all
- Tool-name prefix stripping and observer hooks
"""

from __future__ import annotations

import asyncio
import contextvars
import json
import time
from typing import Any, Dict, List

import pytest

from toolrelay import (
    Message,
    Permission,
    Role,
    ToolCall,
    ToolDispatcher,
    ToolParameter,
    ToolRegistry,
    ToolResult,
    ToolSchema,
    object_schema,
)
from toolrelay.tools.dispatcher import coerce_result, parse_arguments

ECHO_SCHEMA = ToolSchema(
    name="echo",
    description="Echo a message back",
    parameters=object_schema([ToolParameter("message", str, "Text to echo")]),
)


def _schema(name: str) -> ToolSchema:
    return ToolSchema(name=name, description=f"{name} tool")


@pytest.fixture
def echo_registry(registry: ToolRegistry) -> ToolRegistry:
    registry.register(ECHO_SCHEMA, lambda args: args["message"])
    return registry


# =============================================================================
# Helpers
# =============================================================================


class TestParseArguments:
    def test_object(self):
        assert parse_arguments('{"a": 1}') == ({"a": 1}, None)

    @pytest.mark.parametrize("text", ["{not json", "", '{"a": '])
    def test_malformed(self, text):
        args, error = parse_arguments(text)
        assert args is None
        assert "not valid JSON" in error

    @pytest.mark.parametrize("text, kind", [("[1, 2]", "list"), ('"hi"', "str"), ("3", "int")])
    def test_non_object(self, text, kind):
        args, error = parse_arguments(text)
        assert args is None
        assert kind in error


class TestCoerceResult:
    def test_passthrough(self):
        result = ToolResult.error("nope")
        assert coerce_result(result) is result

    def test_none_is_empty_success(self):
        assert coerce_result(None) == ToolResult(content="")

    def test_dict_serialized_as_json(self):
        result = coerce_result({"ok": True})
        assert json.loads(result.content) == {"ok": True}
        assert result.is_error is False

    def test_other_values_stringified(self):
        assert coerce_result(42).content == "42"


# =============================================================================
# dispatch
# =============================================================================


class TestDispatch:
    @pytest.mark.asyncio
    async def test_echo(self, echo_registry):
        dispatcher = ToolDispatcher(echo_registry)

        result = await dispatcher.dispatch(
            ToolCall(id="c1", name="echo", arguments='{"message": "hi"}')
        )

        assert result == ToolResult(content="hi", is_error=False)

    @pytest.mark.asyncio
    async def test_unknown_tool_is_error_result(self, echo_registry):
        result = await ToolDispatcher(echo_registry).dispatch(
            ToolCall(id="c1", name="missing", arguments="{}")
        )

        assert result.is_error
        assert "missing" in result.content
        assert "echo" in result.content

    @pytest.mark.asyncio
    async def test_malformed_arguments(self, echo_registry):
        calls: List[Dict[str, Any]] = []
        echo_registry.register(ECHO_SCHEMA, lambda args: calls.append(args))

        result = await ToolDispatcher(echo_registry).dispatch(
            ToolCall(id="c1", name="echo", arguments="{not json")
        )

        assert result.is_error
        assert "Invalid arguments for tool 'echo'" in result.content
        assert calls == []

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_error_result(self, registry):
        def explode(args):
            raise RuntimeError("disk on fire")

        registry.register(_schema("explode"), explode)

        result = await ToolDispatcher(registry).dispatch(ToolCall(id="c", name="explode"))

        assert result.is_error
        assert result.content == "Error executing tool 'explode': disk on fire"

    @pytest.mark.asyncio
    async def test_handler_returned_error_passes_through(self, registry):
        registry.register(_schema("fails"), lambda args: ToolResult.error("❌ Error: nope"))

        result = await ToolDispatcher(registry).dispatch(ToolCall(id="c", name="fails"))

        assert result == ToolResult(content="❌ Error: nope", is_error=True)

    @pytest.mark.asyncio
    async def test_async_handler(self, registry):
        async def fetch(args):
            await asyncio.sleep(0)
            return {"value": args["n"] * 2}

        registry.register(_schema("fetch"), fetch)

        result = await ToolDispatcher(registry).dispatch(
            ToolCall(id="c", name="fetch", arguments='{"n": 21}')
        )

        assert json.loads(result.content) == {"value": 42}

    @pytest.mark.asyncio
    async def test_sync_handler_runs_off_loop_with_context(self, registry):
        request_id = contextvars.ContextVar("request_id", default="unset")
        request_id.set("req-7")
        registry.register(_schema("ctx"), lambda args: request_id.get())

        result = await ToolDispatcher(registry).dispatch(ToolCall(id="c", name="ctx"))

        assert result.content == "req-7"

    @pytest.mark.asyncio
    async def test_timeout(self, registry):
        async def hang(args):
            await asyncio.sleep(5)

        registry.register(_schema("hang"), hang)

        result = await ToolDispatcher(registry, timeout=0.05).dispatch(
            ToolCall(id="c", name="hang")
        )

        assert result.is_error
        assert "timed out after 0.05 seconds" in result.content

    @pytest.mark.asyncio
    async def test_handler_timeout_error_keeps_its_text(self, registry):
        def net(args):
            raise TimeoutError("socket read timeout")

        registry.register(_schema("net"), net)

        result = await ToolDispatcher(registry).dispatch(ToolCall(id="c", name="net"))

        assert result.is_error
        assert result.content == "Error executing tool 'net': socket read timeout"

    @pytest.mark.asyncio
    async def test_handler_timeout_error_within_dispatch_limit(self, registry):
        async def net(args):
            raise TimeoutError("upstream deadline")

        registry.register(_schema("net"), net)

        result = await ToolDispatcher(registry, timeout=5).dispatch(ToolCall(id="c", name="net"))

        assert result.content == "Error executing tool 'net': upstream deadline"

    @pytest.mark.asyncio
    async def test_prefixed_name_is_stripped(self, echo_registry):
        result = await ToolDispatcher(echo_registry).dispatch(
            ToolCall(id="c", name="repo_browser.echo", arguments='{"message": "ok"}')
        )

        assert result.content == "ok"
        assert not result.is_error

    @pytest.mark.asyncio
    async def test_disabled_tool_still_dispatches(self, echo_registry):
        echo_registry.disable("echo")

        result = await ToolDispatcher(echo_registry).dispatch(
            ToolCall(id="c", name="echo", arguments='{"message": "still here"}')
        )

        assert result.content == "still here"

    @pytest.mark.asyncio
    async def test_permission_not_enforced(self, registry):
        registry.register(
            ToolSchema(name="rm", description="Remove", permission=Permission.UNSAFE),
            lambda args: "removed",
        )

        result = await ToolDispatcher(registry).dispatch(ToolCall(id="c", name="rm"))

        assert result.content == "removed"


class TestHooks:
    @pytest.mark.asyncio
    async def test_start_and_end_fire(self, echo_registry):
        events = []
        dispatcher = ToolDispatcher(
            echo_registry,
            hooks={
                "on_tool_start": lambda name, args: events.append(("start", name, args)),
                "on_tool_end": lambda name, result, duration: events.append(
                    ("end", name, result.content)
                ),
            },
        )

        await dispatcher.dispatch(ToolCall(id="c", name="echo", arguments='{"message": "x"}'))

        assert events == [("start", "echo", {"message": "x"}), ("end", "echo", "x")]

    @pytest.mark.asyncio
    async def test_failing_hook_does_not_break_dispatch(self, echo_registry):
        def bad_hook(*args):
            raise ValueError("hook bug")

        dispatcher = ToolDispatcher(echo_registry, hooks={"on_tool_start": bad_hook})

        result = await dispatcher.dispatch(
            ToolCall(id="c", name="echo", arguments='{"message": "fine"}')
        )

        assert result.content == "fine"


# =============================================================================
# dispatch_all
# =============================================================================


class TestDispatchAll:
    @pytest.mark.asyncio
    async def test_results_in_request_order(self, registry):
        async def delayed(args):
            await asyncio.sleep(args["delay"])
            return args["label"]

        registry.register(_schema("delayed"), delayed)
        calls = [
            ToolCall(id="1", name="delayed", arguments='{"delay": 0.05, "label": "slow"}'),
            ToolCall(id="2", name="delayed", arguments='{"delay": 0, "label": "fast"}'),
            ToolCall(id="3", name="missing"),
        ]

        results = await ToolDispatcher(registry).dispatch_all(calls)

        assert [r.content for r in results[:2]] == ["slow", "fast"]
        assert results[2].is_error

    @pytest.mark.asyncio
    async def test_sync_handlers_overlap(self, registry):
        def sleepy(args):
            time.sleep(0.2)
            return "done"

        registry.register(_schema("sleepy"), sleepy)
        calls = [ToolCall(id=str(i), name="sleepy") for i in range(3)]

        start = time.time()
        results = await ToolDispatcher(registry).dispatch_all(calls)
        elapsed = time.time() - start

        assert [r.content for r in results] == ["done"] * 3
        assert elapsed < 0.5

    @pytest.mark.asyncio
    async def test_empty(self, registry):
        assert await ToolDispatcher(registry).dispatch_all([]) == []


class TestToMessage:
    def test_answers_the_call(self):
        call = ToolCall(id="call_9", name="echo")
        message = ToolDispatcher.to_message(call, ToolResult(content="out"))

        assert message == Message(role=Role.TOOL, content="out", tool_call_id="call_9")
