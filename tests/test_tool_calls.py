"""Tests for tool-call extraction, the registry and the dispatcher."""

import asyncio
import json

import pytest

from llm_toolchat import ConfigurationError, DispatchError
from llm_toolchat.tools import (
    FunctionHandler,
    ToolDispatcher,
    ToolRegistry,
    default_registry,
    extract_tool_calls,
)
from llm_toolchat.tools.registry import ToolContext
from llm_toolchat.types import ToolDeclaration, ToolUseContent

ECHO_TOOL = ToolDeclaration(name="echo", description="Echo the text back")
FAIL_TOOL = ToolDeclaration(name="fail", description="Always fails")


def echo(ctx, arguments):
    return f"echo: {arguments['text']}"


class TestExtractToolCalls:
    def test_keeps_valid_calls_in_emission_order(self, tool_reply):
        response = tool_reply(
            ToolUseContent("b", "echo", {"text": "2"}),
            ToolUseContent("a", "echo", {"text": "1"}),
            text="thinking",
        )
        calls = extract_tool_calls(response)

        assert [c.id for c in calls] == ["b", "a"]

    @pytest.mark.parametrize(
        "bad",
        [
            ToolUseContent("", "echo", {}),
            ToolUseContent("x", "", {}),
            ToolUseContent("x", "echo", None),
        ],
    )
    def test_skips_malformed_calls(self, tool_reply, bad):
        good = ToolUseContent("ok", "echo", {"text": "hi"})
        calls = extract_tool_calls(tool_reply(bad, good))

        assert calls == [good]

    def test_empty_arguments_are_valid(self, tool_reply):
        call = ToolUseContent("x", "echo", {})
        assert extract_tool_calls(tool_reply(call)) == [call]

    def test_drops_duplicate_ids(self, tool_reply):
        first = ToolUseContent("dup", "echo", {"text": "1"})
        second = ToolUseContent("dup", "echo", {"text": "2"})

        assert extract_tool_calls(tool_reply(first, second)) == [first]

    def test_none_and_text_only_responses(self, text_reply):
        assert extract_tool_calls(None) == []
        assert extract_tool_calls(text_reply("hello")) == []


class TestToolRegistry:
    def test_declarations_in_registration_order(self, registry):
        assert [d.name for d in registry.declarations] == ["echo", "fail"]
        assert "echo" in registry
        assert registry.has_tool("fail")
        assert not registry.has_tool("missing")
        assert len(registry) == 2

    def test_duplicate_names_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate tool: echo"):
            ToolRegistry([(ECHO_TOOL, echo), (ECHO_TOOL, echo)])

    def test_declaration_without_handler_rejected(self):
        with pytest.raises(ConfigurationError, match="No handler for tool: fail"):
            ToolRegistry.from_handlers([ECHO_TOOL, FAIL_TOOL], {"echo": echo})

    def test_plain_functions_are_wrapped(self, registry):
        assert isinstance(registry.get("echo"), FunctionHandler)
        assert registry.get("missing") is None

    def test_objects_with_execute_are_used_as_is(self):
        class Handler:
            async def execute(self, ctx, arguments):
                return "ok"

        handler = Handler()
        registry = ToolRegistry([(ToolDeclaration("h", "handler"), handler)])

        assert registry.get("h") is handler

    def test_default_registry_has_placeholder_tools(self):
        registry = default_registry()

        assert registry.names == ["get_weather", "get_stock_price", "search", "deep_search"]


class TestToolDispatcher:
    @pytest.mark.asyncio
    async def test_results_match_call_order(self, registry):
        calls = [
            ToolUseContent("c1", "echo", {"text": "one"}),
            ToolUseContent("c2", "echo", {"text": "two"}),
            ToolUseContent("c3", "echo", {"text": "three"}),
        ]
        results = await ToolDispatcher(registry).dispatch(calls)

        assert [r.invocation_id for r in results] == ["c1", "c2", "c3"]
        assert [r.payload for r in results] == ["echo: one", "echo: two", "echo: three"]
        assert not any(r.is_error for r in results)

    @pytest.mark.asyncio
    async def test_handler_failure_does_not_stop_the_round(self, registry):
        calls = [
            ToolUseContent("c1", "fail", {}),
            ToolUseContent("c2", "echo", {"text": "after"}),
        ]
        results = await ToolDispatcher(registry).dispatch(calls)

        assert results[0].is_error
        assert results[0].payload == "Error executing tool: boom"
        assert not results[1].is_error
        assert results[1].payload == "echo: after"

    @pytest.mark.asyncio
    async def test_unknown_tool_aborts_before_any_handler_runs(self):
        executed = []

        def record(ctx, arguments):
            executed.append(ctx.call_id)
            return "ok"

        registry = ToolRegistry([(ECHO_TOOL, record)])
        calls = [
            ToolUseContent("c1", "echo", {"text": "x"}),
            ToolUseContent("c2", "nope", {}),
        ]
        with pytest.raises(DispatchError) as excinfo:
            await ToolDispatcher(registry).dispatch(calls, iteration=3)

        assert excinfo.value.tool_name == "nope"
        assert excinfo.value.call_id == "c2"
        assert excinfo.value.iteration == 3
        assert executed == []

    @pytest.mark.asyncio
    async def test_async_handlers_and_context(self):
        seen: list[ToolContext] = []

        async def handler(ctx, arguments):
            seen.append(ctx)
            await asyncio.sleep(0)
            return {"value": arguments["n"] * 2}

        registry = ToolRegistry([(ToolDeclaration("double", "x2"), handler)])
        results = await ToolDispatcher(registry).dispatch(
            [ToolUseContent("c1", "double", {"n": 21})], iteration=2
        )

        assert json.loads(results[0].payload) == {"value": 42}
        assert seen[0].call_id == "c1"
        assert seen[0].tool_name == "double"
        assert seen[0].iteration == 2

    @pytest.mark.asyncio
    async def test_handler_timeout_becomes_error_result(self):
        async def slow(ctx, arguments):
            await asyncio.sleep(10)
            return "late"

        registry = ToolRegistry([(ToolDeclaration("slow", "slow"), slow)])
        dispatcher = ToolDispatcher(registry, handler_timeout=0.01)
        results = await dispatcher.dispatch([ToolUseContent("c1", "slow", {})])

        assert results[0].is_error
        assert results[0].invocation_id == "c1"

    @pytest.mark.asyncio
    async def test_placeholder_weather_requires_location(self):
        dispatcher = ToolDispatcher(default_registry())
        results = await dispatcher.dispatch(
            [
                ToolUseContent("w1", "get_weather", {"location": "Oslo"}),
                ToolUseContent("w2", "get_weather", {}),
            ]
        )

        weather = json.loads(results[0].payload)
        assert weather["location"] == "Oslo"
        assert weather["temperature_f"] == 71
        assert results[1].is_error
        assert "location is required" in results[1].payload
