"""Tests for the conversational client."""

import asyncio

import pytest

from llm_toolchat import ConfigurationError, ToolChatClient, TransportError
from llm_toolchat.params import DEFAULT_MAX_TOKENS, DEFAULT_MODEL, MessageParams
from llm_toolchat.response import ChatResponse
from llm_toolchat.tools import ToolRegistry
from llm_toolchat.types import Role, ToolChoice, ToolUseContent

AUTO = MessageParams(tool_choice=ToolChoice.auto())


class TestToolChatClient:
    def test_defaults_fill_model_and_max_tokens(self, make_transport):
        client = ToolChatClient(make_transport())

        assert client.default_params.model == DEFAULT_MODEL
        assert client.default_params.max_tokens == DEFAULT_MAX_TOKENS
        assert client.max_turns == 0
        assert client.history == ()

    def test_default_params_override_builtin_defaults(self, make_transport):
        client = ToolChatClient(
            make_transport(),
            default_params=MessageParams(model="custom", temperature=0.2),
        )

        assert client.default_params.model == "custom"
        assert client.default_params.max_tokens == DEFAULT_MAX_TOKENS
        assert client.default_params.temperature == 0.2

    @pytest.mark.asyncio
    async def test_chat_with_tools_offers_registry_declarations(
        self, make_transport, text_reply, registry
    ):
        transport = make_transport([text_reply("hi there")])
        client = ToolChatClient(transport, default_params=AUTO)

        response = await client.chat_with_tools("hello", registry)

        assert response.text == "hi there"
        assert transport.requests[0].tools == tuple(registry.declarations)
        assert [t.role for t in client.history] == [Role.USER, Role.ASSISTANT]

    @pytest.mark.asyncio
    async def test_explicit_tools_win_over_registry(
        self, make_transport, text_reply, registry
    ):
        transport = make_transport([text_reply()])
        client = ToolChatClient(transport, default_params=AUTO)
        only_echo = [registry.declarations[0]]

        await client.chat_with_tools(
            "hello", registry, params=MessageParams(tools=only_echo)
        )

        assert [d.name for d in transport.requests[0].tools] == ["echo"]

    @pytest.mark.asyncio
    async def test_per_call_params_override_defaults(
        self, make_transport, text_reply, registry
    ):
        transport = make_transport([text_reply()])
        client = ToolChatClient(
            transport, default_params=MessageParams(model="base", tool_choice=ToolChoice.auto())
        )

        await client.chat_with_tools(
            "hi", registry, params=MessageParams(model="override", top_k=5)
        )

        request = transport.requests[0]
        assert request.model == "override"
        assert request.top_k == 5
        assert request.max_tokens == DEFAULT_MAX_TOKENS

    @pytest.mark.asyncio
    async def test_missing_tool_choice_is_rejected(
        self, make_transport, registry
    ):
        transport = make_transport()
        client = ToolChatClient(transport)

        with pytest.raises(ConfigurationError):
            await client.chat_with_tools("hi", registry)

        assert transport.calls == 0
        assert client.history == ()

    @pytest.mark.asyncio
    async def test_history_carries_across_calls_and_is_bounded(
        self, make_transport, text_reply, tool_reply, registry
    ):
        transport = make_transport(
            [
                text_reply("first"),
                tool_reply(ToolUseContent("c1", "echo", {"text": "x"})),
                text_reply("second"),
            ]
        )
        client = ToolChatClient(transport, default_params=AUTO, max_turns=3)

        await client.chat_with_tools("one", registry)
        await client.chat_with_tools("two", registry)

        assert len(client.history) == 3
        assert client.history[-1].text == "second"
        # the second call's first request included the first exchange
        assert [t.text for t in transport.requests[1].messages] == ["one", "first", "two"]

    @pytest.mark.asyncio
    async def test_chat_sends_without_tools(self, make_transport, text_reply):
        transport = make_transport([text_reply("plain")])
        client = ToolChatClient(
            transport,
            system_prompt="sys",
            default_params=MessageParams(tool_choice=ToolChoice.auto()),
        )

        response = await client.chat("hi")

        assert response.text == "plain"
        request = transport.requests[0]
        assert request.tools == ()
        assert request.tool_choice is None
        assert request.system == "sys"
        assert len(client.history) == 2

    @pytest.mark.asyncio
    async def test_chat_skips_empty_replies(self, make_transport):
        empty = ChatResponse(id="msg_empty", model="stub-model")
        client = ToolChatClient(make_transport([empty]))

        await client.chat("anyone there?")

        assert [t.role for t in client.history] == [Role.USER]

    @pytest.mark.asyncio
    async def test_calls_are_serialized(self, make_transport, text_reply):
        gate = asyncio.Event()
        active = 0
        peak = 0

        class SlowTransport:
            async def send(self, request):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await gate.wait()
                active -= 1
                return text_reply("ok")

        client = ToolChatClient(SlowTransport())
        first = asyncio.create_task(client.chat("a"))
        second = asyncio.create_task(client.chat("b"))
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(first, second)

        assert peak == 1
        assert [t.text for t in client.history] == ["a", "ok", "b", "ok"]

    @pytest.mark.asyncio
    async def test_aclose_closes_transport(self, make_transport):
        closed = []

        class ClosingTransport:
            async def send(self, request):
                raise AssertionError("not used")

            async def aclose(self):
                closed.append(True)

        async with ToolChatClient(ClosingTransport()):
            pass

        assert closed == [True]

    @pytest.mark.asyncio
    async def test_aclose_tolerates_transport_without_close(self, make_transport):
        client = ToolChatClient(make_transport())
        await client.aclose()

    @pytest.mark.asyncio
    async def test_empty_registry_sends_no_tools(self, make_transport, text_reply):
        transport = make_transport([text_reply()])
        client = ToolChatClient(transport)

        await client.chat_with_tools("hi", ToolRegistry([]))

        assert transport.requests[0].tools == ()

    @pytest.mark.asyncio
    async def test_chat_wraps_transport_failures(self, make_transport):
        transport = make_transport([ConnectionError("network down")])
        client = ToolChatClient(transport)

        with pytest.raises(TransportError) as excinfo:
            await client.chat("hi")

        assert isinstance(excinfo.value.original_exc, ConnectionError)
        assert "Connection problem" in str(excinfo.value)
        assert [t.role for t in client.history] == [Role.USER]
