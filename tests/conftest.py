"""Shared test fixtures: scripted transports and response builders."""

from __future__ import annotations

import itertools
from typing import Callable, Iterable, Optional

import pytest

from llm_toolchat.request import RequestSnapshot
from llm_toolchat.response import ChatResponse
from llm_toolchat.tools import ToolRegistry
from llm_toolchat.types import (
    ContentItem,
    InputSchema,
    Property,
    StopReason,
    TextContent,
    ToolDeclaration,
    ToolUseContent,
)

_ids = itertools.count(1)


def text_response(text: str = "done") -> ChatResponse:
    return ChatResponse(
        id=f"msg_{next(_ids)}",
        model="stub-model",
        content=[TextContent(text)],
        stop_reason=StopReason.END_TURN,
    )


def tool_response(*calls: ToolUseContent, text: str = "") -> ChatResponse:
    content: list[ContentItem] = [TextContent(text)] if text else []
    content.extend(calls)
    return ChatResponse(
        id=f"msg_{next(_ids)}",
        model="stub-model",
        content=content,
        stop_reason=StopReason.TOOL_USE,
    )


class StubTransport:
    """Replays scripted responses (or raises scripted exceptions) and records requests."""

    def __init__(
        self,
        responses: Iterable[ChatResponse | BaseException] = (),
        *,
        fallback: Optional[Callable[[RequestSnapshot], ChatResponse]] = None,
    ) -> None:
        self._responses = list(responses)
        self._fallback = fallback
        self.requests: list[RequestSnapshot] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, request: RequestSnapshot) -> ChatResponse:
        self.requests.append(request)
        if self._responses:
            item = self._responses.pop(0)
        elif self._fallback is not None:
            item = self._fallback(request)
        else:
            raise AssertionError("StubTransport ran out of responses")
        if isinstance(item, BaseException):
            raise item
        return item


ECHO_TOOL = ToolDeclaration(
    name="echo",
    description="Echo the text back",
    input_schema=InputSchema(
        properties={"text": Property("string", "Text to echo")},
        required=("text",),
    ),
)

FAIL_TOOL = ToolDeclaration(name="fail", description="Always fails")


def echo(ctx, arguments):
    return f"echo: {arguments['text']}"


def fail(ctx, arguments):
    raise ValueError("boom")


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry([(ECHO_TOOL, echo), (FAIL_TOOL, fail)])


@pytest.fixture
def make_transport():
    return StubTransport


@pytest.fixture
def text_reply():
    return text_response


@pytest.fixture
def tool_reply():
    return tool_response
