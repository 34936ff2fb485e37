"""Anthropic adapter for pure request/response transformations."""

from __future__ import annotations

from typing import Any

from anthropic.types import Message

from llm_toolchat.params import DEFAULT_MAX_TOKENS
from llm_toolchat.request import RequestSnapshot
from llm_toolchat.response import ChatResponse
from llm_toolchat.types import (
    ContentItem,
    Role,
    StopReason,
    TextContent,
    ToolResultContent,
    ToolUseContent,
    Turn,
    Usage,
)


def content_block(item: ContentItem) -> dict[str, Any]:
    """Render one content item as an Anthropic content block."""
    if isinstance(item, TextContent):
        return {"type": "text", "text": item.text}
    if isinstance(item, ToolUseContent):
        return {
            "type": "tool_use",
            "id": item.id,
            "name": item.name,
            "input": item.arguments or {},
        }
    if isinstance(item, ToolResultContent):
        block: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": item.invocation_id,
            "content": item.payload,
        }
        if item.is_error:
            block["is_error"] = True
        return block
    raise TypeError(f"Unsupported content item: {type(item).__name__}")


def message_param(turn: Turn) -> dict[str, Any]:
    return {
        "role": turn.role.value,
        "content": [content_block(item) for item in turn.content],
    }


class AnthropicRequestAdapter:
    """Adapter for converting between generic format and Anthropic format."""

    def to_provider(self, request: RequestSnapshot) -> dict[str, Any]:
        """Convert a request snapshot to ``messages.create`` keyword arguments."""
        system_prompt = request.system
        messages = []
        for turn in request.messages:
            # Anthropic takes the system prompt as a top-level field
            if turn.role is Role.SYSTEM:
                system_prompt = system_prompt or turn.text
                continue
            messages.append(message_param(turn))

        args: dict[str, Any] = {
            "model": request.model,
            "messages": messages,
            # Anthropic requires max_tokens
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if system_prompt:
            args["system"] = system_prompt
        if request.temperature:
            args["temperature"] = request.temperature
        if request.top_p:
            args["top_p"] = request.top_p
        if request.top_k:
            args["top_k"] = request.top_k
        if request.stop_sequences:
            args["stop_sequences"] = list(request.stop_sequences)
        if request.metadata:
            args["metadata"] = dict(request.metadata)
        if request.tools:
            args["tools"] = [tool.as_dict() for tool in request.tools]
        if request.tool_choice is not None:
            args["tool_choice"] = request.tool_choice.as_dict()
        return args

    def from_provider(self, raw: Message) -> ChatResponse:
        """Convert Anthropic response to unified ChatResponse."""
        content: list[ContentItem] = []
        for block in raw.content or []:
            if block.type == "text":
                content.append(TextContent(block.text))
            elif block.type == "tool_use":
                arguments = getattr(block, "input", None)
                content.append(
                    ToolUseContent(
                        id=getattr(block, "id", "") or "",
                        name=getattr(block, "name", "") or "",
                        arguments=dict(arguments) if hasattr(arguments, "items") else None,
                    )
                )
            # thinking and other block types are not part of the history

        usage = Usage()
        if getattr(raw, "usage", None) is not None:
            usage = Usage(
                input_tokens=raw.usage.input_tokens or 0,
                output_tokens=raw.usage.output_tokens or 0,
            )

        return ChatResponse(
            id=raw.id,
            model=raw.model,
            content=content,
            stop_reason=StopReason.parse(raw.stop_reason),
            usage=usage,
            raw=raw,
        )
