"""OpenAI adapter for pure request/response transformations."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from openai.types.chat import ChatCompletion

from llm_toolchat.request import RequestSnapshot
from llm_toolchat.response import ChatResponse
from llm_toolchat.types import (
    ContentItem,
    Role,
    StopReason,
    TextContent,
    ToolChoiceType,
    ToolResultContent,
    ToolUseContent,
    Turn,
    Usage,
)

_logger = logging.getLogger(__name__)

_FINISH_REASONS = {
    "stop": StopReason.END_TURN,
    "tool_calls": StopReason.TOOL_USE,
    "function_call": StopReason.TOOL_USE,
    "length": StopReason.MAX_TOKENS,
    "content_filter": StopReason.END_TURN,
}


def _decode_arguments(raw_args: Any) -> Optional[dict[str, Any]]:
    """Decode tool-call arguments; malformed JSON yields None so the call is dropped."""
    if isinstance(raw_args, dict):
        return raw_args
    if raw_args is None:
        return None
    if isinstance(raw_args, str) and not raw_args.strip():
        return {}
    try:
        decoded = json.loads(raw_args)
    except (TypeError, json.JSONDecodeError):
        _logger.warning("Bad JSON in tool call: %s", raw_args)
        return None
    return decoded if isinstance(decoded, dict) else None


def _turn_messages(turn: Turn) -> list[dict[str, Any]]:
    """Render one turn; a turn of tool results becomes one ``tool`` message per result."""
    if turn.role is Role.ASSISTANT:
        message: dict[str, Any] = {"role": "assistant", "content": turn.text or None}
        tool_calls = [
            {
                "id": item.id,
                "type": "function",
                "function": {
                    "name": item.name,
                    "arguments": json.dumps(item.arguments or {}),
                },
            }
            for item in turn.content
            if isinstance(item, ToolUseContent)
        ]
        if tool_calls:
            message["tool_calls"] = tool_calls
        elif message["content"] is None:
            message["content"] = ""
        return [message]

    messages: list[dict[str, Any]] = []
    for item in turn.content:
        if isinstance(item, ToolResultContent):
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": item.invocation_id,
                    "content": item.payload,
                }
            )
    text = turn.text
    if text or not messages:
        messages.append({"role": turn.role.value, "content": text})
    return messages


class OpenAIRequestAdapter:
    """Adapter for converting between generic format and OpenAI format."""

    def to_provider(self, request: RequestSnapshot) -> dict[str, Any]:
        """Convert a request snapshot to ``chat.completions.create`` keyword arguments."""
        messages: list[dict[str, Any]] = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        for turn in request.messages:
            messages.extend(_turn_messages(turn))

        args: dict[str, Any] = {"model": request.model, "messages": messages}
        if request.max_tokens:
            args["max_tokens"] = request.max_tokens
        if request.temperature:
            args["temperature"] = request.temperature
        if request.top_p:
            args["top_p"] = request.top_p
        if request.top_k:
            # not part of the Chat Completions API
            _logger.debug("Dropping top_k=%d for OpenAI-compatible request", request.top_k)
        if request.metadata:
            _logger.debug("Dropping metadata for OpenAI-compatible request")
        if request.stop_sequences:
            args["stop"] = list(request.stop_sequences)
        if request.tools:
            args["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.input_schema.as_dict(),
                    },
                }
                for tool in request.tools
            ]
        choice = request.tool_choice
        if choice is not None:
            if choice.kind == ToolChoiceType.TOOL.value:
                args["tool_choice"] = {
                    "type": "function",
                    "function": {"name": choice.name},
                }
            else:
                args["tool_choice"] = choice.kind
        return args

    def from_provider(self, raw: ChatCompletion) -> ChatResponse:
        """Convert OpenAI response to unified ChatResponse."""
        content: list[ContentItem] = []
        finish_reason = None

        if raw.choices and raw.choices[0].message:
            choice = raw.choices[0]
            finish_reason = choice.finish_reason
            message = choice.message
            if message.content:
                content.append(TextContent(message.content))
            for tc in message.tool_calls or []:
                function = getattr(tc, "function", None)
                content.append(
                    ToolUseContent(
                        id=tc.id or "",
                        name=getattr(function, "name", "") or "",
                        arguments=_decode_arguments(getattr(function, "arguments", None)),
                    )
                )

        usage = Usage()
        if getattr(raw, "usage", None) is not None:
            usage = Usage(
                input_tokens=raw.usage.prompt_tokens or 0,
                output_tokens=raw.usage.completion_tokens or 0,
            )

        return ChatResponse(
            id=raw.id,
            model=raw.model,
            content=content,
            stop_reason=_FINISH_REASONS.get(finish_reason) or StopReason.parse(finish_reason),
            usage=usage,
            raw=raw,
        )
