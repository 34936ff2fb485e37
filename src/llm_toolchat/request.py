"""Immutable request snapshots built per call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from llm_toolchat.history import ConversationHistory
from llm_toolchat.params import MessageParams
from llm_toolchat.types import ToolChoice, ToolDeclaration, Turn

__all__ = ["RequestSnapshot", "build_request"]


@dataclass(frozen=True)
class RequestSnapshot:
    """Everything a transport needs to send one request."""

    model: str
    system: str
    messages: tuple[Turn, ...]
    max_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    top_k: int = 0
    tools: tuple[ToolDeclaration, ...] = ()
    tool_choice: Optional[ToolChoice] = None
    stop_sequences: tuple[str, ...] = ()
    metadata: Optional[dict[str, Any]] = None


def build_request(
    params: MessageParams,
    history: ConversationHistory,
    system_prompt: str = "",
) -> RequestSnapshot:
    """Combine merged params with the current (already trimmed) history."""
    return RequestSnapshot(
        model=params.model,
        system=system_prompt,
        messages=history.turns,
        max_tokens=params.max_tokens,
        temperature=params.temperature,
        top_p=params.top_p,
        top_k=params.top_k,
        tools=tuple(params.tools or ()),
        tool_choice=params.tool_choice,
        stop_sequences=tuple(params.stop_sequences or ()),
        metadata=dict(params.metadata) if params.metadata else None,
    )
