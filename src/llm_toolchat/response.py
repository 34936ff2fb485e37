from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from llm_toolchat.types import (
    ContentItem,
    StopReason,
    TextContent,
    ToolUseContent,
    Usage,
)


@dataclass
class ChatResponse:
    """Unified response object for all LLM providers."""

    id: str
    model: str
    content: list[ContentItem] = field(default_factory=list)
    stop_reason: StopReason = StopReason.END_TURN
    usage: Usage = field(default_factory=Usage)
    raw: Any = None

    @property
    def text(self) -> str:
        return "".join(
            item.text for item in self.content if isinstance(item, TextContent)
        )

    @property
    def tool_uses(self) -> list[ToolUseContent]:
        """Every tool_use item, valid or not, in emission order."""
        return [item for item in self.content if isinstance(item, ToolUseContent)]

    @property
    def is_tool_use(self) -> bool:
        return self.stop_reason is StopReason.TOOL_USE
