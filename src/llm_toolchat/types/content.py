"""Conversation primitives: roles, stop reasons, content items and turns."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Union

__all__ = [
    "Role",
    "StopReason",
    "TextContent",
    "ToolUseContent",
    "ToolResultContent",
    "ContentItem",
    "Turn",
    "Usage",
]

_logger = logging.getLogger(__name__)


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class StopReason(str, Enum):
    """Why the service ended its turn."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"

    @classmethod
    def parse(cls, value: Optional[str]) -> "StopReason":
        """Map a provider value to a StopReason.

        Unknown or missing values are treated as a normal end of turn so
        that they can never keep a tool loop running.
        """
        if value is None:
            return cls.END_TURN
        try:
            return cls(value)
        except ValueError:
            _logger.warning("Unknown stop reason %r, treating as end_turn", value)
            return cls.END_TURN


@dataclass(frozen=True, slots=True)
class TextContent:
    text: str


@dataclass(frozen=True, slots=True)
class ToolUseContent:
    """A request emitted by the service to call a local tool.

    Fields may be empty when the service sent a malformed block; the
    extractor drops those.
    """

    id: str
    name: str
    arguments: Optional[dict[str, Any]]


@dataclass(frozen=True, slots=True)
class ToolResultContent:
    """Payload sent back to the service after a tool finished running."""

    invocation_id: str  # must match a ToolUseContent id
    payload: str
    is_error: bool = False


ContentItem = Union[TextContent, ToolUseContent, ToolResultContent]


@dataclass(frozen=True, slots=True)
class Turn:
    """One role-attributed entry of the conversation history."""

    role: Role
    content: tuple[ContentItem, ...]

    @classmethod
    def user_text(cls, text: str) -> "Turn":
        return cls(Role.USER, (TextContent(text),))

    @classmethod
    def assistant(cls, content: Iterable[ContentItem]) -> "Turn":
        return cls(Role.ASSISTANT, tuple(content))

    @classmethod
    def tool_results(cls, results: Iterable[ToolResultContent]) -> "Turn":
        return cls(Role.USER, tuple(results))

    @property
    def text(self) -> str:
        return "".join(
            item.text for item in self.content if isinstance(item, TextContent)
        )


@dataclass(frozen=True, slots=True)
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

