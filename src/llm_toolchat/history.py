"""Bounded, ordered conversation history."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from llm_toolchat.types import ContentItem, Role, Turn

__all__ = ["ConversationHistory"]


class ConversationHistory:
    """
    Sliding window of conversation turns.

    Turns are appended, never mutated in place. ``trim`` drops the oldest
    whole turns until at most ``max_turns`` remain; ``max_turns <= 0``
    means unbounded. Not safe for concurrent writers.
    """

    def __init__(
        self,
        max_turns: int = 0,
        *,
        turns: Iterable[Turn] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.max_turns = max_turns
        self.logger = logger or logging.getLogger(__name__)
        self._turns: list[Turn] = list(turns)

    def append(self, role: Role, content: Iterable[ContentItem]) -> Turn:
        """Add a new turn at the end. The content shape is not checked here."""
        turn = Turn(Role(role), tuple(content))
        self.logger.debug("Adding message to conversation (role: %s)", turn.role.value)
        self._turns.append(turn)
        return turn

    def trim(self) -> int:
        """Drop turns from the front past ``max_turns``; return how many were dropped."""
        if self.max_turns <= 0 or len(self._turns) <= self.max_turns:
            return 0
        excess = len(self._turns) - self.max_turns
        self.logger.debug("Trimming conversation to max length: %d", self.max_turns)
        del self._turns[:excess]
        return excess

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Immutable snapshot of the current turns, oldest first."""
        return tuple(self._turns)

    @property
    def last(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(turns={len(self)}, max_turns={self.max_turns})"
