"""
Conversational client with a bounded history and a tool-use loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Self

from llm_toolchat._exceptions import ToolChatError, classify_error
from llm_toolchat.history import ConversationHistory
from llm_toolchat.logging_utils import log_json
from llm_toolchat.loop import DEFAULT_MAX_ITERATIONS, ToolLoop
from llm_toolchat.params import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    MessageParams,
    merge_params,
)
from llm_toolchat.request import build_request
from llm_toolchat.response import ChatResponse
from llm_toolchat.tools.registry import ToolRegistry
from llm_toolchat.transport import Transport
from llm_toolchat.types import Role, TextContent, Turn

__all__ = ["ToolChatClient"]


class ToolChatClient:
    """
    Owns one conversation: its history, default parameters and system prompt.

    Calls on a single client are serialized; run separate clients for
    independent conversations.

    Usage::

        async with ToolChatClient(transport, default_params=params, max_turns=50) as client:
            response = await client.chat_with_tools("What's the weather in Oslo?", registry)
            print(response.text)
    """

    def __init__(
        self,
        transport: Transport,
        *,
        system_prompt: str = "",
        default_params: Optional[MessageParams] = None,
        max_turns: int = 0,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        handler_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.transport = transport
        self.system_prompt = system_prompt
        self.default_params = merge_params(
            MessageParams(model=DEFAULT_MODEL, max_tokens=DEFAULT_MAX_TOKENS),
            default_params,
        )
        self.max_iterations = max_iterations
        self.handler_timeout = handler_timeout
        self.logger = logger or logging.getLogger(__name__)
        self.name = name or self.__class__.__name__
        self._history = ConversationHistory(max_turns, logger=self.logger)
        self._lock = asyncio.Lock()

        log_json(
            self.logger,
            "Client configuration",
            {
                "max_turns": max_turns,
                "max_iterations": max_iterations,
                "has_tools": bool(self.default_params.tools),
                "model": self.default_params.model,
            },
        )

    @property
    def history(self) -> tuple[Turn, ...]:
        """The current conversation, oldest turn first."""
        return self._history.turns

    @property
    def max_turns(self) -> int:
        return self._history.max_turns

    async def chat_with_tools(
        self,
        message: str,
        registry: ToolRegistry,
        *,
        params: Optional[MessageParams] = None,
    ) -> ChatResponse:
        """
        Run the tool-use loop for one user message.

        When the merged parameters declare no tools, every declaration of
        ``registry`` is offered to the service.

        Raises:
            ToolChatError: see ``ToolLoop.run`` for the individual kinds.
        """
        final_params = merge_params(self.default_params, params)
        if final_params.tools is None and len(registry):
            final_params = final_params.copy(tools=registry.declarations)

        async with self._lock:
            loop = ToolLoop(
                self.transport,
                self._history,
                registry,
                final_params,
                system_prompt=self.system_prompt,
                max_iterations=self.max_iterations,
                handler_timeout=self.handler_timeout,
                logger=self.logger,
                name=self.name,
            )
            return await loop.run(message)

    async def chat(
        self, message: str, *, params: Optional[MessageParams] = None
    ) -> ChatResponse:
        """
        Send one message without tools and return the reply.

        The assistant turn is recorded only when the reply has content.

        Raises:
            TransportError: the request could not be completed.
        """
        final_params = merge_params(self.default_params, params).copy(
            tools=None, tool_choice=None
        )
        async with self._lock:
            self._history.append(Role.USER, [TextContent(message)])
            self._history.trim()

            request = build_request(final_params, self._history, self.system_prompt)
            try:
                response = await self.transport.send(request)
            except ToolChatError:
                raise
            except Exception as exc:
                raise classify_error(exc, self.logger) from exc

            if response.content:
                self._history.append(Role.ASSISTANT, response.content)
                self._history.trim()
            return response

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """Close the transport, if it can be closed."""
        close = getattr(self.transport, "aclose", None)
        if close:
            await close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
