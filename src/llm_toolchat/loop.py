"""
The tool-use interaction loop.

One user message goes in; one completed assistant turn comes out, with any
number of server-requested tool rounds executed in between::

    AWAITING_USER_INPUT -> SENDING -> AWAITING_TOOLS (0+ rounds) -> DONE | FAILED

Every append to the history happens only after the step producing it has
completed, so a cancelled request or handler commits nothing. Turns
committed before a failure stay in the history.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Sequence

from llm_toolchat._exceptions import (
    IterationLimitError,
    ProtocolError,
    ToolChatError,
    TransportError,
    classify_error,
)
from llm_toolchat.history import ConversationHistory
from llm_toolchat.logging_utils import log_json
from llm_toolchat.params import MessageParams, validate_tool_params
from llm_toolchat.request import build_request
from llm_toolchat.response import ChatResponse
from llm_toolchat.tools.dispatch import ToolDispatcher, extract_tool_calls
from llm_toolchat.tools.registry import ToolRegistry
from llm_toolchat.transport import Transport
from llm_toolchat.types import Role, TextContent, ToolResultContent, ToolUseContent

__all__ = ["LoopState", "ToolLoop", "DEFAULT_MAX_ITERATIONS"]

DEFAULT_MAX_ITERATIONS = 10


class LoopState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    SENDING = "sending"
    AWAITING_TOOLS = "awaiting_tools"
    DONE = "done"
    FAILED = "failed"


class ToolLoop:
    """
    Runs a single loop invocation against a history it does not own.

    The registry and params are read-only for the whole invocation; in
    particular the tool choice stays fixed across rounds.
    """

    def __init__(
        self,
        transport: Transport,
        history: ConversationHistory,
        registry: ToolRegistry,
        params: MessageParams,
        *,
        system_prompt: str = "",
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        handler_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.transport = transport
        self.history = history
        self.registry = registry
        self.params = params
        self.system_prompt = system_prompt
        self.max_iterations = max_iterations
        self.logger = logger or logging.getLogger(__name__)
        self.name = name or self.__class__.__name__
        self.dispatcher = ToolDispatcher(
            registry, handler_timeout=handler_timeout, logger=self.logger
        )

        self.state = LoopState.AWAITING_USER_INPUT
        self.rounds = 0
        self.error: Optional[ToolChatError] = None

    async def run(self, message: str) -> ChatResponse:
        """
        Turn ``message`` into a completed assistant response.

        Raises:
            ConfigurationError: inconsistent tool configuration; nothing is sent.
            TransportError: the request could not be completed.
            ProtocolError: the service asked for tools without a usable call.
            DispatchError: the service asked for an unregistered tool.
            IterationLimitError: more than ``max_iterations`` requests were needed.
        """
        if self.state is not LoopState.AWAITING_USER_INPUT:
            raise RuntimeError(f"{self.name} has already run")
        try:
            return await self._run(message)
        except ToolChatError as exc:
            self.state = LoopState.FAILED
            self.error = exc
            self._log(f"Tool interaction failed: {exc}", logging.ERROR)
            raise
        except BaseException:
            # cancellation included
            self.state = LoopState.FAILED
            raise

    async def _run(self, message: str) -> ChatResponse:
        self._log("Starting tool-enabled chat interaction")
        log_json(self.logger, "Tool parameters", self.params.as_dict())

        validate_tool_params(self.params, self.logger, available=self.registry.names)

        self.history.append(Role.USER, [TextContent(message)])
        self.history.trim()

        while True:
            if self.rounds >= self.max_iterations:
                raise IterationLimitError(self.max_iterations)

            iteration = self.rounds
            self._log(
                f"Starting tool interaction iteration {iteration + 1}/{self.max_iterations}",
                logging.DEBUG,
            )
            self.state = LoopState.SENDING
            response = await self._send(iteration)
            self.rounds += 1

            self.history.append(Role.ASSISTANT, response.content)
            self.history.trim()

            if not response.is_tool_use:
                self._log(
                    f"Tool interaction complete - stop reason: {response.stop_reason.value}"
                )
                self.state = LoopState.DONE
                return response

            self.state = LoopState.AWAITING_TOOLS
            calls = extract_tool_calls(response, self.logger)
            if not calls:
                raise ProtocolError(
                    "received tool_use stop reason but no valid tool calls found",
                    iteration=iteration,
                )

            results = await self.dispatcher.dispatch(calls, iteration)
            _check_results(calls, results, iteration)

            self.history.append(Role.USER, results)
            self.history.trim()

    async def _send(self, iteration: int) -> ChatResponse:
        request = build_request(self.params, self.history, self.system_prompt)
        try:
            return await self.transport.send(request)
        except ToolChatError as exc:
            if isinstance(exc, TransportError) and exc.iteration is None:
                exc.iteration = iteration
            raise
        except Exception as exc:
            wrapped = classify_error(exc, self.logger)
            raise TransportError(
                f"chat request error (iteration {iteration}): {wrapped}",
                exc,
                iteration=iteration,
            ) from exc

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")


def _check_results(
    calls: Sequence[ToolUseContent],
    results: Sequence[ToolResultContent],
    iteration: int,
) -> None:
    """Every result must answer a distinct call of the preceding assistant turn."""
    expected = {call.id for call in calls}
    seen: set[str] = set()
    for result in results:
        if result.invocation_id not in expected or result.invocation_id in seen:
            raise ProtocolError(
                f"tool result {result.invocation_id!r} does not match a pending tool call",
                iteration=iteration,
            )
        seen.add(result.invocation_id)

