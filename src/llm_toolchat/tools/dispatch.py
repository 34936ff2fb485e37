"""Extracting tool calls from a response and running them through a registry."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional, Sequence

from llm_toolchat._exceptions import DispatchError, HandlerError
from llm_toolchat.logging_utils import log_json
from llm_toolchat.response import ChatResponse
from llm_toolchat.tools.registry import ToolContext, ToolHandler, ToolRegistry
from llm_toolchat.types import ToolResultContent, ToolUseContent

__all__ = ["extract_tool_calls", "ToolDispatcher"]

_logger = logging.getLogger(__name__)


def extract_tool_calls(
    response: Optional[ChatResponse],
    logger: Optional[logging.Logger] = None,
) -> list[ToolUseContent]:
    """
    Return the valid tool calls of a response, in emission order.

    A call missing its id or name, or whose arguments are null, is skipped
    rather than treated as fatal. So is a call whose id repeats an earlier
    one in the same response.
    """
    log = logger or _logger
    calls: list[ToolUseContent] = []
    if response is None:
        log.warning("Response is None, returning no tool calls")
        return calls

    seen: set[str] = set()
    for i, item in enumerate(response.tool_uses):
        if not item.id or not item.name or item.arguments is None:
            log.warning(
                "Skipping invalid tool call %d - missing required fields (id: %r, name: %r)",
                i + 1,
                item.id,
                item.name,
            )
            continue
        if item.id in seen:
            log.warning("Skipping duplicate tool call id %r", item.id)
            continue
        seen.add(item.id)
        calls.append(item)

    log.debug("Extracted %d valid tool calls", len(calls))
    return calls


class ToolDispatcher:
    """
    Runs validated tool calls against a registry, one at a time.

    Usage::

        dispatcher = ToolDispatcher(registry)
        results = await dispatcher.dispatch(calls, iteration=0)

    Every name is resolved up front: an unknown tool raises ``DispatchError``
    before any handler runs. A failing handler never aborts the round; its
    failure becomes an ``is_error`` result.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        handler_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.registry = registry
        self.handler_timeout = handler_timeout
        self.logger = logger or _logger

    def resolve(
        self, calls: Sequence[ToolUseContent], iteration: int = 0
    ) -> list[tuple[ToolUseContent, ToolHandler]]:
        resolved = []
        for call in calls:
            handler = self.registry.get(call.name)
            if handler is None:
                self.logger.error("No handler found for tool '%s'", call.name)
                raise DispatchError(call.name, call.id, iteration=iteration)
            resolved.append((call, handler))
        return resolved

    async def dispatch(
        self, calls: Sequence[ToolUseContent], iteration: int = 0
    ) -> list[ToolResultContent]:
        """Execute ``calls`` in order and return one result per call, in the same order."""
        results: list[ToolResultContent] = []
        for call, handler in self.resolve(calls, iteration):
            results.append(await self._run(call, handler, iteration))
        return results

    async def _run(
        self, call: ToolUseContent, handler: ToolHandler, iteration: int
    ) -> ToolResultContent:
        self.logger.info("Executing tool '%s' (id: %s)", call.name, call.id)
        log_json(self.logger, "Tool call input parameters", call.arguments)

        ctx = ToolContext(
            call_id=call.id,
            tool_name=call.name,
            iteration=iteration,
            logger=self.logger,
        )
        try:
            if self.handler_timeout is not None:
                async with asyncio.timeout(self.handler_timeout):
                    output = await handler.execute(ctx, dict(call.arguments or {}))
            else:
                output = await handler.execute(ctx, dict(call.arguments or {}))
            payload = _to_payload(output)
        except Exception as exc:
            error = HandlerError(call.name, call.id, exc)
            self.logger.warning("Tool execution failed: %s", error, exc_info=exc)
            return ToolResultContent(call.id, str(error), is_error=True)

        self.logger.debug("Tool execution successful")
        log_json(self.logger, "Tool execution result", payload)
        return ToolResultContent(call.id, payload)


def _to_payload(output: Any) -> str:
    if isinstance(output, str):
        return output
    return json.dumps(output, default=str)
