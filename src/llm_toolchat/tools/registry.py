"""
Tool handlers and the name-keyed registry the loop dispatches through.

A registry is built once, at startup, from (declaration, handler) pairs and
is read-only afterwards: the loop never adds or removes tools mid-conversation.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Protocol, Union

from llm_toolchat._exceptions import ConfigurationError
from llm_toolchat.types import ToolDeclaration

__all__ = [
    "ToolContext",
    "ToolHandler",
    "FunctionHandler",
    "ToolRegistry",
]


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Execution context handed to a handler for a single invocation.

    Cancellation is ambient: the handler runs inside the loop's task, so
    cancelling that task (or an enclosing ``asyncio.timeout``) interrupts
    the handler at its next await.
    """

    call_id: str
    tool_name: str
    iteration: int
    logger: logging.Logger


class ToolHandler(Protocol):
    """Protocol for anything able to execute one tool."""

    async def execute(self, ctx: ToolContext, arguments: dict[str, Any]) -> Any:
        """Run the tool and return its payload (a string, or JSON-able data)."""
        ...


HandlerFunc = Callable[[ToolContext, dict[str, Any]], Union[Any, Awaitable[Any]]]


class FunctionHandler:
    """Adapt a plain function ``fn(ctx, arguments)`` to the ToolHandler protocol.

    Both regular and ``async def`` functions are accepted. Regular functions
    run inline and block the event loop for their duration.
    """

    def __init__(self, fn: HandlerFunc) -> None:
        self._fn = fn
        self.__name__ = getattr(fn, "__name__", self.__class__.__name__)

    async def execute(self, ctx: ToolContext, arguments: dict[str, Any]) -> Any:
        result = self._fn(ctx, arguments)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.__name__})"


def as_handler(handler: Union[ToolHandler, HandlerFunc]) -> ToolHandler:
    if callable(getattr(handler, "execute", None)):
        return handler  # type: ignore[return-value]
    if callable(handler):
        return FunctionHandler(handler)
    raise ConfigurationError(f"Not a tool handler: {handler!r}")


class ToolRegistry:
    """
    Mapping from tool name to ``(declaration, handler)``.

    Usage::

        registry = ToolRegistry([(WEATHER_TOOL, handle_weather)])
        params = MessageParams(tools=registry.declarations, tool_choice=ToolChoice.auto())
    """

    def __init__(
        self,
        entries: Iterable[tuple[ToolDeclaration, Union[ToolHandler, HandlerFunc]]] = (),
    ) -> None:
        tools: dict[str, tuple[ToolDeclaration, ToolHandler]] = {}
        for declaration, handler in entries:
            if not declaration.name:
                raise ConfigurationError("Tool declarations need a name")
            if declaration.name in tools:
                raise ConfigurationError(f"Duplicate tool: {declaration.name}")
            if handler is None:
                raise ConfigurationError(f"No handler for tool: {declaration.name}")
            tools[declaration.name] = (declaration, as_handler(handler))
        self._tools: Mapping[str, tuple[ToolDeclaration, ToolHandler]] = (
            MappingProxyType(tools)
        )
        self._declarations = tuple(decl for decl, _ in tools.values())

    @classmethod
    def from_handlers(
        cls,
        declarations: Iterable[ToolDeclaration],
        handlers: Mapping[str, Union[ToolHandler, HandlerFunc]],
    ) -> "ToolRegistry":
        """Pair declarations with a name-keyed handler map.

        Raises:
            ConfigurationError: a declaration has no handler in ``handlers``.
        """
        entries = []
        for declaration in declarations:
            handler = handlers.get(declaration.name)
            if handler is None:
                raise ConfigurationError(f"No handler for tool: {declaration.name}")
            entries.append((declaration, handler))
        return cls(entries)

    @property
    def declarations(self) -> tuple[ToolDeclaration, ...]:
        """Every declaration, in registration order."""
        return self._declarations

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> Optional[ToolHandler]:
        entry = self._tools.get(name)
        return entry[1] if entry else None

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.names!r})"
