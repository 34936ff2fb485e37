"""
Error taxonomy for the tool-use loop, plus translation of noisy provider
tracebacks into a unified `TransportError` that preserves the original
exception for full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

import anthropic
import openai

__all__: tuple[str, ...] = (
    "ToolChatError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "DispatchError",
    "HandlerError",
    "IterationLimitError",
    "classify_error",
)


class ToolChatError(RuntimeError):
    """Base exception for all llm-toolchat errors."""


class ConfigurationError(ToolChatError):
    """Invalid tool or tool-choice setup, detected before any network call."""


class TransportError(ToolChatError):
    """The provider could not be reached or rejected the request.

    Attributes:
        original_exc: The underlying provider exception.
        iteration: Loop round during which the request failed, if known.
    """

    original_exc: Exception

    def __init__(
        self,
        message: str,
        original_exc: Exception,
        *,
        iteration: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        self.iteration = iteration
        self.__cause__ = original_exc


class ProtocolError(ToolChatError):
    """The service broke the tool-use contract (e.g. tool_use with no usable call)."""

    def __init__(self, message: str, *, iteration: Optional[int] = None) -> None:
        super().__init__(message)
        self.iteration = iteration


class DispatchError(ToolChatError):
    """The service asked for a tool that has no registered handler."""

    def __init__(
        self, tool_name: str, call_id: str, *, iteration: Optional[int] = None
    ) -> None:
        super().__init__(f"No handler for tool: {tool_name} (call {call_id})")
        self.tool_name = tool_name
        self.call_id = call_id
        self.iteration = iteration


class HandlerError(ToolChatError):
    """A single tool handler failed.

    Never propagated out of the loop: the dispatcher encodes it as an
    error-flagged tool result and carries on.
    """

    original_exc: Exception

    def __init__(self, tool_name: str, call_id: str, original_exc: Exception) -> None:
        super().__init__(f"Error executing tool: {original_exc}")
        self.tool_name = tool_name
        self.call_id = call_id
        self.original_exc = original_exc
        self.__cause__ = original_exc


class IterationLimitError(ToolChatError):
    """The service kept requesting tools past the configured number of rounds."""

    def __init__(self, max_iterations: int) -> None:
        super().__init__(
            f"Exceeded maximum number of tool call iterations ({max_iterations})"
        )
        self.max_iterations = max_iterations


OpenAI_APIError: Final = openai.APIError
OpenAI_APIConnectionError: Final = openai.APIConnectionError
OpenAI_RateLimitError: Final = openai.RateLimitError

Anthropic_APIError: Final = anthropic.APIError
Anthropic_APIConnectionError: Final = anthropic.APIConnectionError
Anthropic_RateLimitError: Final = anthropic.RateLimitError

API_ERRORS: Final[tuple[Type[Exception], ...]] = (
    OpenAI_APIError,
    Anthropic_APIError,
)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    OpenAI_APIConnectionError,
    Anthropic_APIConnectionError,
    TimeoutError,
    ConnectionError,
)

RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (
    OpenAI_RateLimitError,
    Anthropic_RateLimitError,
)


def classify_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> TransportError:
    """Wrap an SDK exception in TransportError with a friendly, concise message."""
    log = logger or logging.getLogger("llm_toolchat.exceptions")

    if isinstance(exc, TransportError):
        return exc
    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate‑limit exceeded – please retry later"
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem – unable to reach the LLM provider"
    elif isinstance(exc, API_ERRORS):
        status = getattr(exc, "status_code", None)
        msg = (
            f"Provider reported an error ({status})"
            if status is not None
            else "Provider reported an internal error"
        )
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping provider exception", extra={"exc": exc})
    return TransportError(f"{msg}: {exc}", exc)
