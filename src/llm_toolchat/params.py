"""
Request parameters for llm-toolchat.

Public API
- Clients hold a `MessageParams` of defaults; callers may pass another
  `MessageParams` as a per-call override.

Contract
- `merge_params` is a shallow, field-by-field override: an override field
  replaces the default only when it is set, i.e. neither None, zero nor
  an empty string. Empty lists count as set.
- `validate_tool_params` checks tool / tool-choice consistency once, before
  the first request of a loop invocation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Collection, Optional, Sequence

from llm_toolchat._exceptions import ConfigurationError
from llm_toolchat.types import ToolChoice, ToolChoiceType, ToolDeclaration

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_MAX_TOKENS",
    "MessageParams",
    "merge_params",
    "validate_tool_params",
]

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 4096

_VALID_TOOL_CHOICES = frozenset(choice.value for choice in ToolChoiceType)


@dataclass(frozen=True)
class MessageParams:
    """Model and sampling parameters shared by every request of a call."""

    model: str = ""
    max_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    top_k: int = 0

    # Tool parameters
    tools: Optional[Sequence[ToolDeclaration]] = None
    tool_choice: Optional[ToolChoice] = None

    # Other parameters
    stop_sequences: Optional[Sequence[str]] = None
    metadata: Optional[dict[str, Any]] = None

    def as_dict(self, exclude_unset: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary, optionally excluding unset (zero/None) values.

        Tool declarations and tool choice are rendered as plain dicts.
        """
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if exclude_unset and not _is_set(value):
                continue
            if f.name == "tools" and value is not None:
                value = [tool.as_dict() for tool in value]
            elif f.name == "tool_choice" and value is not None:
                value = value.as_dict()
            elif f.name == "stop_sequences" and value is not None:
                value = list(value)
            result[f.name] = value
        return result

    def copy(self, **kwargs: Any) -> "MessageParams":
        """Create a copy of these params with the given fields replaced."""
        return replace(self, **kwargs)


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


def merge_params(
    defaults: MessageParams | None, overrides: MessageParams | None
) -> MessageParams:
    """
    Shallow-merge client defaults with per-call overrides.

    Example
    -------
    >>> merge_params(
    ...     MessageParams(model="m", max_tokens=100, temperature=0.5),
    ...     MessageParams(max_tokens=200, temperature=0.0),
    ... )
    MessageParams(model='m', max_tokens=200, temperature=0.5, ...)
    """
    base = defaults or MessageParams()
    if overrides is None:
        return base

    changes = {
        f.name: getattr(overrides, f.name)
        for f in fields(overrides)
        if _is_set(getattr(overrides, f.name))
    }
    return replace(base, **changes)


def validate_tool_params(
    params: MessageParams,
    logger: Optional[logging.Logger] = None,
    *,
    available: Optional[Collection[str]] = None,
) -> None:
    """
    Ensure the tool configuration is internally consistent.

    Raises:
        ConfigurationError: tools are declared without a tool choice, the
            tool choice type is unknown, a named tool choice has no name, or
            (when ``available`` is given) a declared tool has no handler.
    """
    log = logger or logging.getLogger(__name__)

    choice = params.tool_choice
    if params.tools:
        log.debug("Tools are specified (%d tools configured)", len(params.tools))
        if choice is None:
            raise ConfigurationError(
                "tool_choice must be specified when tools are provided"
            )
        if available is not None:
            missing = [t.name for t in params.tools if t.name not in available]
            if missing:
                raise ConfigurationError(
                    f"no handler registered for declared tools: {', '.join(missing)}"
                )
    if choice is None:
        return
    if choice.kind not in _VALID_TOOL_CHOICES:
        raise ConfigurationError(f"invalid tool_choice type: {choice.kind}")
    if choice.kind == ToolChoiceType.TOOL.value and not choice.name:
        raise ConfigurationError(
            "tool_choice name must be specified when type is 'tool'"
        )
