"""
Provider‑neutral tool declarations and tool-choice policy.

They are intentionally minimal: everything provider‑specific lives in adapters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

__all__ = [
    "Property",
    "InputSchema",
    "ToolDeclaration",
    "ToolChoiceType",
    "ToolChoice",
]


@dataclass(frozen=True, slots=True)
class Property:
    type: str
    description: str = ""
    enum: Optional[tuple[str, ...]] = None

    def as_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            result["enum"] = list(self.enum)
        return result


@dataclass(frozen=True, slots=True)
class InputSchema:
    """JSON schema of a tool's arguments, always an object at the top level."""

    properties: dict[str, Property] = field(default_factory=dict)
    required: tuple[str, ...] = ()
    type: str = "object"

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "properties": {k: v.as_dict() for k, v in self.properties.items()},
            "required": list(self.required),
        }


@dataclass(frozen=True, slots=True)
class ToolDeclaration:
    """A capability offered to the service. Immutable once built."""

    name: str
    description: str
    input_schema: InputSchema = field(default_factory=InputSchema)

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema.as_dict(),
        }


class ToolChoiceType(str, Enum):
    AUTO = "auto"
    NONE = "none"
    TOOL = "tool"  # a specific, named tool


@dataclass(frozen=True, slots=True)
class ToolChoice:
    """Whether and which tools the service may invoke.

    ``type`` is kept as a plain string so that a bad value coming from
    configuration reaches the validator instead of failing at construction.
    """

    type: str = ToolChoiceType.AUTO.value
    name: Optional[str] = None

    @classmethod
    def auto(cls) -> "ToolChoice":
        return cls(ToolChoiceType.AUTO.value)

    @classmethod
    def none(cls) -> "ToolChoice":
        return cls(ToolChoiceType.NONE.value)

    @classmethod
    def tool(cls, name: str) -> "ToolChoice":
        return cls(ToolChoiceType.TOOL.value, name)

    @property
    def kind(self) -> str:
        """The policy type as a plain string."""
        return self.type.value if isinstance(self.type, Enum) else self.type

    def as_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.kind}
        if self.name:
            result["name"] = self.name
        return result
