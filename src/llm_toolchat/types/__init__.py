from .content import (
    ContentItem,
    Role,
    StopReason,
    TextContent,
    ToolResultContent,
    ToolUseContent,
    Turn,
    Usage,
)
from .tool import InputSchema, Property, ToolChoice, ToolChoiceType, ToolDeclaration

__all__ = [
    "ContentItem",
    "Role",
    "StopReason",
    "TextContent",
    "ToolResultContent",
    "ToolUseContent",
    "Turn",
    "Usage",
    "InputSchema",
    "Property",
    "ToolChoice",
    "ToolChoiceType",
    "ToolDeclaration",
]
