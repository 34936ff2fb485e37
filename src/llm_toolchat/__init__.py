"""
LLM Toolchat - tool-use conversation loop over multiple LLM providers.
"""

from ._exceptions import (
    ConfigurationError,
    DispatchError,
    HandlerError,
    IterationLimitError,
    ProtocolError,
    ToolChatError,
    TransportError,
)
from .client import ToolChatClient
from .history import ConversationHistory
from .logging_utils import open_debug_log
from .loop import LoopState, ToolLoop
from .params import MessageParams, merge_params, validate_tool_params
from .provider import Provider, get_api_key
from .request import RequestSnapshot, build_request
from .response import ChatResponse
from .tools import (
    FunctionHandler,
    ToolContext,
    ToolDispatcher,
    ToolHandler,
    ToolRegistry,
    default_registry,
    extract_tool_calls,
)
from .transport import (
    AnthropicTransport,
    BaseTransport,
    GeminiTransport,
    OpenAITransport,
    Transport,
    create_transport,
)
from .types import (
    InputSchema,
    Property,
    Role,
    StopReason,
    TextContent,
    ToolChoice,
    ToolDeclaration,
    ToolResultContent,
    ToolUseContent,
    Turn,
    Usage,
)

__version__ = "0.1.0"

__all__ = [
    "ToolChatClient",
    "ToolLoop",
    "LoopState",
    "ConversationHistory",
    "MessageParams",
    "merge_params",
    "validate_tool_params",
    "RequestSnapshot",
    "build_request",
    "ChatResponse",
    "FunctionHandler",
    "ToolContext",
    "ToolDispatcher",
    "ToolHandler",
    "ToolRegistry",
    "default_registry",
    "extract_tool_calls",
    "Transport",
    "BaseTransport",
    "AnthropicTransport",
    "OpenAITransport",
    "GeminiTransport",
    "create_transport",
    "Provider",
    "get_api_key",
    "open_debug_log",
    "InputSchema",
    "Property",
    "Role",
    "StopReason",
    "TextContent",
    "ToolChoice",
    "ToolDeclaration",
    "ToolResultContent",
    "ToolUseContent",
    "Turn",
    "Usage",
    "ToolChatError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "DispatchError",
    "HandlerError",
    "IterationLimitError",
]
