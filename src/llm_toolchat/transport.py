"""
Transports: send one request snapshot, get back one parsed response.

Every provider failure surfaces as a ``TransportError``. Nothing here
retries; the SDK clients are created with ``max_retries=0`` unless the
caller asks otherwise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, Self, runtime_checkable

from anthropic import AsyncAnthropic
from anthropic.types import Message
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from llm_toolchat._exceptions import ToolChatError, classify_error
from llm_toolchat.adapters import (
    AnthropicRequestAdapter,
    GeminiRequestAdapter,
    OpenAIRequestAdapter,
)
from llm_toolchat.logging_utils import log_json
from llm_toolchat.provider import Provider, get_api_key
from llm_toolchat.request import RequestSnapshot
from llm_toolchat.response import ChatResponse

__all__ = [
    "Transport",
    "RequestAdapter",
    "BaseTransport",
    "AnthropicTransport",
    "OpenAITransport",
    "GeminiTransport",
    "create_transport",
]


@runtime_checkable
class Transport(Protocol):
    """Anything able to turn a request snapshot into a response."""

    async def send(self, request: RequestSnapshot) -> ChatResponse:
        """Send ``request``; raise ``TransportError`` on failure."""
        ...


class RequestAdapter(Protocol):
    """Protocol for adapting between generic request format and provider-specific format."""

    def to_provider(self, request: RequestSnapshot) -> dict[str, Any]:
        """Convert a request snapshot to provider-specific request arguments."""
        ...

    def from_provider(self, raw: Any) -> ChatResponse:
        """Convert provider response to unified ChatResponse."""
        ...


class BaseTransport(ABC):
    """
    Abstract base class for async transports backed by a provider SDK.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.name = name or self.__class__.__name__

    @abstractmethod
    async def _send_impl(self, args: dict[str, Any]) -> Any:
        """
        Core asynchronous implementation for sending one request.
        This method must be implemented by subclasses.

        Args:
            args: Provider-specific keyword arguments built by the adapter.

        Returns:
            The raw provider response.
        """
        ...

    @property
    @abstractmethod
    def adapter(self) -> RequestAdapter:
        """Request adapter for this provider."""
        ...

    async def send(self, request: RequestSnapshot) -> ChatResponse:
        """
        Send one request and return the parsed response.

        Raises:
            TransportError: the provider call or response parsing failed.
        """
        args = self.adapter.to_provider(request)
        self._log(f"Sending request to model {request.model}", logging.DEBUG)
        log_json(self.logger, "Request payload", args)
        try:
            raw = await self._send_impl(args)
            response = self.adapter.from_provider(raw)
        except ToolChatError:
            raise
        except Exception as exc:
            raise classify_error(exc, self.logger) from exc
        log_json(
            self.logger,
            "API response",
            {
                "id": response.id,
                "model": response.model,
                "stop_reason": response.stop_reason,
                "content": response.content,
                "usage": response.usage,
            },
        )
        return response

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """
        Close underlying async HTTP clients to avoid cleanup after the loop closes.
        Safe to call multiple times.
        """
        client = getattr(self, "_client", None)
        close = getattr(client, "close", None)
        if close:
            await close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class AnthropicTransport(BaseTransport):
    """
    Anthropic Messages API transport.

    Use ``AnthropicTransport.from_client`` when you already have an ``AsyncAnthropic`` instance.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 0,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(logger=logger, name=name)
        self._client = AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = AnthropicRequestAdapter()

    @classmethod
    def from_client(
        cls,
        client: AsyncAnthropic,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Wrap an existing ``AsyncAnthropic`` client.
        """
        if not isinstance(client, AsyncAnthropic):
            raise TypeError(
                f"AnthropicTransport.from_client expects AsyncAnthropic; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseTransport.__init__(self, logger=logger, name=name)
        self._client = client
        self._adapter = AnthropicRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        """Request adapter for Anthropic provider."""
        return self._adapter

    async def _send_impl(self, args: dict[str, Any]) -> Message:
        response: Message = await self._client.messages.create(**args)
        return response


class OpenAITransport(BaseTransport):
    """
    OpenAI Chat Completions transport.

    Use ``OpenAITransport.from_client`` when you already have an ``AsyncOpenAI`` instance.
    """

    adapter_class: type = OpenAIRequestAdapter

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 0,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(logger=logger, name=name)
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = self.adapter_class()

    @classmethod
    def from_client(
        cls,
        client: AsyncOpenAI,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build a transport around an already‑configured ``AsyncOpenAI`` client.
        """
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"{cls.__name__}.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseTransport.__init__(self, logger=logger, name=name)
        self._client = client
        self._adapter = cls.adapter_class()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        """Request adapter for OpenAI provider."""
        return self._adapter

    async def _send_impl(self, args: dict[str, Any]) -> ChatCompletion:
        response: ChatCompletion = await self._client.chat.completions.create(**args)
        return response


_DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


class GeminiTransport(OpenAITransport):
    """
    Gemini transport via the OpenAI-compatible endpoint.
    """

    adapter_class: type = GeminiRequestAdapter

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 0,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: str = _DEFAULT_GEMINI_BASE_URL,
    ) -> None:
        super().__init__(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            logger=logger,
            name=name,
            base_url=base_url,
        )


# Factory for creating transports

_TRANSPORT_REGISTRY: dict[Provider, type[BaseTransport]] = {
    Provider.ANTHROPIC: AnthropicTransport,
    Provider.OPENAI: OpenAITransport,
    Provider.GEMINI: GeminiTransport,
}


def create_transport(
    provider: Provider,
    *,
    api_key: str | None = None,
    client: AsyncOpenAI | AsyncAnthropic | None = None,
    logger: logging.Logger | None = None,
    **provider_kwargs: Any,
) -> BaseTransport:
    """
    Factory for creating any supported transport.

    Args:
        provider: Which provider to use (ANTHROPIC, OPENAI, GEMINI).
        api_key: Overrides automatic lookup; if omitted, pulled from env.
        client: Optional pre-configured client instance to use.
            - For Provider.ANTHROPIC: an AsyncAnthropic instance
            - For Provider.OPENAI and Provider.GEMINI: an AsyncOpenAI instance
            If not provided, the relevant client with the default configuration will be used.
        logger: Optional custom logger.
        **provider_kwargs: Extra constructor args (timeout, max_retries, base_url, name).
            With a caller-supplied ``client`` only ``name`` applies; the client
            already carries its own connection settings.

    Raises:
        ValueError: unsupported provider, or connection settings passed
            together with ``client``.
    """
    try:
        transport_cls = _TRANSPORT_REGISTRY[Provider(provider)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    if client is not None:  # use caller‑supplied client verbatim
        name = provider_kwargs.pop("name", None)
        if provider_kwargs:
            raise ValueError(
                f"Cannot apply {', '.join(sorted(provider_kwargs))} to a caller-supplied client"
            )
        return transport_cls.from_client(client, logger=logger, name=name)

    key = api_key or get_api_key(provider)
    return transport_cls(api_key=key, logger=logger, **provider_kwargs)
