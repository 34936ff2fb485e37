from __future__ import annotations

import argparse
import asyncio
import logging

from llm_toolchat import (
    InputSchema,
    MessageParams,
    Property,
    Provider,
    ToolChatClient,
    ToolChoice,
    ToolDeclaration,
    ToolRegistry,
    create_transport,
)

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

WEATHER_TOOL = ToolDeclaration(
    name="get_weather",
    description="Get the current weather in a given location",
    input_schema=InputSchema(
        properties={
            "location": Property("string", "City and state, e.g. San Francisco, CA"),
            "unit": Property("string", "Temperature unit", enum=("celsius", "fahrenheit")),
        },
        required=("location",),
    ),
)


def run_local_tool(ctx, arguments: dict) -> str:
    """Stub implementation of get_weather."""
    # imagine we call a real weather API here
    ctx.logger.info("Looking up weather for %s", arguments["location"])
    return "15 °C, mostly cloudy"


async def weather_roundtrip(provider: Provider, model: str) -> None:
    """
    Ask a weather question and let the loop run the tool for us.

    The same tool declaration is sent to every provider; the transport's
    adapter renders it in the provider's own format.
    """
    registry = ToolRegistry([(WEATHER_TOOL, run_local_tool)])
    params = MessageParams(model=model, max_tokens=1000, tool_choice=ToolChoice.auto())

    async with ToolChatClient(create_transport(provider), default_params=params) as client:
        response = await client.chat_with_tools(
            "What's the weather in San Francisco?", registry
        )
        logger.info("%s says: %s", provider.value.capitalize(), response.text)
        logger.info("History now holds %d turns", len(client.history))


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=Provider.ANTHROPIC.value,
    )
    parser.add_argument(
        "--model",
        default="claude-3-5-haiku-20241022",  # "gpt-4.1-nano-2025-04-14", "gemini-2.0-flash-lite"
    )
    args = parser.parse_args()

    asyncio.run(weather_roundtrip(Provider(args.provider), args.model))
