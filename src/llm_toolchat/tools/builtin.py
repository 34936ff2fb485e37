"""
Placeholder tools used by the interactive CLI and the examples.

The handlers return canned data; swap them for real lookups as needed.
"""

from __future__ import annotations

import json
from typing import Any

from llm_toolchat.tools.registry import ToolContext, ToolRegistry
from llm_toolchat.types import InputSchema, Property, ToolDeclaration

__all__ = [
    "WEATHER_TOOL",
    "STOCK_TOOL",
    "SEARCH_TOOL",
    "DEEP_SEARCH_TOOL",
    "handle_weather",
    "handle_stock",
    "handle_search",
    "handle_deep_search",
    "default_tools",
    "default_registry",
]

WEATHER_TOOL = ToolDeclaration(
    name="get_weather",
    description=(
        "Get the current weather in a given location. Returns temperature, "
        "conditions (sunny, cloudy, etc), and humidity. Always provide both "
        "Celsius and Fahrenheit in your natural language response."
    ),
    input_schema=InputSchema(
        properties={
            "location": Property(
                "string",
                "The location name (city, country, or region), "
                "e.g. 'San Francisco, CA' or 'Cambodia'",
            ),
            "unit": Property(
                "string",
                "Temperature unit (celsius or fahrenheit)",
                enum=("celsius", "fahrenheit"),
            ),
        },
        required=("location",),
    ),
)

STOCK_TOOL = ToolDeclaration(
    name="get_stock_price",
    description="Get the current stock price for a given symbol",
    input_schema=InputSchema(
        properties={"symbol": Property("string", "The stock symbol, e.g. AAPL")},
        required=("symbol",),
    ),
)

SEARCH_TOOL = ToolDeclaration(
    name="search",
    description="Search for information (placeholder - implementation needed)",
    input_schema=InputSchema(
        properties={"query": Property("string", "The search query")},
        required=("query",),
    ),
)

DEEP_SEARCH_TOOL = ToolDeclaration(
    name="deep_search",
    description="Perform a comprehensive search when deep analysis is requested",
    input_schema=InputSchema(
        properties={
            "query": Property(
                "string", "The search query or question for detailed analysis"
            )
        },
        required=("query",),
    ),
)


def _require(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} is required")
    return value


def handle_weather(ctx: ToolContext, arguments: dict[str, Any]) -> str:
    location = _require(arguments, "location")
    temp_c = 22
    weather = {
        "temperature_c": temp_c,
        "temperature_f": temp_c * 9 // 5 + 32,
        "condition": "sunny",
        "humidity": 65,
        "location": location,
    }
    return json.dumps(weather)


def handle_stock(ctx: ToolContext, arguments: dict[str, Any]) -> str:
    symbol = _require(arguments, "symbol")
    return json.dumps({"symbol": symbol.upper(), "price": "150.00"})


def handle_search(ctx: ToolContext, arguments: dict[str, Any]) -> str:
    query = _require(arguments, "query")
    return f"Search results for: {query} (implementation needed)"


def handle_deep_search(ctx: ToolContext, arguments: dict[str, Any]) -> str:
    query = _require(arguments, "query")
    ctx.logger.debug("Deep search requested: %s", query)
    return f"Deep analysis for: {query} (implementation needed)"


def default_tools() -> list[ToolDeclaration]:
    return [WEATHER_TOOL, STOCK_TOOL, SEARCH_TOOL, DEEP_SEARCH_TOOL]


def default_registry() -> ToolRegistry:
    """Registry with every placeholder tool and its handler."""
    return ToolRegistry(
        [
            (WEATHER_TOOL, handle_weather),
            (STOCK_TOOL, handle_stock),
            (SEARCH_TOOL, handle_search),
            (DEEP_SEARCH_TOOL, handle_deep_search),
        ]
    )
