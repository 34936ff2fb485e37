"""Interactive tool-enabled chat on the command line."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from typing import Awaitable, Callable, Optional, Sequence

from llm_toolchat._exceptions import ToolChatError
from llm_toolchat.client import ToolChatClient
from llm_toolchat.logging_utils import open_debug_log
from llm_toolchat.params import DEFAULT_MODEL, MessageParams
from llm_toolchat.provider import Provider
from llm_toolchat.tools.builtin import default_registry
from llm_toolchat.tools.registry import ToolRegistry
from llm_toolchat.transport import create_transport
from llm_toolchat.types import ToolChoice

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"

ReadLine = Callable[[str], Awaitable[Optional[str]]]


async def _read_stdin(prompt: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-toolchat",
        description="Chat with an LLM that can call local tools.",
    )
    parser.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=Provider.ANTHROPIC.value,
    )
    parser.add_argument("--model", default=DEFAULT_MODEL)
    parser.add_argument("--max-tokens", type=int, default=7900)
    parser.add_argument(
        "--max-turns",
        type=int,
        default=1000,
        help="Conversation turns kept in history (0 keeps everything).",
    )
    parser.add_argument("--system", default="", help="System prompt.")
    parser.add_argument(
        "--debug", action="store_true", help="Write a debug log for this session."
    )
    parser.add_argument("--log-dir", default="logs")
    return parser


async def run_chat(
    client: ToolChatClient,
    registry: ToolRegistry,
    *,
    read_line: ReadLine = _read_stdin,
    write: Callable[[str], None] = print,
) -> None:
    """Read messages until ``exit`` or end of input, answering each with the tool loop."""
    write("Chat initialized with tools. Type 'exit' to quit.")
    write("Available tools:")
    for tool in registry.declarations:
        write(f"- {tool.name}: {tool.description}")
    write("\nEnter your message:")

    while True:
        line = await read_line("> ")
        if line is None:
            break
        message = line.strip()
        if message == EXIT_COMMAND:
            break
        if not message:
            continue

        try:
            response = await client.chat_with_tools(message, registry)
        except ToolChatError as exc:
            write(f"Error: {exc}")
            continue

        write("\nAssistant:")
        write(response.text)
        write("")


async def _main(args: argparse.Namespace) -> None:
    registry = default_registry()
    params = MessageParams(
        model=args.model,
        max_tokens=args.max_tokens,
        tools=registry.declarations,
        tool_choice=ToolChoice.auto(),
    )

    with contextlib.ExitStack() as stack:
        chat_logger = (
            stack.enter_context(open_debug_log(args.log_dir)) if args.debug else None
        )
        transport = create_transport(Provider(args.provider), logger=chat_logger)
        async with ToolChatClient(
            transport,
            system_prompt=args.system,
            default_params=params,
            max_turns=args.max_turns,
            logger=chat_logger,
        ) as client:
            await run_chat(client, registry)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING)
    try:
        asyncio.run(_main(args))
    except KeyboardInterrupt:
        return 130
    except RuntimeError as exc:
        # missing API key and similar setup problems
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
