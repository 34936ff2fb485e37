import asyncio

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from llm_toolchat import MessageParams, Provider, ToolChatClient, create_transport, get_api_key


async def chat_example_default_client():
    params = MessageParams(model="claude-3-5-haiku-20241022", max_tokens=1000, temperature=0.7)
    transport = create_transport(Provider.ANTHROPIC)

    async with ToolChatClient(
        transport,
        system_prompt="You are a helpful assistant.",
        default_params=params,
        max_turns=20,
    ) as client:
        first = await client.chat("What's your name?")
        second = await client.chat("And what did I just ask you?")

    print("Anthropic: ", first.text)
    print("Anthropic: ", second.text)


async def chat_example_pass_client():
    openai_client = AsyncOpenAI(max_retries=3, timeout=10)
    anthropic_client = AsyncAnthropic()
    gemini_client = AsyncOpenAI(
        api_key=get_api_key(Provider.GEMINI),
        base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
    )

    models = {
        Provider.OPENAI: ("gpt-4.1-nano-2025-04-14", openai_client),
        Provider.ANTHROPIC: ("claude-3-5-haiku-20241022", anthropic_client),
        Provider.GEMINI: ("gemini-2.0-flash-lite", gemini_client),
    }

    for provider, (model, sdk_client) in models.items():
        params = MessageParams(model=model, max_tokens=1000, temperature=0.7)
        async with ToolChatClient(
            create_transport(provider, client=sdk_client),
            system_prompt="You are a helpful assistant.",
            default_params=params,
        ) as client:
            response = await client.chat("What's your name?")
        print(f"{provider.value}: ", response.text)


if __name__ == "__main__":
    asyncio.run(chat_example_default_client())
    asyncio.run(chat_example_pass_client())
