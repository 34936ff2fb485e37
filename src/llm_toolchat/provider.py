import os
from enum import Enum

from dotenv import load_dotenv


class Provider(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"


_ENV_VARS: dict[Provider, str] = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.GEMINI: "GEMINI_API_KEY",
}


def get_api_key(provider: Provider) -> str:
    load_dotenv()
    env = _ENV_VARS.get(Provider(provider))
    if not env:
        raise RuntimeError(f"No config for {provider}")
    key = os.getenv(env)
    if not key:
        raise RuntimeError(f"{env} missing")
    return key
