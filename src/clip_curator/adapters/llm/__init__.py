"""Language model adapters.

``get_llm_client()`` resolves the configured provider name to a capability
implementation. Switching provider is a configuration change only.
"""

from collections.abc import Callable

from clip_curator.adapters.llm.anthropic import AnthropicProvider
from clip_curator.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from clip_curator.adapters.llm.client import LLMClient, PromptedLLMClient
from clip_curator.adapters.llm.gemini import GeminiProvider
from clip_curator.adapters.llm.mock import MockLLMClient
from clip_curator.adapters.llm.openai import OpenAIProvider
from clip_curator.adapters.llm.stub import StubLLMProvider
from clip_curator.config import settings

LLM_CLIENTS: dict[str, Callable[[], LLMClient]] = {
    "openai": lambda: PromptedLLMClient(OpenAIProvider()),
    "anthropic": lambda: PromptedLLMClient(AnthropicProvider()),
    "gemini": lambda: PromptedLLMClient(GeminiProvider()),
    "mock": MockLLMClient,
}


def get_llm_client(name: str | None = None) -> LLMClient:
    """Build the language model capability named by ``name`` or ``settings.llm_provider``."""
    provider_name = (name or settings.llm_provider).lower()
    try:
        factory = LLM_CLIENTS[provider_name]
    except KeyError:
        raise ValueError(
            f"Unknown LLM provider '{provider_name}'. Options: {', '.join(sorted(LLM_CLIENTS))}"
        ) from None
    return factory()


__all__ = [
    "LLM_CLIENTS",
    "AnthropicProvider",
    "GeminiProvider",
    "LLMClient",
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "MockLLMClient",
    "OpenAIProvider",
    "PromptedLLMClient",
    "StubLLMProvider",
    "get_llm_client",
]
