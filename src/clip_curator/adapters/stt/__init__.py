"""Speech-to-text adapters."""

from collections.abc import Callable

from clip_curator.adapters.stt.base import STTProvider, clean_transcript_text
from clip_curator.adapters.stt.gemini import GeminiSTTProvider
from clip_curator.adapters.stt.mock import MockSTTProvider
from clip_curator.adapters.stt.openai import OpenAIWhisperProvider
from clip_curator.config import settings

STT_PROVIDERS: dict[str, Callable[[], STTProvider]] = {
    "openai": OpenAIWhisperProvider,
    "gemini": GeminiSTTProvider,
    "mock": MockSTTProvider,
}


def get_stt_provider(name: str | None = None) -> STTProvider:
    """Build the speech-to-text provider named by ``name`` or ``settings.stt_provider``."""
    provider_name = (name or settings.stt_provider).lower()
    try:
        factory = STT_PROVIDERS[provider_name]
    except KeyError:
        raise ValueError(
            f"Unknown STT provider '{provider_name}'. Options: {', '.join(sorted(STT_PROVIDERS))}"
        ) from None
    return factory()


__all__ = [
    "STT_PROVIDERS",
    "GeminiSTTProvider",
    "MockSTTProvider",
    "OpenAIWhisperProvider",
    "STTProvider",
    "clean_transcript_text",
    "get_stt_provider",
]
