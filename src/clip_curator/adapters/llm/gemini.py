"""Google Gemini transport via the google-genai SDK."""

import asyncio

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from clip_curator.adapters.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    split_system,
    usage_dict,
)
from clip_curator.config import settings
from clip_curator.errors import RETRYABLE_STATUS_CODES, ProviderError, TransientProviderError
from clip_curator.logging import get_logger

logger = get_logger(__name__)


def translate_genai_error(exc: genai_errors.APIError) -> ProviderError:
    """Map SDK errors onto the retry taxonomy."""
    message = f"Gemini API {exc.code}: {exc.message}"
    if exc.code in RETRYABLE_STATUS_CODES:
        return TransientProviderError(message)
    return ProviderError(message)


def to_contents(messages: list[LLMMessage]) -> list[types.Content]:
    """Gemini names the assistant role ``model``."""
    return [
        types.Content(
            role="model" if m.role == "assistant" else "user",
            parts=[types.Part(text=m.content)],
        )
        for m in messages
    ]


class GeminiProvider(LLMProvider):
    """Google Gemini chat transport.

    The SDK call is blocking and runs in a worker thread. The client is
    created lazily so a missing key only fails on first use.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_api_key
        self._model = model or settings.gemini_model
        self._client: genai.Client | None = None

        if not self.api_key:
            logger.warning("google_api_key_missing")

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ProviderError("Google API key not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        system, conversation = split_system(messages)
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system or None,
            response_mime_type="application/json" if json_mode else None,
        )
        client = self.client

        try:
            result = await asyncio.to_thread(
                client.models.generate_content,
                model=self._model,
                contents=to_contents(conversation),
                config=config,
            )
        except genai_errors.APIError as e:
            raise translate_genai_error(e) from e

        meta = result.usage_metadata
        response = LLMResponse(
            content=result.text or "",
            model=self._model,
            usage=usage_dict(meta.prompt_token_count, meta.candidates_token_count) if meta else {},
            finish_reason=str(result.candidates[0].finish_reason) if result.candidates else None,
        )
        self.log_completion(response)
        return response

    async def health_check(self) -> bool:
        return bool(self.api_key)
