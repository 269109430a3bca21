"""Anthropic messages API transport."""

from typing import Any

from clip_curator.adapters.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    post_json,
    split_system,
    usage_dict,
)
from clip_curator.config import settings
from clip_curator.errors import RETRYABLE_STATUS_CODES, ProviderError
from clip_curator.logging import get_logger

logger = get_logger(__name__)

ANTHROPIC_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_VERSION = "2023-06-01"
# 529 is "overloaded"
ANTHROPIC_TRANSIENT_CODES = RETRYABLE_STATUS_CODES | {529}
JSON_ONLY_INSTRUCTION = "Respond with valid JSON only. No other text."


class AnthropicProvider(LLMProvider):
    """Claude models over the messages API.

    There is no JSON response mode, so ``json_mode`` appends an instruction
    to the system prompt and the caller's parser strips any fences.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = ANTHROPIC_BASE_URL,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.anthropic_api_key
        self._model = model or settings.anthropic_model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.provider_timeout_seconds

        if not self.api_key:
            logger.warning("anthropic_api_key_missing")

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model(self) -> str:
        return self._model

    def build_payload(
        self,
        messages: list[LLMMessage],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> dict[str, Any]:
        system, conversation = split_system(messages)
        if json_mode:
            system = f"{system}\n\n{JSON_ONLY_INSTRUCTION}".strip()

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": m.role, "content": m.content} for m in conversation],
            "max_tokens": max_tokens,
            "temperature": min(temperature, 1.0),
        }
        if system:
            payload["system"] = system
        return payload

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        if not self.api_key:
            raise ProviderError("Anthropic API key not configured")

        data = await post_json(
            self.name,
            f"{self.base_url}/messages",
            {"x-api-key": self.api_key, "anthropic-version": ANTHROPIC_VERSION},
            self.build_payload(messages, temperature, max_tokens, json_mode),
            self.timeout,
            transient_codes=ANTHROPIC_TRANSIENT_CODES,
        )

        text = "".join(
            block.get("text", "") for block in data.get("content", []) if block.get("type") == "text"
        )
        usage = data.get("usage", {})
        response = LLMResponse(
            content=text,
            model=data.get("model", self._model),
            usage=usage_dict(usage.get("input_tokens"), usage.get("output_tokens")),
            raw_response=data,
            finish_reason=data.get("stop_reason"),
        )
        self.log_completion(response)
        return response

    async def health_check(self) -> bool:
        # A real probe costs tokens; presence of a key is the cheap signal
        return bool(self.api_key)
