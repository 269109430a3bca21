"""OpenAI chat completions transport."""

from typing import Any

import httpx

from clip_curator.adapters.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    post_json,
    usage_dict,
)
from clip_curator.config import settings
from clip_curator.errors import ProviderError
from clip_curator.logging import get_logger

logger = get_logger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAIProvider(LLMProvider):
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = OPENAI_BASE_URL,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self._model = model or settings.openai_model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.provider_timeout_seconds

        if not self.api_key:
            logger.warning("openai_api_key_missing")

    @property
    def name(self) -> str:
        return "openai"

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
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            # Only guarantees syntax; the prompt still has to name the shape
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        if not self.api_key:
            raise ProviderError("OpenAI API key not configured")

        data = await post_json(
            self.name,
            f"{self.base_url}/chat/completions",
            {"Authorization": f"Bearer {self.api_key}"},
            self.build_payload(messages, temperature, max_tokens, json_mode),
            self.timeout,
        )

        choices = data.get("choices") or []
        if not choices:
            raise ProviderError("OpenAI returned no choices")
        usage = data.get("usage", {})
        response = LLMResponse(
            content=choices[0].get("message", {}).get("content") or "",
            model=data.get("model", self._model),
            usage=usage_dict(usage.get("prompt_tokens"), usage.get("completion_tokens")),
            raw_response=data,
            finish_reason=choices[0].get("finish_reason"),
        )
        self.log_completion(response)
        return response

    async def health_check(self) -> bool:
        if not self.api_key:
            return False
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{self.base_url}/models/{self._model}",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error("openai_health_check_failed", error=str(e))
            return False
