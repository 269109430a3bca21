"""Base interface for language model transports."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from clip_curator.errors import RETRYABLE_STATUS_CODES, ProviderError, TransientProviderError
from clip_curator.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LLMResponse:
    """One completion and its token accounting."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    raw_response: dict[str, Any] | None = None
    finish_reason: str | None = None

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


@dataclass
class LLMMessage:
    role: str  # "system", "user", "assistant"
    content: str


def split_system(messages: list[LLMMessage]) -> tuple[str, list[LLMMessage]]:
    """Pull system messages out of the conversation (Anthropic and Gemini take them separately)."""
    system = "\n\n".join(m.content for m in messages if m.role == "system")
    return system, [m for m in messages if m.role != "system"]


def usage_dict(prompt: int | None, completion: int | None) -> dict[str, int]:
    prompt, completion = prompt or 0, completion or 0
    return {"prompt_tokens": prompt, "completion_tokens": completion, "total_tokens": prompt + completion}


async def post_json(
    provider: str,
    url: str,
    headers: dict[str, str],
    payload: dict[str, Any],
    timeout: float,
    transient_codes: frozenset[int] = RETRYABLE_STATUS_CODES,
) -> dict[str, Any]:
    """POST a JSON request and classify failures for the step runner.

    Throttling and server errors raise :class:`TransientProviderError`;
    anything else non-2xx raises :class:`ProviderError` with the body excerpt.
    """
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.post(url, headers=headers, json=payload)

    if response.is_success:
        return response.json()

    excerpt = response.text[:300]
    logger.warning("llm_http_error", provider=provider, status=response.status_code, body=excerpt)
    if response.status_code in transient_codes:
        raise TransientProviderError(f"{provider} returned {response.status_code}: {excerpt}")
    raise ProviderError(f"{provider} returned {response.status_code}: {excerpt}")


class LLMProvider(ABC):
    """Abstract base class for chat-completion transports.

    Implementations:
    - OpenAIProvider: OpenAI chat completions
    - AnthropicProvider: Anthropic messages API
    - GeminiProvider: Google Gemini via google-genai

    The content-level capability (segments, edit plans, metadata, queries,
    evaluations) is built on top of this in ``PromptedLLMClient``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        """Model the provider sends requests to."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a completion from messages.

        Args:
            messages: Conversation, system prompt first
            temperature: Sampling temperature
            max_tokens: Output token ceiling
            json_mode: Ask the model for a bare JSON document

        Raises:
            TransientProviderError: throttled or server-side failure, worth retrying.
            ProviderError: rejected request or missing credentials.
        """
        ...

    def log_completion(self, response: LLMResponse) -> None:
        logger.info(
            "llm_completed",
            provider=self.name,
            model=response.model,
            tokens_used=response.total_tokens,
            finish_reason=response.finish_reason,
        )

    async def health_check(self) -> bool:
        """Check if the provider is available."""
        return True
