"""OpenAI Whisper transcription provider."""

import math
from typing import Any

import httpx

from clip_curator.adapters.stt.base import STTProvider, build_result, fetch_audio
from clip_curator.config import settings
from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import TranscriptResult
from clip_curator.errors import ProviderError
from clip_curator.logging import get_logger

logger = get_logger(__name__)


class OpenAIWhisperProvider(STTProvider):
    """Transcribes through ``/audio/transcriptions`` with segment timestamps."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = "https://api.openai.com/v1",
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_stt_model
        self.base_url = base_url
        self.timeout = timeout or settings.provider_timeout_seconds

        if not self.api_key:
            logger.warning("openai_api_key_missing", provider="stt")

    @property
    def name(self) -> str:
        return "openai"

    async def transcribe(self, audio_url: str, language: ContentLanguage) -> TranscriptResult:
        if not self.api_key:
            raise ProviderError("OpenAI API key not configured")

        audio = await fetch_audio(audio_url, self.timeout)
        logger.info("whisper_request", model=self.model, language=language.value, bytes=len(audio))

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/audio/transcriptions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                data={
                    "model": self.model,
                    "language": language.value,
                    "response_format": "verbose_json",
                    "timestamp_granularities[]": "segment",
                },
                files={"file": ("audio.mp3", audio, "audio/mpeg")},
            )
            response.raise_for_status()
            data: dict[str, Any] = response.json()

        segments = data.get("segments") or []
        raw = [
            (int(float(s["start"]) * 1000), int(float(s["end"]) * 1000), str(s.get("text", "")))
            for s in segments
            if "start" in s and "end" in s
        ]
        if not raw and data.get("text"):
            duration_ms = int(float(data.get("duration") or 0) * 1000)
            raw = [(0, duration_ms, data["text"])]

        logprobs = [s["avg_logprob"] for s in segments if s.get("avg_logprob") is not None]
        confidence = sum(math.exp(lp) for lp in logprobs) / len(logprobs) if logprobs else None

        result = build_result(raw, language, confidence)
        logger.info(
            "whisper_response",
            model=self.model,
            segments=len(result.segments),
            characters=len(result.text),
        )
        return result

    async def health_check(self) -> bool:
        return bool(self.api_key)
