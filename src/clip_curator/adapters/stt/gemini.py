"""Gemini audio transcription provider."""

import asyncio

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from clip_curator.adapters.llm.gemini import translate_genai_error
from clip_curator.adapters.stt.base import STTProvider, build_result, fetch_audio
from clip_curator.config import settings
from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import TranscriptResult
from clip_curator.errors import ProviderError
from clip_curator.logging import get_logger
from clip_curator.utils.json_extract import as_int, parse_json_list

logger = get_logger(__name__)

TRANSCRIBE_PROMPT = """Transcribe this audio. The speech is in {language_name} ({locale}).

Split the transcript into sentence-level segments with millisecond timestamps.
Return JSON:
{{"segments": [{{"startMs": 0, "endMs": 4200, "text": "..."}}]}}"""


class GeminiSTTProvider(STTProvider):
    """Sends the audio inline to Gemini and asks for timestamped JSON."""

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        self.api_key = api_key or settings.google_api_key
        self.model = model or settings.gemini_model
        self.timeout = settings.provider_timeout_seconds
        self._client: genai.Client | None = None

        if not self.api_key:
            logger.warning("google_api_key_missing", provider="stt")

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

    async def transcribe(self, audio_url: str, language: ContentLanguage) -> TranscriptResult:
        audio = await fetch_audio(audio_url, self.timeout)
        prompt = TRANSCRIBE_PROMPT.format(language_name=language.display_name, locale=language.locale)
        config = types.GenerateContentConfig(
            temperature=0.0,
            response_mime_type="application/json",
        )

        logger.info("gemini_stt_request", model=self.model, language=language.value, bytes=len(audio))

        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                None,
                lambda: self.client.models.generate_content(
                    model=self.model,
                    contents=[
                        types.Part.from_bytes(data=audio, mime_type="audio/mpeg"),
                        prompt,
                    ],
                    config=config,
                ),
            )
        except genai_errors.APIError as e:
            raise translate_genai_error(e) from e

        raw: list[tuple[int, int, str]] = []
        for item in parse_json_list(response.text, "segments", context="gemini_stt"):
            if not isinstance(item, dict):
                continue
            start = as_int(item.get("startMs"), -1)
            end = as_int(item.get("endMs"), -1)
            if 0 <= start < end:
                raw.append((start, end, str(item.get("text", ""))))

        result = build_result(raw, language)
        logger.info("gemini_stt_response", model=self.model, segments=len(result.segments))
        return result

    async def health_check(self) -> bool:
        return bool(self.api_key)
