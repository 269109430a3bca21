"""Base interface for speech-to-text providers."""

import re
from abc import ABC, abstractmethod

import httpx

from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import TranscriptResult, TranscriptSegment

SENTENCEPIECE_MARK = "▁"

_SPACE_BEFORE_PUNCT = re.compile(r"\s+([.,!?;:%)\]])")
_MULTI_SPACE = re.compile(r"\s{2,}")


def clean_transcript_text(text: str, language: ContentLanguage) -> str:
    """Normalize provider output.

    Japanese has no word spacing, so sentencepiece marks and spaces are
    removed. Other languages turn marks into spaces and tidy punctuation.
    """
    if not text:
        return ""
    if language == ContentLanguage.JA:
        return re.sub(r"\s+", "", text.replace(SENTENCEPIECE_MARK, ""))
    cleaned = text.replace(SENTENCEPIECE_MARK, " ")
    cleaned = _SPACE_BEFORE_PUNCT.sub(r"\1", cleaned)
    return _MULTI_SPACE.sub(" ", cleaned).strip()


def build_result(
    raw_segments: list[tuple[int, int, str]],
    language: ContentLanguage,
    confidence: float | None = None,
) -> TranscriptResult:
    """Assemble a cleaned, time-ordered transcript from ``(start_ms, end_ms, text)``."""
    segments = [
        TranscriptSegment(start_ms=start, end_ms=end, text=clean_transcript_text(text, language))
        for start, end, text in sorted(raw_segments, key=lambda s: s[0])
    ]
    segments = [s for s in segments if s.text]
    joiner = "" if language == ContentLanguage.JA else " "
    return TranscriptResult(
        text=joiner.join(s.text for s in segments),
        segments=segments,
        language=language,
        confidence=confidence,
    )


async def fetch_audio(audio_url: str, timeout: float) -> bytes:
    """Download audio behind a presigned URL."""
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        response = await client.get(audio_url)
        response.raise_for_status()
        return response.content


class STTProvider(ABC):
    """Abstract base class for speech-to-text providers.

    Implementations:
    - OpenAIWhisperProvider: OpenAI audio transcriptions API
    - GeminiSTTProvider: Gemini audio understanding with timestamped JSON
    - MockSTTProvider: deterministic transcript for tests
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def transcribe(self, audio_url: str, language: ContentLanguage) -> TranscriptResult:
        """Transcribe the audio at ``audio_url``.

        Args:
            audio_url: Presigned URL of the audio artifact
            language: Spoken language of the source

        Returns:
            TranscriptResult with ordered, cleaned segments
        """
        ...

    async def health_check(self) -> bool:
        return True
