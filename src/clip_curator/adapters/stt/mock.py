"""Deterministic speech-to-text provider for tests."""

from clip_curator.adapters.stt.base import STTProvider, build_result
from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import TranscriptResult
from clip_curator.logging import get_logger

logger = get_logger(__name__)

_SENTENCES = {
    ContentLanguage.KO: "오늘은 파이썬의 기본 문법을 알아보겠습니다 .",
    ContentLanguage.EN: "Today we will look at the basic syntax of Python .",
    ContentLanguage.JA: "今日は Python の 基本文法 を 見て いきます 。",
}


class MockSTTProvider(STTProvider):
    """Returns ``segment_count`` ten-second segments of fixed text."""

    def __init__(self, segment_count: int = 18) -> None:
        self.segment_count = segment_count
        self.requests: list[tuple[str, ContentLanguage]] = []

    @property
    def name(self) -> str:
        return "mock"

    async def transcribe(self, audio_url: str, language: ContentLanguage) -> TranscriptResult:
        self.requests.append((audio_url, language))
        sentence = _SENTENCES[language]
        raw = [(i * 10_000, (i + 1) * 10_000, sentence) for i in range(self.segment_count)]
        logger.debug("mock_stt_transcribe", language=language.value, segments=len(raw))
        return build_result(raw, language, confidence=0.95)
