"""Transcript formatting and source attribution for analysis."""

from dataclasses import dataclass
from typing import Any

from clip_curator.domain.enums import ContentLanguage
from clip_curator.logging import get_logger

logger = get_logger(__name__)


def format_timestamp(ms: int) -> str:
    """Milliseconds as ``HH:MM:SS``."""
    total_seconds = max(0, ms) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_transcript(text: str, segments: list[dict[str, Any]] | None) -> str:
    """Prefix each segment with its time range so the model can cite exact times.

    Falls back to the plain text when segments are missing or malformed.
    """
    if not segments:
        return text
    lines = []
    try:
        for segment in segments:
            start = format_timestamp(int(segment["start_ms"]))
            end = format_timestamp(int(segment["end_ms"]))
            lines.append(f"[{start} - {end}] {segment['text']}")
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("transcript_segments_malformed", error=str(e))
        return text
    return "\n".join(lines)


@dataclass(frozen=True)
class _AttributionLabels:
    source: str
    notice: str
    original_title: str
    original_link: str
    channel: str


_LABELS = {
    ContentLanguage.KO: _AttributionLabels(
        source="📌 출처",
        notice="이 콘텐츠는 Creative Commons 라이선스로 공개된 YouTube 영상을 기반으로 AI에 의해 제작되었습니다.",
        original_title="원본 제목",
        original_link="원본 링크",
        channel="채널",
    ),
    ContentLanguage.EN: _AttributionLabels(
        source="📌 Source",
        notice="This content was created by AI based on a YouTube video published under a Creative Commons license.",
        original_title="Original Title",
        original_link="Original Link",
        channel="Channel",
    ),
    ContentLanguage.JA: _AttributionLabels(
        source="📌 出典",
        notice="このコンテンツはCreative Commonsライセンスで公開されたYouTube動画を基にAIによって制作されました。",
        original_title="元のタイトル",
        original_link="元のリンク",
        channel="チャンネル",
    ),
}


def source_attribution(
    video_id: str,
    title: str | None,
    channel: str | None,
    language: ContentLanguage,
) -> str | None:
    """Localized credit block for a CC-licensed source video."""
    if not video_id:
        return None
    labels = _LABELS[language]
    lines = ["---", f"{labels.source}: {labels.notice}"]
    if title:
        lines.append(f'{labels.original_title}: "{title}"')
    lines.append(f"{labels.original_link}: https://www.youtube.com/watch?v={video_id}")
    if channel:
        lines.append(f"{labels.channel}: {channel}")
    return "\n".join(lines)


def with_attribution(description: str, attribution: str | None) -> str:
    if not attribution:
        return description
    if not description:
        return attribution
    return f"{description}\n\n{attribution}"
