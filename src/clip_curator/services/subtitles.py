"""Subtitle tracks and title text for the edited video."""

from collections.abc import Iterable
from typing import Any

from clip_curator.domain.models import TranscriptSegment
from clip_curator.logging import get_logger

logger = get_logger(__name__)


def format_srt_timestamp(ms: int) -> str:
    """Milliseconds as ``HH:MM:SS,mmm``."""
    ms = max(0, ms)
    total_seconds, millis = divmod(ms, 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"


def clip_subtitles(
    segments: list[dict[str, Any]] | None,
    ranges: list[tuple[int, int]],
) -> list[TranscriptSegment]:
    """Move source-timed segments onto the timeline of the cut video.

    Each range is appended after the previous one, so a segment inside the
    second range starts at the first range's length plus its offset into
    the second. Segments are clamped to the range they overlap.
    """
    parsed: list[TranscriptSegment] = []
    for segment in segments or []:
        try:
            start, end = int(segment["start_ms"]), int(segment["end_ms"])
            text = str(segment["text"]).strip()
        except (KeyError, TypeError, ValueError):
            logger.warning("subtitle_segment_malformed", segment=segment)
            continue
        if text and end > start:
            parsed.append(TranscriptSegment(start_ms=start, end_ms=end, text=text))

    result: list[TranscriptSegment] = []
    offset = 0
    for range_start, range_end in ranges:
        for segment in parsed:
            start = max(segment.start_ms, range_start)
            end = min(segment.end_ms, range_end)
            if end <= start:
                continue
            result.append(
                TranscriptSegment(
                    start_ms=offset + start - range_start,
                    end_ms=offset + end - range_start,
                    text=segment.text,
                )
            )
        offset += range_end - range_start
    return result


def build_srt(segments: Iterable[TranscriptSegment]) -> str:
    cues = [
        f"{number}\n"
        f"{format_srt_timestamp(s.start_ms)} --> {format_srt_timestamp(s.end_ms)}\n"
        f"{s.text}\n"
        for number, s in enumerate(segments, start=1)
    ]
    return "\n".join(cues)


def wrap_title(title: str, chars_per_line: int, max_lines: int = 2) -> str:
    """Break a title on spaces; lines past ``max_lines`` are dropped.

    A single word longer than the line stays whole. Titles without spaces
    (common in Korean and Japanese) are cut at ``chars_per_line``.
    """
    title = " ".join(title.split())
    if len(title) <= chars_per_line:
        return title

    words = title.split(" ")
    if len(words) == 1:
        lines = [title[i : i + chars_per_line] for i in range(0, len(title), chars_per_line)]
        return "\n".join(lines[:max_lines])

    lines: list[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= chars_per_line:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = word
    if current:
        lines.append(current)
    return "\n".join(lines[:max_lines])
