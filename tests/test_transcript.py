"""Tests for transcript formatting, attribution and speech-to-text cleanup."""

import pytest

from clip_curator.adapters.stt import get_stt_provider
from clip_curator.adapters.stt.base import build_result, clean_transcript_text
from clip_curator.adapters.stt.mock import MockSTTProvider
from clip_curator.domain.enums import ContentLanguage
from clip_curator.services.transcript import (
    format_timestamp,
    format_transcript,
    source_attribution,
    with_attribution,
)


class TestFormatting:
    def test_format_timestamp(self):
        assert format_timestamp(0) == "00:00:00"
        assert format_timestamp(61_500) == "00:01:01"
        assert format_timestamp(3_725_000) == "01:02:05"
        assert format_timestamp(-10) == "00:00:00"

    def test_format_transcript_with_segments(self):
        segments = [
            {"start_ms": 0, "end_ms": 10_000, "text": "Hello"},
            {"start_ms": 10_000, "end_ms": 20_000, "text": "world"},
        ]

        text = format_transcript("Hello world", segments)

        assert text.splitlines() == [
            "[00:00:00 - 00:00:10] Hello",
            "[00:00:10 - 00:00:20] world",
        ]

    def test_format_transcript_without_segments(self):
        assert format_transcript("plain", None) == "plain"
        assert format_transcript("plain", []) == "plain"

    def test_malformed_segments_fall_back(self):
        assert format_transcript("plain", [{"start_ms": 0}]) == "plain"


class TestAttribution:
    def test_english_block(self):
        block = source_attribution("abc123", "Linear Algebra", "MIT OCW", ContentLanguage.EN)

        assert block.startswith("---")
        assert "Creative Commons" in block
        assert 'Original Title: "Linear Algebra"' in block
        assert "https://www.youtube.com/watch?v=abc123" in block
        assert "Channel: MIT OCW" in block

    def test_localized_labels(self):
        assert "출처" in source_attribution("x", "t", None, ContentLanguage.KO)
        assert "出典" in source_attribution("x", "t", None, ContentLanguage.JA)

    def test_optional_fields_omitted(self):
        block = source_attribution("x", None, None, ContentLanguage.EN)

        assert "Original Title" not in block
        assert "Channel" not in block

    def test_no_video_id(self):
        assert source_attribution("", "t", "c", ContentLanguage.EN) is None

    def test_with_attribution(self):
        assert with_attribution("desc", "credit") == "desc\n\ncredit"
        assert with_attribution("", "credit") == "credit"
        assert with_attribution("desc", None) == "desc"


class TestCleanup:
    def test_japanese_spacing_removed(self):
        text = clean_transcript_text("今日は ▁Python の 基本 を 見て いきます 。", ContentLanguage.JA)
        assert text == "今日はPythonの基本を見ていきます。"

    def test_sentencepiece_marks_become_spaces(self):
        text = clean_transcript_text("▁Hello▁world ,  this is   it .", ContentLanguage.EN)
        assert text == "Hello world, this is it."

    def test_build_result_orders_and_drops_empty(self):
        result = build_result(
            [(10_000, 20_000, "second"), (0, 10_000, "first"), (20_000, 30_000, "  ")],
            ContentLanguage.EN,
            confidence=0.9,
        )

        assert result.text == "first second"
        assert [s.start_ms for s in result.segments] == [0, 10_000]
        assert result.segments_as_dicts()[0] == {"start_ms": 0, "end_ms": 10_000, "text": "first"}

    def test_japanese_segments_joined_without_spaces(self):
        result = build_result([(0, 1, "こんにちは"), (1, 2, "世界")], ContentLanguage.JA)
        assert result.text == "こんにちは世界"

    @pytest.mark.asyncio
    async def test_mock_provider(self):
        provider = MockSTTProvider(segment_count=3)

        result = await provider.transcribe("stub://audio.mp3", ContentLanguage.EN)

        assert len(result.segments) == 3
        assert result.segments[-1].end_ms == 30_000
        assert result.confidence == 0.95
        assert provider.requests == [("stub://audio.mp3", ContentLanguage.EN)]

    def test_factory_rejects_unknown_provider(self):
        with pytest.raises(ValueError):
            get_stt_provider("nonexistent")
