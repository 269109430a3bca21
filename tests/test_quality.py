"""Tests for quality scoring and review routing."""

import pytest

from clip_curator.db.models import ContentJobModel
from clip_curator.domain.enums import JobStatus, ReviewPriority
from clip_curator.services.quality import (
    audio_clarity,
    content_relevance,
    educational_value,
    route,
    score_job,
    visual_quality,
)


def _job(**fields) -> ContentJobModel:
    values = {
        "source_video_id": "abc",
        "source_title": "t",
        "status": "EDITED",
    }
    values.update(fields)
    return ContentJobModel(**values)


class TestSubScores:
    def test_content_relevance_counts_metadata(self):
        assert content_relevance(_job()) == 0
        assert content_relevance(_job(generated_title="x", category="SCIENCE")) == 10
        full = _job(
            generated_title="x",
            generated_description="d",
            generated_tags=["a"],
            category="SCIENCE",
            difficulty="BEGINNER",
        )
        assert content_relevance(full) == 25

    def test_empty_tag_list_does_not_count(self):
        assert content_relevance(_job(generated_title="x", generated_tags=[])) == 5

    @pytest.mark.parametrize(
        ("length", "expected"),
        [(0, 0), (100, 10), (499, 10), (500, 20), (1999, 20), (2000, 25), (4999, 25), (5000, 20), (10000, 15)],
    )
    def test_audio_clarity_bands(self, length, expected):
        job = _job(transcript="a" * length if length else None)
        assert audio_clarity(job) == expected

    def test_visual_quality(self):
        assert visual_quality(_job()) == 10
        assert visual_quality(_job(edited_video_key="clip.mp4")) == 20
        assert visual_quality(_job(edited_video_key="clip.mp4", thumbnail_key="t.jpg")) == 25

    def test_educational_value_from_evaluation(self):
        assert educational_value(_job(evaluation_score=80)) == 20
        assert educational_value(_job(evaluation_score=80, category="PROGRAMMING")) == 25
        assert educational_value(_job(evaluation_score=80, category="MARKETING")) == 20

    def test_educational_value_capped(self):
        assert educational_value(_job(evaluation_score=100, category="MATH")) == 25

    def test_educational_value_default(self):
        assert educational_value(_job()) == 15
        assert educational_value(_job(category="HISTORY")) == 20

    def test_total_is_sum(self):
        job = _job(
            generated_title="x",
            generated_description="d",
            generated_tags=["a"],
            category="PROGRAMMING",
            difficulty="BEGINNER",
            transcript="a" * 3000,
            edited_video_key="c.mp4",
            thumbnail_key="t.jpg",
            evaluation_score=82,
        )

        score = score_job(job)

        assert score.total == 25 + 25 + 25 + 25
        assert score.to_dict()["total"] == 100


class TestRoute:
    def test_below_approval_threshold_is_rejected(self):
        decision = route(69)

        assert decision.status == JobStatus.REJECTED
        assert not decision.needs_review

    def test_normal_priority_band(self):
        for total in (70, 84):
            decision = route(total)
            assert decision.status == JobStatus.PENDING_APPROVAL
            assert decision.priority == ReviewPriority.NORMAL

    def test_high_priority_band(self):
        decision = route(85)

        assert decision.needs_review
        assert decision.priority == ReviewPriority.HIGH
        assert decision.score == 85

    def test_custom_thresholds(self):
        assert route(50, approval_threshold=40, high_priority_threshold=90).priority == ReviewPriority.NORMAL
        assert route(95, approval_threshold=40, high_priority_threshold=90).priority == ReviewPriority.HIGH
