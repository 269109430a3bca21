"""Tests for search context, query generation, candidate evaluation and discovery runs."""

from datetime import UTC, date, datetime

import pytest
from sqlalchemy import select

from clip_curator.adapters.video_source.stub import StubVideoSource
from clip_curator.db.models import ContentJobModel, TagModel
from clip_curator.domain.enums import ContentLanguage, JobStatus, Recommendation
from clip_curator.domain.models import EvaluatedVideo, SearchQuery, VideoCandidate
from clip_curator.errors import ProviderError, TransientProviderError
from clip_curator.services.candidate_evaluator import (
    dedupe_candidates,
    evaluate_candidates,
    select_candidates,
)
from clip_curator.services.discovery import run_discovery
from clip_curator.services.query_generator import generate_queries, normalize_queries
from clip_curator.services.search_context import (
    FALLBACK_UNDERREPRESENTED,
    collect_search_context,
    seasonal_hint,
)
from tests.factories import make_job


def _evaluated(video_id: str, recommendation: Recommendation, predicted: int = 50) -> EvaluatedVideo:
    return EvaluatedVideo(
        candidate=VideoCandidate(video_id=video_id, title=video_id),
        relevance_score=50,
        educational_value=50,
        short_form_suitability=50,
        predicted_quality=predicted,
        recommendation=recommendation,
    )


# =============================================================================
# Search context
# =============================================================================


class TestSearchContext:
    def test_seasonal_hint(self):
        assert "christmas" in seasonal_hint(date(2026, 12, 1))
        assert "new semester" in seasonal_hint(date(2026, 3, 15))

    def test_empty_history_uses_fallbacks(self, session):
        context = collect_search_context(session, today=date(2026, 10, 17))

        assert context.underrepresented_categories == FALLBACK_UNDERREPRESENTED[:5]
        assert context.recently_published == []
        assert context.top_performing_tags == context.popular_keywords
        assert "halloween" in context.seasonal_context
        assert context.target_languages == [ContentLanguage.KO, ContentLanguage.EN, ContentLanguage.JA]

    def test_history_shapes_context(self, session):
        for i in range(3):
            make_job(
                session,
                status="PUBLISHED",
                category="PROGRAMMING",
                generated_title=f"Python {i}",
                published_at=datetime(2026, 10, i + 1, tzinfo=UTC),
            )
        make_job(session, status="PUBLISHED", category="SCIENCE", generated_title="Cells")
        make_job(session, status="PENDING", category="HISTORY")
        session.add(TagModel(name="python", normalized_name="python", usage_count=5))
        session.add(TagModel(name="unused", normalized_name="unused", usage_count=0))
        session.commit()

        context = collect_search_context(session)

        assert "PROGRAMMING" not in context.underrepresented_categories
        assert "SCIENCE" in context.underrepresented_categories
        assert len(context.underrepresented_categories) == 5
        assert context.top_performing_tags == ["python"]
        assert set(context.recently_published) == {"Python 0", "Python 1", "Python 2", "Cells"}


# =============================================================================
# Query generation
# =============================================================================


class TestQueryGeneration:
    def test_normalize_queries(self):
        queries = [
            SearchQuery(query="  python   basics ", target_category="PROGRAMMING", priority=3),
            SearchQuery(query="Python Basics", target_category="PROGRAMMING", priority=9),
            SearchQuery(query="python basics", target_category="PROGRAMMING", language=ContentLanguage.EN),
            SearchQuery(query="", target_category="OTHER"),
            SearchQuery(query="marketing 101", target_category="MARKETING", priority=0),
        ]

        cleaned = normalize_queries(queries, [ContentLanguage.KO, ContentLanguage.EN])

        assert [(q.query, q.language) for q in cleaned] == [
            ("python basics", ContentLanguage.EN),
            ("python basics", ContentLanguage.KO),
            ("marketing 101", ContentLanguage.KO),
        ]
        assert cleaned[1].priority == 3
        assert cleaned[2].priority == 1

    def test_unknown_language_falls_back_to_korean(self):
        queries = [SearchQuery(query="q", target_category="X", language=ContentLanguage.JA)]

        cleaned = normalize_queries(queries, [ContentLanguage.KO])

        assert cleaned[0].language == ContentLanguage.KO

    def test_limit(self):
        queries = [SearchQuery(query=f"q{i}", target_category="X", priority=i + 1) for i in range(5)]

        cleaned = normalize_queries(queries, [ContentLanguage.KO], limit=2)

        assert [q.query for q in cleaned] == ["q4", "q3"]

    @pytest.mark.asyncio
    async def test_generate_queries(self, llm, session):
        context = collect_search_context(session)

        queries = await generate_queries(llm, context, limit=10)

        assert [q.priority for q in queries] == [8, 6]
        assert {q.language for q in queries} == {ContentLanguage.KO, ContentLanguage.JA}


# =============================================================================
# Candidate evaluation
# =============================================================================


class TestCandidateEvaluation:
    def test_dedupe_keeps_first(self):
        a = VideoCandidate(video_id="a", title="first")
        b = VideoCandidate(video_id="a", title="second")

        assert dedupe_candidates([a, b]) == [a]

    def test_select_orders_and_never_picks_skip(self):
        evaluated = [
            _evaluated("maybe", Recommendation.MAYBE, 90),
            _evaluated("skip", Recommendation.SKIP, 99),
            _evaluated("rec-low", Recommendation.RECOMMENDED, 60),
            _evaluated("rec-high", Recommendation.RECOMMENDED, 80),
            _evaluated("top", Recommendation.HIGHLY_RECOMMENDED, 10),
        ]

        selected = select_candidates(evaluated, Recommendation.SKIP)

        assert [e.video_id for e in selected] == ["top", "rec-high", "rec-low", "maybe"]

    def test_select_cutoff_and_limit(self):
        evaluated = [
            _evaluated("maybe", Recommendation.MAYBE),
            _evaluated("rec", Recommendation.RECOMMENDED),
            _evaluated("top", Recommendation.HIGHLY_RECOMMENDED),
        ]

        assert [e.video_id for e in select_candidates(evaluated, Recommendation.RECOMMENDED)] == ["top", "rec"]
        assert [e.video_id for e in select_candidates(evaluated, limit=1)] == ["top"]

    @pytest.mark.asyncio
    async def test_evaluate_keeps_every_candidate(self, llm):
        llm.recommendation = Recommendation.SKIP
        candidates = [VideoCandidate(video_id=v, title=v) for v in ("a", "b", "a")]

        evaluated = await evaluate_candidates(llm, candidates)

        # SKIP is advisory here; only select_candidates applies the cutoff
        assert [e.video_id for e in evaluated] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_evaluate_nothing(self, llm):
        assert await evaluate_candidates(llm, []) == []
        assert "evaluate_videos" not in llm.calls


# =============================================================================
# Discovery run
# =============================================================================


class _FailingSource(StubVideoSource):
    def __init__(self, fail_on: str, error: Exception) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.error = error

    async def search(self, query, language, max_results=5):
        if self.fail_on in query:
            self.searches.append((query, language))
            raise self.error
        return await super().search(query, language, max_results)


class TestRunDiscovery:
    @pytest.mark.asyncio
    async def test_creates_pending_jobs(self, llm, session_factory, session):
        source = StubVideoSource()

        result = await run_discovery(llm, source, session_factory)

        assert result.queries == 2
        assert result.candidates == 4
        assert result.evaluated == 4
        assert len(result.created_job_ids) == 4

        jobs = session.execute(select(ContentJobModel)).scalars().all()
        assert {j.status for j in jobs} == {JobStatus.PENDING.value}
        assert {j.evaluation_score for j in jobs} == {82}
        assert {j.recommendation for j in jobs} == {"RECOMMENDED"}
        assert {j.language for j in jobs} == {"ko", "ja"}
        assert all(j.search_query for j in jobs)

    @pytest.mark.asyncio
    async def test_second_run_skips_known_videos(self, llm, session_factory):
        source = StubVideoSource()
        await run_discovery(llm, source, session_factory)

        result = await run_discovery(llm, source, session_factory)

        assert result.candidates == 4
        assert result.created_job_ids == []
        assert llm.calls.count("evaluate_videos") == 1

    @pytest.mark.asyncio
    async def test_soft_deleted_videos_are_not_recrawled(self, llm, session_factory, session):
        make_job(session, source_video_id="python-tutorial-for--ko-0", deleted_at=datetime.now(UTC))

        result = await run_discovery(llm, StubVideoSource(), session_factory)

        assert len(result.created_job_ids) == 3

    @pytest.mark.asyncio
    async def test_max_new_jobs(self, llm, session_factory):
        result = await run_discovery(llm, StubVideoSource(), session_factory, max_new_jobs=1)

        assert len(result.created_job_ids) == 1

    @pytest.mark.asyncio
    async def test_skip_recommendations_create_nothing(self, llm, session_factory):
        llm.recommendation = Recommendation.SKIP

        result = await run_discovery(llm, StubVideoSource(), session_factory)

        assert result.evaluated == 4
        assert result.created_job_ids == []

    @pytest.mark.asyncio
    async def test_failed_query_is_skipped(self, llm, session_factory):
        source = _FailingSource("python", ProviderError("bad request"))

        result = await run_discovery(llm, source, session_factory)

        assert result.failed_queries == ["python tutorial for beginners"]
        assert len(result.created_job_ids) == 2

    @pytest.mark.asyncio
    async def test_quota_stops_remaining_searches(self, llm, session_factory):
        source = _FailingSource("python", TransientProviderError("quotaExceeded"))

        result = await run_discovery(llm, source, session_factory)

        assert result.failed_queries == ["python tutorial for beginners", "productivity tips lecture"]
        assert len(source.searches) == 1
        assert result.created_job_ids == []
