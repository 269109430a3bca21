"""Deterministic language model capability for tests and local runs."""

from clip_curator.adapters.llm.client import LLMClient
from clip_curator.domain.enums import Category, ContentLanguage, Difficulty, Recommendation
from clip_curator.domain.models import (
    ClipSegment,
    ContentMetadata,
    EditPlan,
    EvaluatedVideo,
    SearchContext,
    SearchQuery,
    Segment,
    VideoCandidate,
)
from clip_curator.logging import get_logger

logger = get_logger(__name__)

_MOCK_METADATA = {
    ContentLanguage.KO: ("파이썬 기초 핵심 정리", "파이썬의 기본 문법을 1분 만에 정리합니다.", ["파이썬", "프로그래밍", "기초"]),
    ContentLanguage.EN: ("Python Basics in One Minute", "The core Python syntax, explained in a minute.", ["python", "programming", "basics"]),
    ContentLanguage.JA: ("1分でわかるPython入門", "Pythonの基本文法を1分で解説します。", ["python", "プログラミング", "入門"]),
}


class MockLLMClient(LLMClient):
    """Returns fixed, valid results without network access.

    Attributes can be overwritten per test to script other outcomes, e.g.
    ``client.edit_plan = EditPlan.empty()``.
    """

    def __init__(self) -> None:
        self.segments: list[Segment] = [
            Segment(
                start_ms=60_000,
                end_ms=120_000,
                title="Key concept",
                description="The central idea of the video",
                keywords=["python", "basics"],
            )
        ]
        self.edit_plan = EditPlan(
            clips=[
                ClipSegment(order_index=0, start_ms=30_000, end_ms=60_000, title="Hook"),
                ClipSegment(order_index=1, start_ms=90_000, end_ms=120_000, title="Explanation"),
            ],
            total_duration_ms=60_000,
            editing_strategy="highlight_compilation",
            transition_style="hard_cut",
        )
        self.category = Category.PROGRAMMING
        self.difficulty = Difficulty.BEGINNER
        self.evaluation_scores = (85, 80, 75, 82)
        self.recommendation = Recommendation.RECOMMENDED
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def model(self) -> str:
        return "mock-model"

    async def analyze(self, prompt: str) -> str:
        self.calls.append("analyze")
        return f"Mock analysis of {len(prompt)} characters"

    async def extract_key_segments(self, transcript: str) -> list[Segment]:  # noqa: ARG002
        self.calls.append("extract_key_segments")
        return list(self.segments)

    async def generate_edit_plan(self, transcript: str) -> EditPlan:  # noqa: ARG002
        self.calls.append("generate_edit_plan")
        return self.edit_plan

    async def generate_metadata(self, content: str, language: ContentLanguage) -> ContentMetadata:  # noqa: ARG002
        self.calls.append(f"generate_metadata:{language.value}")
        title, description, tags = _MOCK_METADATA[language]
        return ContentMetadata(
            title=title,
            description=description,
            tags=list(tags),
            category=self.category,
            difficulty=self.difficulty,
            language=language,
        )

    async def generate_search_queries(self, context: SearchContext) -> list[SearchQuery]:
        self.calls.append("generate_search_queries")
        languages = context.target_languages or [ContentLanguage.KO]
        return [
            SearchQuery(
                query="python tutorial for beginners",
                target_category="PROGRAMMING",
                expected_content_type="tutorial",
                priority=8,
                language=languages[0],
            ),
            SearchQuery(
                query="productivity tips lecture",
                target_category="PRODUCTIVITY",
                expected_content_type="lecture",
                priority=6,
                language=languages[-1],
            ),
        ]

    async def evaluate_videos(self, candidates: list[VideoCandidate]) -> list[EvaluatedVideo]:
        self.calls.append("evaluate_videos")
        relevance, educational, short_form, predicted = self.evaluation_scores
        logger.debug("mock_evaluate_videos", count=len(candidates))
        return [
            EvaluatedVideo(
                candidate=c,
                relevance_score=relevance,
                educational_value=educational,
                short_form_suitability=short_form,
                predicted_quality=predicted,
                recommendation=self.recommendation,
                reasoning="Mock evaluation",
            )
            for c in candidates
        ]
