"""Domain models as dataclasses.

These are the value objects passed between providers, services and pipeline
stages. Persistence lives in ``clip_curator.db.models``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from clip_curator.domain.enums import (
    Category,
    ContentLanguage,
    Difficulty,
    JobStatus,
    Recommendation,
    ReviewPriority,
)


@dataclass(frozen=True)
class VideoCandidate:
    """A search result from the external video source."""

    video_id: str
    title: str
    description: str = ""
    channel_id: str | None = None
    channel_title: str | None = None
    published_at: str | None = None
    duration: str | None = None  # ISO-8601, e.g. PT12M30S
    thumbnail_url: str | None = None
    view_count: int | None = None
    like_count: int | None = None
    language: ContentLanguage = ContentLanguage.KO

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


@dataclass(frozen=True)
class EvaluatedVideo:
    """A candidate plus the language model's metadata-only triage."""

    candidate: VideoCandidate
    relevance_score: int
    educational_value: int
    short_form_suitability: int
    predicted_quality: int
    recommendation: Recommendation
    reasoning: str = ""

    @property
    def video_id(self) -> str:
        return self.candidate.video_id


@dataclass
class SearchContext:
    """Signals that steer search query generation."""

    app_categories: list[str] = field(default_factory=list)
    popular_keywords: list[str] = field(default_factory=list)
    top_performing_tags: list[str] = field(default_factory=list)
    seasonal_context: str | None = None
    recently_published: list[str] = field(default_factory=list)
    underrepresented_categories: list[str] = field(default_factory=list)
    target_languages: list[ContentLanguage] = field(
        default_factory=lambda: list(ContentLanguage)
    )


@dataclass(frozen=True)
class SearchQuery:
    """One language-tagged search query."""

    query: str
    target_category: str
    expected_content_type: str = ""
    priority: int = 5
    language: ContentLanguage = ContentLanguage.KO


@dataclass(frozen=True)
class TranscriptSegment:
    """A timed piece of a transcript."""

    start_ms: int
    end_ms: int
    text: str


@dataclass
class TranscriptResult:
    """Output of the speech-to-text capability."""

    text: str
    segments: list[TranscriptSegment] = field(default_factory=list)
    language: ContentLanguage = ContentLanguage.KO
    confidence: float | None = None

    def segments_as_dicts(self) -> list[dict[str, Any]]:
        return [
            {"start_ms": s.start_ms, "end_ms": s.end_ms, "text": s.text} for s in self.segments
        ]


@dataclass(frozen=True)
class Segment:
    """A key segment suggested by the language model."""

    start_ms: int
    end_ms: int
    title: str
    description: str = ""
    keywords: list[str] = field(default_factory=list)

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class ClipSegment:
    """One clip selection inside an edit plan."""

    order_index: int
    start_ms: int
    end_ms: int
    title: str = ""
    description: str = ""
    keywords: list[str] = field(default_factory=list)

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass
class EditPlan:
    """Ordered clip selections with an editing strategy."""

    clips: list[ClipSegment] = field(default_factory=list)
    total_duration_ms: int = 0
    editing_strategy: str = "highlight_compilation"
    transition_style: str = "hard_cut"

    @classmethod
    def empty(cls) -> "EditPlan":
        return cls(clips=[], total_duration_ms=0, editing_strategy="none", transition_style="none")

    @property
    def is_empty(self) -> bool:
        return not self.clips

    def to_dict(self) -> dict[str, Any]:
        return {
            "clips": [
                {
                    "order_index": c.order_index,
                    "start_ms": c.start_ms,
                    "end_ms": c.end_ms,
                    "title": c.title,
                    "description": c.description,
                    "keywords": list(c.keywords),
                }
                for c in self.clips
            ],
            "total_duration_ms": self.total_duration_ms,
            "editing_strategy": self.editing_strategy,
            "transition_style": self.transition_style,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "EditPlan":
        if not data:
            return cls.empty()
        clips = [
            ClipSegment(
                order_index=int(c.get("order_index", i)),
                start_ms=int(c["start_ms"]),
                end_ms=int(c["end_ms"]),
                title=c.get("title", ""),
                description=c.get("description", ""),
                keywords=list(c.get("keywords", [])),
            )
            for i, c in enumerate(data.get("clips", []))
        ]
        return cls(
            clips=sorted(clips, key=lambda c: c.order_index),
            total_duration_ms=int(data.get("total_duration_ms", 0)),
            editing_strategy=data.get("editing_strategy", "highlight_compilation"),
            transition_style=data.get("transition_style", "hard_cut"),
        )


@dataclass
class ContentMetadata:
    """Generated (or reviewer-edited) metadata for one language."""

    title: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    category: Category = Category.PROGRAMMING
    difficulty: Difficulty = Difficulty.BEGINNER
    language: ContentLanguage = ContentLanguage.KO

    MAX_TAGS = 10

    def __post_init__(self) -> None:
        seen: set[str] = set()
        cleaned: list[str] = []
        for tag in self.tags:
            tag = str(tag).strip().lstrip("#")
            if tag and tag.lower() not in seen:
                seen.add(tag.lower())
                cleaned.append(tag)
        self.tags = cleaned[: self.MAX_TAGS]

    @classmethod
    def fallback(cls, language: ContentLanguage) -> "ContentMetadata":
        return cls(title="Untitled", language=language)


@dataclass(frozen=True)
class QualityScore:
    """Four 0-25 sub-scores and their total."""

    content_relevance: int
    audio_clarity: int
    visual_quality: int
    educational_value: int

    MAX_SUB_SCORE = 25

    @property
    def total(self) -> int:
        return (
            self.content_relevance
            + self.audio_clarity
            + self.visual_quality
            + self.educational_value
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "content_relevance": self.content_relevance,
            "audio_clarity": self.audio_clarity,
            "visual_quality": self.visual_quality,
            "educational_value": self.educational_value,
            "total": self.total,
        }


@dataclass(frozen=True)
class RoutingDecision:
    """Where a scored job goes next."""

    status: JobStatus
    priority: ReviewPriority | None
    score: int

    @property
    def needs_review(self) -> bool:
        return self.status == JobStatus.PENDING_APPROVAL


@dataclass(frozen=True)
class ReviewEdits:
    """Reviewer corrections applied on approval or metadata update."""

    title: str | None = None
    description: str | None = None
    category: Category | None = None
    difficulty: Difficulty | None = None
    tags: list[str] | None = None


@dataclass
class DashboardStats:
    """Review queue summary."""

    today_created: int
    pending_review: int
    approved_this_week: int
    rejected_this_week: int
    average_quality_score: float
    high_priority_count: int
    pending_by_category: dict[str, int] = field(default_factory=dict)
    generated_at: datetime | None = None
