"""Domain models and business logic."""

from clip_curator.domain.enums import (
    Category,
    ContentLanguage,
    Difficulty,
    JobEvent,
    JobStatus,
    PendingContentStatus,
    Recommendation,
    RejectionReason,
    ReviewPriority,
)
from clip_curator.domain.models import (
    ClipSegment,
    ContentMetadata,
    EditPlan,
    EvaluatedVideo,
    QualityScore,
    RoutingDecision,
    SearchContext,
    SearchQuery,
    Segment,
    TranscriptResult,
    TranscriptSegment,
    VideoCandidate,
)
from clip_curator.domain.state_machine import apply_event, can_transition, transition

__all__ = [
    "Category",
    "ClipSegment",
    "ContentLanguage",
    "ContentMetadata",
    "Difficulty",
    "EditPlan",
    "EvaluatedVideo",
    "JobEvent",
    "JobStatus",
    "PendingContentStatus",
    "QualityScore",
    "Recommendation",
    "RejectionReason",
    "ReviewPriority",
    "RoutingDecision",
    "SearchContext",
    "SearchQuery",
    "Segment",
    "TranscriptResult",
    "TranscriptSegment",
    "VideoCandidate",
    "apply_event",
    "can_transition",
    "transition",
]
