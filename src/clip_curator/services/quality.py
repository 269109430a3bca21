"""Quality scoring and review routing.

Four sub-scores, each 0-25, are derived from what the pipeline produced for
a job. The total decides whether a human ever sees it:

    total <  approval threshold (70)       -> REJECTED, no review entry
    total <  high priority threshold (85)  -> PENDING_APPROVAL, NORMAL
    otherwise                              -> PENDING_APPROVAL, HIGH
"""

from clip_curator.config import settings
from clip_curator.db.models import ContentJobModel
from clip_curator.domain.enums import Category, JobStatus, ReviewPriority
from clip_curator.domain.models import QualityScore, RoutingDecision
from clip_curator.logging import get_logger

logger = get_logger(__name__)

MAX_SUB_SCORE = QualityScore.MAX_SUB_SCORE
DEFAULT_EDUCATIONAL_SCORE = 15
EDUCATIONAL_CATEGORY_BONUS = 5


def _cap(score: int) -> int:
    return max(0, min(MAX_SUB_SCORE, score))


def content_relevance(job: ContentJobModel) -> int:
    """+5 for each piece of generated metadata present."""
    present = [
        job.generated_title,
        job.generated_description,
        job.generated_tags,
        job.category,
        job.difficulty,
    ]
    return _cap(5 * sum(1 for value in present if value))


def audio_clarity(job: ContentJobModel) -> int:
    """Estimated from transcript length; mid-length transcripts score best."""
    if not job.transcript:
        return 0
    length = len(job.transcript)
    if length < 500:
        return 10
    if length < 2000:
        return 20
    if length < 5000:
        return 25
    if length < 10000:
        return 20
    return 15


def visual_quality(job: ContentJobModel) -> int:
    score = 10
    if job.edited_video_key:
        score += 10
    if job.thumbnail_key:
        score += 5
    return _cap(score)


def educational_value(job: ContentJobModel) -> int:
    """Pre-download evaluation scaled to 25, plus a bonus for educational categories."""
    if job.evaluation_score is not None:
        score = int(job.evaluation_score * 0.25)
    else:
        score = DEFAULT_EDUCATIONAL_SCORE
    if job.category and Category.from_string(job.category).is_educational:
        score += EDUCATIONAL_CATEGORY_BONUS
    return _cap(score)


def score_job(job: ContentJobModel) -> QualityScore:
    score = QualityScore(
        content_relevance=content_relevance(job),
        audio_clarity=audio_clarity(job),
        visual_quality=visual_quality(job),
        educational_value=educational_value(job),
    )
    logger.info("quality_scored", job_id=str(job.id), **score.to_dict())
    return score


def route(
    total: int,
    approval_threshold: int | None = None,
    high_priority_threshold: int | None = None,
) -> RoutingDecision:
    """Map a total score to the next job status and a review priority."""
    approval = settings.quality_approval_threshold if approval_threshold is None else approval_threshold
    high = (
        settings.quality_high_priority_threshold
        if high_priority_threshold is None
        else high_priority_threshold
    )
    if total < approval:
        return RoutingDecision(status=JobStatus.REJECTED, priority=ReviewPriority.LOW, score=total)
    if total < high:
        return RoutingDecision(
            status=JobStatus.PENDING_APPROVAL, priority=ReviewPriority.NORMAL, score=total
        )
    return RoutingDecision(status=JobStatus.PENDING_APPROVAL, priority=ReviewPriority.HIGH, score=total)
