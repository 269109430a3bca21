"""Row builders shared by database tests."""

from uuid import uuid4

from clip_curator.db.models import ContentJobModel, PendingContentModel
from clip_curator.domain.enums import JobStatus, ReviewPriority
from clip_curator.domain.models import RoutingDecision
from clip_curator.services.review import enqueue_for_review


def make_job(session, status: str = "PENDING", **fields) -> ContentJobModel:
    """Insert a job directly, bypassing discovery."""
    values = {
        "source_video_id": f"vid-{uuid4().hex[:10]}",
        "source_title": "Intro to Python",
        "source_channel_title": "CC Lectures",
        "language": "en",
        "status": status,
        "evaluation_score": 80,
        "recommendation": "RECOMMENDED",
    }
    values.update(fields)
    job = ContentJobModel(**values)
    session.add(job)
    session.commit()
    return job


def make_edited_job(session, **fields) -> ContentJobModel:
    """A job that has been through every stage up to EDITED."""
    values = {
        "raw_video_key": "raw/v/1.mp4",
        "audio_key": "audio/v/1.mp3",
        "transcript": "word " * 400,
        "generated_title": "Python in a minute",
        "generated_description": "Core syntax explained.",
        "generated_tags": ["python", "basics"],
        "category": "PROGRAMMING",
        "difficulty": "BEGINNER",
        "edited_video_key": "ai-content/clips/v/1.mp4",
        "thumbnail_key": "thumbnails/v/1.jpg",
        "duration_ms": 60_000,
    }
    values.update(fields)
    return make_job(session, status=JobStatus.EDITED.value, **values)


def make_pending(
    session,
    score: int = 90,
    priority: ReviewPriority = ReviewPriority.HIGH,
    **fields,
) -> PendingContentModel:
    """A job sitting in the review queue."""
    job = make_edited_job(session, **fields)
    job.status = JobStatus.PENDING_APPROVAL.value
    job.quality_score = score
    job.review_priority = priority.value
    pending = enqueue_for_review(
        session, job, RoutingDecision(JobStatus.PENDING_APPROVAL, priority, score)
    )
    session.commit()
    return pending
