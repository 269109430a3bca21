"""Review gate.

Reviewers work on ``PendingContentModel`` rows, a denormalized snapshot of a
job taken when it entered review. Approval is the only path to publish and
the snapshot (with the reviewer's edits) is what gets published.

Approve and reject tolerate double submission: on a job that already reached
a terminal state they change nothing and report the current state.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from clip_curator.adapters.storage.base import StorageProvider
from clip_curator.config import settings
from clip_curator.db.models import ContentJobModel, PendingContentModel
from clip_curator.domain.enums import (
    Category,
    ContentLanguage,
    JobEvent,
    JobStatus,
    PendingContentStatus,
    RejectionReason,
    ReviewPriority,
)
from clip_curator.domain.models import ContentMetadata, ReviewEdits, RoutingDecision
from clip_curator.errors import (
    InvalidTransitionError,
    PendingContentNotFoundError,
    PublishError,
    StageInputError,
)
from clip_curator.logging import get_logger
from clip_curator.services.jobs import apply_job_event
from clip_curator.services.publish import publish_job

logger = get_logger(__name__)

PRIORITY_ORDER = case(
    {p.value: p.rank for p in ReviewPriority},
    value=PendingContentModel.review_priority,
    else_=len(ReviewPriority),
)


@dataclass
class ReviewOutcome:
    """Result of a reviewer action."""

    pending_id: UUID
    job_id: UUID
    job_status: JobStatus
    changed: bool
    published_content_id: UUID | None = None
    publish_error: str | None = None


def _outcome(pending: PendingContentModel, changed: bool) -> ReviewOutcome:
    return ReviewOutcome(
        pending_id=pending.id,
        job_id=pending.job_id,
        job_status=JobStatus(pending.job.status),
        changed=changed,
        published_content_id=pending.job.published_content_id,
    )


# =============================================================================
# Queue entry
# =============================================================================


def enqueue_for_review(
    session: Session,
    job: ContentJobModel,
    decision: RoutingDecision,
) -> PendingContentModel:
    """Snapshot ``job`` into the review queue.

    A job coming back from NEEDS_EDIT reuses its existing entry, which is
    refreshed and reset to PENDING_REVIEW.
    """
    if not job.edited_video_key:
        raise StageInputError(f"Job {job.id} has no edited video to review")

    pending = job.pending_content
    if pending is None:
        pending = PendingContentModel(job_id=job.id)
        session.add(pending)
        job.pending_content = pending

    pending.title = job.generated_title or job.source_title
    pending.description = job.generated_description
    pending.category = job.category or Category.OTHER.value
    pending.difficulty = job.difficulty
    pending.tags = list(job.generated_tags or [])
    pending.video_key = job.edited_video_key
    pending.thumbnail_key = job.thumbnail_key
    pending.duration_seconds = job.duration_ms // 1000 if job.duration_ms else None
    pending.width = settings.output_width
    pending.height = settings.output_height
    pending.source_video_id = job.source_video_id
    pending.source_title = job.source_title
    pending.source_channel_title = job.source_channel_title
    pending.quality_score = decision.score
    pending.language = job.language
    pending.review_priority = (decision.priority or ReviewPriority.NORMAL).value
    pending.status = PendingContentStatus.PENDING_REVIEW.value
    pending.reviewed_by = None
    pending.reviewed_at = None
    pending.rejection_reason = None
    pending.deleted_at = None

    session.flush()
    logger.info(
        "review_enqueued",
        job_id=str(job.id),
        pending_id=str(pending.id),
        score=decision.score,
        priority=pending.review_priority,
    )
    return pending


# =============================================================================
# Queries
# =============================================================================


def _active_pending():
    return select(PendingContentModel).where(PendingContentModel.deleted_at.is_(None))


def list_pending(
    session: Session,
    category: Category | None = None,
    priority: ReviewPriority | None = None,
    language: ContentLanguage | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[PendingContentModel], int]:
    """Pending entries: HIGH before NORMAL before LOW, then score desc, then oldest first."""
    query = _active_pending().where(
        PendingContentModel.status == PendingContentStatus.PENDING_REVIEW.value
    )
    if category is not None:
        query = query.where(PendingContentModel.category == category.value)
    if priority is not None:
        query = query.where(PendingContentModel.review_priority == priority.value)
    if language is not None:
        query = query.where(PendingContentModel.language == language.value)

    total = session.execute(select(func.count()).select_from(query.subquery())).scalar_one()
    items = session.execute(
        query.order_by(
            PRIORITY_ORDER,
            PendingContentModel.quality_score.desc(),
            PendingContentModel.created_at.asc(),
        )
        .offset(offset)
        .limit(limit)
    ).scalars()
    return list(items), total


def list_history(
    session: Session,
    statuses: list[PendingContentStatus],
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[PendingContentModel], int]:
    """Reviewed entries, most recently reviewed first."""
    query = _active_pending().where(PendingContentModel.status.in_([s.value for s in statuses]))
    total = session.execute(select(func.count()).select_from(query.subquery())).scalar_one()
    items = session.execute(
        query.order_by(PendingContentModel.reviewed_at.desc()).offset(offset).limit(limit)
    ).scalars()
    return list(items), total


def get_pending(session: Session, pending_id: UUID) -> PendingContentModel:
    pending = session.execute(
        _active_pending().where(PendingContentModel.id == pending_id)
    ).scalar_one_or_none()
    if pending is None:
        raise PendingContentNotFoundError(f"Pending content not found: {pending_id}")
    return pending


def media_urls(
    pending: PendingContentModel,
    storage: StorageProvider,
    ttl_seconds: int | None = None,
) -> dict[str, str | None]:
    """Presigned URLs for the reviewer's player."""
    ttl = ttl_seconds or settings.presign_ttl_seconds
    return {
        "video_url": storage.presign(pending.video_key, ttl),
        "thumbnail_url": storage.presign(pending.thumbnail_key, ttl) if pending.thumbnail_key else None,
    }


# =============================================================================
# Reviewer actions
# =============================================================================


def apply_edits(pending: PendingContentModel, edits: ReviewEdits) -> list[str]:
    """Write reviewer corrections into the snapshot and the job; return changed fields."""
    job = pending.job
    changed: list[str] = []
    if edits.title is not None and edits.title.strip():
        pending.title = job.generated_title = edits.title.strip()
        changed.append("title")
    if edits.description is not None:
        pending.description = job.generated_description = edits.description
        changed.append("description")
    if edits.category is not None:
        pending.category = job.category = edits.category.value
        changed.append("category")
    if edits.difficulty is not None:
        pending.difficulty = job.difficulty = edits.difficulty.value
        changed.append("difficulty")
    if edits.tags is not None:
        # Same cleanup as generated tags
        tags = ContentMetadata(title=pending.title, tags=edits.tags).tags
        pending.tags = tags
        job.generated_tags = list(tags)
        changed.append("tags")
    return changed


def update_metadata(
    session: Session,
    pending_id: UUID,
    edits: ReviewEdits,
    reviewer: str,
) -> PendingContentModel:
    """Edit metadata without deciding; only allowed while awaiting review."""
    pending = get_pending(session, pending_id)
    if pending.status != PendingContentStatus.PENDING_REVIEW.value:
        raise InvalidTransitionError(pending.status, "METADATA_UPDATE")
    changed = apply_edits(pending, edits)
    pending.job.updated_by = reviewer
    session.commit()
    logger.info("review_metadata_updated", pending_id=str(pending_id), reviewer=reviewer, fields=changed)
    return pending


def approve(
    session: Session,
    pending_id: UUID,
    reviewer: str,
    edits: ReviewEdits | None = None,
) -> ReviewOutcome:
    """Approve an entry and commit; publishing is a separate transaction."""
    pending = get_pending(session, pending_id)
    job = pending.job
    status = JobStatus(job.status)

    if status == JobStatus.APPROVED and edits is not None and job.published_content_id is None:
        # Retry after a failed publish; corrections still land before publishing
        changed = apply_edits(pending, edits)
        job.updated_by = reviewer
        session.commit()
        logger.info("review_approved_edits_applied", pending_id=str(pending_id), fields=changed)
        return _outcome(pending, changed=bool(changed))

    if status.is_terminal or status == JobStatus.APPROVED:
        logger.info("review_approve_noop", pending_id=str(pending_id), job_status=status.value)
        return _outcome(pending, changed=False)

    apply_job_event(job, JobEvent.APPROVED, actor=reviewer)
    if edits is not None:
        apply_edits(pending, edits)

    now = datetime.now(UTC)
    pending.status = PendingContentStatus.APPROVED.value
    pending.reviewed_by = job.reviewed_by = reviewer
    pending.reviewed_at = job.reviewed_at = now
    session.commit()

    logger.info("review_approved", pending_id=str(pending_id), job_id=str(job.id), reviewer=reviewer)
    return _outcome(pending, changed=True)


def approve_and_publish(
    session: Session,
    pending_id: UUID,
    reviewer: str,
    storage: StorageProvider,
    edits: ReviewEdits | None = None,
) -> ReviewOutcome:
    """Approve, then publish.

    A publish failure leaves the job APPROVED and is reported in
    ``publish_error``; calling this again retries the publish.
    """
    outcome = approve(session, pending_id, reviewer, edits)
    if outcome.job_status != JobStatus.APPROVED:
        return outcome

    try:
        outcome.published_content_id = publish_job(session, outcome.job_id, storage)
        outcome.job_status = JobStatus.PUBLISHED
    except PublishError as e:
        outcome.publish_error = str(e)
    return outcome


def reject(
    session: Session,
    pending_id: UUID,
    reviewer: str,
    reason: RejectionReason | None = None,
    note: str | None = None,
) -> ReviewOutcome:
    """Reject with a taxonomy reason, free text, or both."""
    if reason is None and not (note and note.strip()):
        raise ValueError("A rejection reason or note is required")

    pending = get_pending(session, pending_id)
    job = pending.job
    status = JobStatus(job.status)
    if status.is_terminal:
        logger.info("review_reject_noop", pending_id=str(pending_id), job_status=status.value)
        return _outcome(pending, changed=False)

    apply_job_event(job, JobEvent.REJECTED, actor=reviewer)

    text = reason.value if reason is not None else note.strip()
    now = datetime.now(UTC)
    pending.status = PendingContentStatus.REJECTED.value
    pending.rejection_reason = job.rejection_reason = text
    if reason is not None and note:
        pending.review_notes = job.review_notes = note.strip()
    pending.reviewed_by = job.reviewed_by = reviewer
    pending.reviewed_at = job.reviewed_at = now
    session.commit()

    logger.info("review_rejected", pending_id=str(pending_id), job_id=str(job.id), reason=text)
    return _outcome(pending, changed=True)


def request_edit(
    session: Session,
    pending_id: UUID,
    reviewer: str,
    note: str | None = None,
) -> ReviewOutcome:
    """Send the job back to the edit stage."""
    pending = get_pending(session, pending_id)
    job = pending.job
    if job.status == JobStatus.NEEDS_EDIT.value:
        return _outcome(pending, changed=False)

    apply_job_event(job, JobEvent.EDIT_REQUESTED, actor=reviewer)
    pending.status = PendingContentStatus.NEEDS_EDIT.value
    pending.reviewed_by = job.reviewed_by = reviewer
    pending.reviewed_at = job.reviewed_at = datetime.now(UTC)
    if note:
        pending.review_notes = job.review_notes = note.strip()
    session.commit()

    logger.info("review_edit_requested", pending_id=str(pending_id), job_id=str(job.id))
    return _outcome(pending, changed=True)
