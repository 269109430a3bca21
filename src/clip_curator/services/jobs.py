"""Content job repository helpers.

Jobs are never physically deleted. Every lookup here filters on
``deleted_at`` except :func:`known_source_ids`, which must also see removed
rows so a deleted video is not crawled again.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from clip_curator.db.models import ContentJobModel
from clip_curator.domain.enums import JobEvent, JobStatus
from clip_curator.domain.models import EvaluatedVideo
from clip_curator.domain.state_machine import transition
from clip_curator.errors import JobNotFoundError
from clip_curator.logging import get_logger

logger = get_logger(__name__)

SYSTEM_ACTOR = "system"


def active_jobs() -> Select[tuple[ContentJobModel]]:
    """Base query over jobs that have not been soft-deleted."""
    return select(ContentJobModel).where(ContentJobModel.deleted_at.is_(None))


def get_job(session: Session, job_id: UUID) -> ContentJobModel:
    job = session.execute(active_jobs().where(ContentJobModel.id == job_id)).scalar_one_or_none()
    if job is None:
        raise JobNotFoundError(f"Job not found: {job_id}")
    return job


def list_jobs(
    session: Session,
    status: JobStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[ContentJobModel], int]:
    """Return one page of jobs (newest first) and the total count."""
    query = active_jobs()
    if status is not None:
        query = query.where(ContentJobModel.status == status.value)
    total = session.execute(select(func.count()).select_from(query.subquery())).scalar_one()
    jobs = (
        session.execute(
            query.order_by(ContentJobModel.created_at.desc()).offset(offset).limit(limit)
        )
        .scalars()
        .all()
    )
    return list(jobs), total


def count_by_status(session: Session) -> dict[str, int]:
    rows = session.execute(
        select(ContentJobModel.status, func.count())
        .where(ContentJobModel.deleted_at.is_(None))
        .group_by(ContentJobModel.status)
    ).all()
    return {status: count for status, count in rows}


def known_source_ids(session: Session, video_ids: Iterable[str]) -> set[str]:
    """Source ids that already have a job, including soft-deleted ones."""
    ids = list(set(video_ids))
    if not ids:
        return set()
    rows = session.execute(
        select(ContentJobModel.source_video_id).where(ContentJobModel.source_video_id.in_(ids))
    ).scalars()
    return set(rows)


def create_job(
    session: Session,
    evaluated: EvaluatedVideo,
    search_query: str | None = None,
    created_by: str = SYSTEM_ACTOR,
) -> ContentJobModel:
    """Create a PENDING job for an accepted candidate."""
    candidate = evaluated.candidate
    job = ContentJobModel(
        source_video_id=candidate.video_id,
        source_title=candidate.title[:500],
        source_channel_id=candidate.channel_id,
        source_channel_title=candidate.channel_title,
        language=candidate.language.value,
        status=JobStatus.PENDING.value,
        evaluation_score=evaluated.predicted_quality,
        recommendation=evaluated.recommendation.value,
        search_query=search_query,
        created_by=created_by,
    )
    session.add(job)
    session.flush()
    logger.info(
        "job_created",
        job_id=str(job.id),
        source_video_id=candidate.video_id,
        recommendation=evaluated.recommendation.value,
        predicted_quality=evaluated.predicted_quality,
    )
    return job


def jobs_for_stage(session: Session, statuses: Sequence[JobStatus], limit: int) -> list[UUID]:
    """Ids of the oldest non-deleted jobs waiting in ``statuses``."""
    rows = session.execute(
        select(ContentJobModel.id)
        .where(
            ContentJobModel.deleted_at.is_(None),
            ContentJobModel.status.in_([s.value for s in statuses]),
        )
        .order_by(ContentJobModel.created_at.asc())
        .limit(limit)
    ).scalars()
    return list(rows)


def apply_job_event(job: ContentJobModel, event: JobEvent, actor: str = SYSTEM_ACTOR) -> JobStatus:
    """Move ``job`` along the state machine and stamp the actor."""
    previous = job.status
    new_status = transition(job, event)
    job.updated_by = actor
    logger.info(
        "job_transitioned",
        job_id=str(job.id),
        from_status=previous,
        to_status=new_status.value,
        job_event=event.value,
    )
    return new_status


def mark_failed(
    session: Session,
    job_id: UUID,
    error: str,
    attempts: int,
) -> bool:
    """Mark a job FAILED unless it already reached a terminal state.

    Returns whether the job was changed.
    """
    job = session.execute(active_jobs().where(ContentJobModel.id == job_id)).scalar_one_or_none()
    if job is None or JobStatus(job.status).is_terminal:
        return False
    apply_job_event(job, JobEvent.FAILED)
    job.error_message = error[:2000]
    job.retry_count = (job.retry_count or 0) + attempts
    return True


def soft_delete_job(session: Session, job_id: UUID, deleted_by: str) -> ContentJobModel:
    job = get_job(session, job_id)
    job.deleted_at = datetime.now(UTC)
    job.updated_by = deleted_by
    if job.pending_content is not None and job.pending_content.deleted_at is None:
        job.pending_content.deleted_at = job.deleted_at
    logger.info("job_soft_deleted", job_id=str(job_id), deleted_by=deleted_by)
    return job
