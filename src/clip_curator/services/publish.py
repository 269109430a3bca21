"""Publish transaction.

Writes an approved job into the serving catalog in one transaction: content
row, metadata row, zeroed interaction counters, tags, and the PUBLISHED marks
on the job and its review entry. The job id is the idempotency key; a job
that already carries a ``published_content_id`` is returned as is.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from clip_curator.adapters.storage.base import StorageProvider
from clip_curator.config import settings
from clip_curator.db.models import (
    ContentInteractionModel,
    ContentJobModel,
    ContentMetadataModel,
    ContentModel,
    ContentTagModel,
    PendingContentModel,
    TagModel,
)
from clip_curator.domain.enums import (
    ContentStatus,
    ContentType,
    JobEvent,
    JobStatus,
    PendingContentStatus,
)
from clip_curator.errors import (
    InvalidTransitionError,
    JobNotFoundError,
    PendingContentNotFoundError,
    PublishError,
)
from clip_curator.logging import get_logger
from clip_curator.services.jobs import apply_job_event

logger = get_logger(__name__)


def normalize_tag(name: str) -> str:
    return "".join(name.strip().lstrip("#").lower().split())


def _attach_tags(session: Session, content_id: UUID, tags: list[str]) -> int:
    """Link tags to the content, creating catalog tags as needed."""
    attached: set[UUID] = set()
    for name in tags:
        normalized = normalize_tag(name)
        if not normalized:
            continue
        tag = session.execute(
            select(TagModel).where(TagModel.normalized_name == normalized)
        ).scalar_one_or_none()
        if tag is None:
            tag = TagModel(name=name.strip().lstrip("#"), normalized_name=normalized, usage_count=0)
            session.add(tag)
            session.flush()
        if tag.id in attached:
            continue
        attached.add(tag.id)
        session.add(ContentTagModel(content_id=content_id, tag_id=tag.id))
        tag.usage_count = (tag.usage_count or 0) + 1
    return len(attached)


def _load_job_for_update(session: Session, job_id: UUID) -> ContentJobModel:
    job = session.execute(
        select(ContentJobModel)
        .where(ContentJobModel.id == job_id, ContentJobModel.deleted_at.is_(None))
        .with_for_update()
    ).scalar_one_or_none()
    if job is None:
        raise JobNotFoundError(f"Job not found: {job_id}")
    return job


def publish_job(
    session: Session,
    job_id: UUID,
    storage: StorageProvider,
    creator_id: UUID | None = None,
) -> UUID:
    """Publish an APPROVED job and commit; return the catalog content id.

    Raises:
        InvalidTransitionError: the job is neither APPROVED nor already published.
        PublishError: the catalog write failed; nothing was written and the
            job is still APPROVED.
    """
    job = _load_job_for_update(session, job_id)

    if job.published_content_id is not None:
        logger.info(
            "publish_already_done",
            job_id=str(job_id),
            content_id=str(job.published_content_id),
        )
        return job.published_content_id

    if job.status != JobStatus.APPROVED.value:
        raise InvalidTransitionError(job.status, JobEvent.PUBLISHED)

    pending: PendingContentModel | None = job.pending_content
    if pending is None or pending.deleted_at is not None:
        raise PendingContentNotFoundError(f"Job {job_id} has no review entry to publish")

    content_id = uuid4()
    creator = creator_id or UUID(settings.system_creator_id)
    now = datetime.now(UTC)

    try:
        video_url = storage.public_url(pending.video_key)
        thumbnail_url = storage.public_url(pending.thumbnail_key) if pending.thumbnail_key else video_url

        session.add(
            ContentModel(
                id=content_id,
                creator_id=creator,
                content_type=ContentType.VIDEO.value,
                url=video_url,
                thumbnail_url=thumbnail_url,
                duration=pending.duration_seconds,
                width=pending.width,
                height=pending.height,
                status=ContentStatus.PUBLISHED.value,
                created_by=str(creator),
            )
        )
        # Catalog rows must exist before their children reference them
        session.flush()
        session.add(
            ContentMetadataModel(
                content_id=content_id,
                title=pending.title,
                description=pending.description,
                category=pending.category,
                difficulty=pending.difficulty,
                tags=list(pending.tags or []),
                language=pending.language,
            )
        )
        session.add(ContentInteractionModel(content_id=content_id))
        tag_count = _attach_tags(session, content_id, list(pending.tags or []))

        apply_job_event(job, JobEvent.PUBLISHED)
        job.published_content_id = content_id
        job.published_at = now
        pending.status = PendingContentStatus.PUBLISHED.value
        pending.published_content_id = content_id

        session.commit()
    except Exception as e:
        session.rollback()
        logger.error("publish_failed", job_id=str(job_id), error=str(e))
        raise PublishError(f"Publishing job {job_id} failed: {e}") from e

    logger.info(
        "publish_completed",
        job_id=str(job_id),
        content_id=str(content_id),
        title=pending.title,
        tags=tag_count,
    )
    return content_id
