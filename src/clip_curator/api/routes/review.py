"""Review gate endpoints."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from clip_curator.api.deps import ReviewerDep, SessionDep, StorageDep
from clip_curator.db.models import PendingContentModel
from clip_curator.domain.enums import (
    Category,
    ContentLanguage,
    Difficulty,
    PendingContentStatus,
    RejectionReason,
    ReviewPriority,
)
from clip_curator.domain.models import ReviewEdits
from clip_curator.logging import get_logger
from clip_curator.services import review as review_service
from clip_curator.services.dashboard import get_dashboard_stats
from clip_curator.services.publish import publish_job

router = APIRouter(prefix="/review", tags=["Review"])
logger = get_logger(__name__)


# =============================================================================
# Request / Response Models
# =============================================================================


class PendingSummary(BaseModel):
    """Review queue entry."""

    id: UUID
    job_id: UUID
    title: str
    category: str
    difficulty: str | None
    tags: list[str]
    language: str
    quality_score: int
    review_priority: str
    status: str
    duration_seconds: int | None
    source_video_id: str
    source_title: str | None
    created_at: datetime
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None


class PendingListResponse(BaseModel):
    items: list[PendingSummary]
    total: int
    limit: int
    offset: int


class LocalizedMetadata(BaseModel):
    language: str
    title: str
    description: str | None
    tags: list[str]
    category: str
    difficulty: str


class PendingDetailResponse(PendingSummary):
    """Everything a reviewer needs to decide."""

    description: str | None
    video_url: str
    thumbnail_url: str | None
    width: int
    height: int
    source_url: str
    source_channel_title: str | None
    quality_breakdown: dict[str, int] | None
    transcript: str | None
    review_notes: str | None
    localized_metadata: list[LocalizedMetadata]


class MetadataEdits(BaseModel):
    """Reviewer corrections; omitted fields are left as generated."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    category: Category | None = None
    difficulty: Difficulty | None = None
    tags: list[str] | None = Field(None, max_length=30)

    def to_edits(self) -> ReviewEdits:
        return ReviewEdits(
            title=self.title,
            description=self.description,
            category=self.category,
            difficulty=self.difficulty,
            tags=self.tags,
        )


class RejectRequest(BaseModel):
    reason: RejectionReason | None = None
    note: str | None = Field(None, max_length=2000)


class RequestEditRequest(BaseModel):
    note: str | None = Field(None, max_length=2000)


class ReviewActionResponse(BaseModel):
    pending_id: UUID
    job_id: UUID
    job_status: str
    changed: bool
    published_content_id: UUID | None = None
    publish_error: str | None = None


class PublishResponse(BaseModel):
    job_id: UUID
    published_content_id: UUID


class StatsResponse(BaseModel):
    today_created: int
    pending_review: int
    approved_this_week: int
    rejected_this_week: int
    average_quality_score: float
    high_priority_count: int
    pending_by_category: dict[str, int]
    generated_at: datetime | None


def _summary(p: PendingContentModel) -> PendingSummary:
    return PendingSummary(
        id=p.id,
        job_id=p.job_id,
        title=p.title,
        category=p.category,
        difficulty=p.difficulty,
        tags=list(p.tags or []),
        language=p.language,
        quality_score=p.quality_score,
        review_priority=p.review_priority,
        status=p.status,
        duration_seconds=p.duration_seconds,
        source_video_id=p.source_video_id,
        source_title=p.source_title,
        created_at=p.created_at,
        reviewed_by=p.reviewed_by,
        reviewed_at=p.reviewed_at,
        rejection_reason=p.rejection_reason,
    )


def _action(outcome: review_service.ReviewOutcome) -> ReviewActionResponse:
    return ReviewActionResponse(
        pending_id=outcome.pending_id,
        job_id=outcome.job_id,
        job_status=outcome.job_status.value,
        changed=outcome.changed,
        published_content_id=outcome.published_content_id,
        publish_error=outcome.publish_error,
    )


HISTORY_STATUSES = {
    "approved": [PendingContentStatus.APPROVED, PendingContentStatus.PUBLISHED],
    "rejected": [PendingContentStatus.REJECTED],
    "published": [PendingContentStatus.PUBLISHED],
}


# =============================================================================
# Queue
# =============================================================================


@router.get("/pending", response_model=PendingListResponse, summary="List pending review")
async def list_pending(
    session: SessionDep,
    category: Category | None = Query(None, description="Filter by category"),
    priority: ReviewPriority | None = Query(None, description="Filter by review priority"),
    language: ContentLanguage | None = Query(None, description="Filter by language"),
    limit: int = Query(20, ge=1, le=100, description="Number of results"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
) -> PendingListResponse:
    """Pending entries ordered by priority, then score, then age."""
    items, total = review_service.list_pending(
        session, category=category, priority=priority, language=language, limit=limit, offset=offset
    )
    return PendingListResponse(items=[_summary(p) for p in items], total=total, limit=limit, offset=offset)


@router.get("/stats", response_model=StatsResponse, summary="Review dashboard statistics")
async def stats(session: SessionDep) -> StatsResponse:
    s = get_dashboard_stats(session)
    return StatsResponse(
        today_created=s.today_created,
        pending_review=s.pending_review,
        approved_this_week=s.approved_this_week,
        rejected_this_week=s.rejected_this_week,
        average_quality_score=s.average_quality_score,
        high_priority_count=s.high_priority_count,
        pending_by_category=s.pending_by_category,
        generated_at=s.generated_at,
    )


@router.get("/history", response_model=PendingListResponse, summary="Reviewed entries")
async def history(
    session: SessionDep,
    status: Literal["approved", "rejected", "published"] = Query("approved"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> PendingListResponse:
    items, total = review_service.list_history(session, HISTORY_STATUSES[status], limit, offset)
    return PendingListResponse(items=[_summary(p) for p in items], total=total, limit=limit, offset=offset)


@router.get("/{pending_id}", response_model=PendingDetailResponse, summary="Review entry detail")
async def detail(pending_id: UUID, session: SessionDep, storage: StorageDep) -> PendingDetailResponse:
    pending = review_service.get_pending(session, pending_id)
    job = pending.job
    urls = review_service.media_urls(pending, storage)
    return PendingDetailResponse(
        **_summary(pending).model_dump(),
        description=pending.description,
        video_url=urls["video_url"] or "",
        thumbnail_url=urls["thumbnail_url"],
        width=pending.width,
        height=pending.height,
        source_url=job.source_url,
        source_channel_title=pending.source_channel_title,
        quality_breakdown=job.quality_breakdown,
        transcript=job.transcript,
        review_notes=pending.review_notes,
        localized_metadata=[
            LocalizedMetadata(
                language=m.language,
                title=m.title,
                description=m.description,
                tags=list(m.tags or []),
                category=m.category,
                difficulty=m.difficulty,
            )
            for m in job.metadata_entries
        ],
    )


# =============================================================================
# Decisions
# =============================================================================


@router.post("/{pending_id}/approve", response_model=ReviewActionResponse, summary="Approve and publish")
async def approve(
    pending_id: UUID,
    session: SessionDep,
    storage: StorageDep,
    reviewer: ReviewerDep,
    edits: MetadataEdits | None = None,
) -> ReviewActionResponse:
    """Approve with optional metadata corrections, then publish.

    Approving an already published entry returns its content id unchanged.
    """
    outcome = review_service.approve_and_publish(
        session, pending_id, reviewer, storage, edits.to_edits() if edits else None
    )
    logger.info("review_approve_requested", pending_id=str(pending_id), reviewer=reviewer)
    return _action(outcome)


@router.post("/{pending_id}/reject", response_model=ReviewActionResponse, summary="Reject")
async def reject(
    pending_id: UUID,
    request: RejectRequest,
    session: SessionDep,
    reviewer: ReviewerDep,
) -> ReviewActionResponse:
    outcome = review_service.reject(session, pending_id, reviewer, request.reason, request.note)
    return _action(outcome)


@router.post("/{pending_id}/request-edit", response_model=ReviewActionResponse, summary="Send back to editing")
async def request_edit(
    pending_id: UUID,
    session: SessionDep,
    reviewer: ReviewerDep,
    request: RequestEditRequest | None = None,
) -> ReviewActionResponse:
    outcome = review_service.request_edit(session, pending_id, reviewer, request.note if request else None)
    return _action(outcome)


@router.patch("/{pending_id}/metadata", response_model=PendingSummary, summary="Edit metadata")
async def update_metadata(
    pending_id: UUID,
    edits: MetadataEdits,
    session: SessionDep,
    reviewer: ReviewerDep,
) -> PendingSummary:
    pending = review_service.update_metadata(session, pending_id, edits.to_edits(), reviewer)
    return _summary(pending)


@router.post("/{pending_id}/publish", response_model=PublishResponse, summary="Retry publish")
async def retry_publish(pending_id: UUID, session: SessionDep, storage: StorageDep) -> PublishResponse:
    """Publish an approved entry whose earlier publish failed."""
    pending = review_service.get_pending(session, pending_id)
    content_id = publish_job(session, pending.job_id, storage)
    return PublishResponse(job_id=pending.job_id, published_content_id=content_id)
