"""Review queue statistics."""

from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from clip_curator.db.models import ContentJobModel, PendingContentModel
from clip_curator.domain.enums import JobStatus, PendingContentStatus, ReviewPriority
from clip_curator.domain.models import DashboardStats


def get_dashboard_stats(session: Session, now: datetime | None = None) -> DashboardStats:
    now = now or datetime.now(UTC)
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = now - timedelta(days=7)

    live_jobs = ContentJobModel.deleted_at.is_(None)
    pending_filter = (
        PendingContentModel.deleted_at.is_(None),
        PendingContentModel.status == PendingContentStatus.PENDING_REVIEW.value,
    )

    today_created = session.execute(
        select(func.count(ContentJobModel.id)).where(
            live_jobs, ContentJobModel.created_at >= today_start
        )
    ).scalar_one()

    approved_this_week = session.execute(
        select(func.count(ContentJobModel.id)).where(
            live_jobs,
            ContentJobModel.status.in_([JobStatus.APPROVED.value, JobStatus.PUBLISHED.value]),
            ContentJobModel.reviewed_at >= week_start,
        )
    ).scalar_one()

    rejected_this_week = session.execute(
        select(func.count(ContentJobModel.id)).where(
            live_jobs,
            ContentJobModel.status == JobStatus.REJECTED.value,
            ContentJobModel.reviewed_at >= week_start,
        )
    ).scalar_one()

    pending_count, average_score = session.execute(
        select(
            func.count(PendingContentModel.id),
            func.avg(PendingContentModel.quality_score),
        ).where(*pending_filter)
    ).one()

    high_priority = session.execute(
        select(func.count(PendingContentModel.id)).where(
            *pending_filter,
            PendingContentModel.review_priority == ReviewPriority.HIGH.value,
        )
    ).scalar_one()

    by_category = session.execute(
        select(PendingContentModel.category, func.count(PendingContentModel.id))
        .where(*pending_filter)
        .group_by(PendingContentModel.category)
    ).all()

    return DashboardStats(
        today_created=today_created,
        pending_review=pending_count,
        approved_this_week=approved_this_week,
        rejected_this_week=rejected_this_week,
        average_quality_score=round(float(average_score or 0), 1),
        high_priority_count=high_priority,
        pending_by_category={category: count for category, count in by_category},
        generated_at=now,
    )
