"""Tests for the review gate, the publish transaction and the dashboard."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from clip_curator.adapters.storage.stub import StubStorageProvider
from clip_curator.db.models import (
    ContentInteractionModel,
    ContentJobModel,
    ContentMetadataModel,
    ContentModel,
    ContentTagModel,
    TagModel,
)
from clip_curator.domain.enums import (
    Category,
    ContentLanguage,
    Difficulty,
    JobEvent,
    JobStatus,
    PendingContentStatus,
    RejectionReason,
    ReviewPriority,
)
from clip_curator.domain.models import ReviewEdits
from clip_curator.errors import (
    InvalidTransitionError,
    JobNotFoundError,
    PendingContentNotFoundError,
    PublishError,
)
from clip_curator.services import jobs as job_service
from clip_curator.services import review
from clip_curator.services.dashboard import get_dashboard_stats
from clip_curator.services.publish import normalize_tag, publish_job
from tests.factories import make_job, make_pending


class BrokenStorage(StubStorageProvider):
    def public_url(self, key: str) -> str:
        raise RuntimeError("storage unavailable")


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


# =============================================================================
# Queue
# =============================================================================


class TestQueue:
    def test_priority_then_score_then_age(self, session):
        normal = make_pending(session, score=80, priority=ReviewPriority.NORMAL)
        high_low = make_pending(session, score=86)
        high_top = make_pending(session, score=97)
        high_tie = make_pending(session, score=86)

        items, total = review.list_pending(session)

        assert total == 4
        assert [p.id for p in items] == [high_top.id, high_low.id, high_tie.id, normal.id]

    def test_filters(self, session):
        make_pending(session, category="SCIENCE", language="ko")
        science_en = make_pending(session, category="SCIENCE", language="en")
        make_pending(session, priority=ReviewPriority.NORMAL, score=75)

        items, total = review.list_pending(
            session, category=Category.SCIENCE, language=ContentLanguage.EN
        )
        assert [p.id for p in items] == [science_en.id]
        assert total == 1

        _, normal_total = review.list_pending(session, priority=ReviewPriority.NORMAL)
        assert normal_total == 1

    def test_pagination(self, session):
        for score in (90, 89, 88):
            make_pending(session, score=score)

        items, total = review.list_pending(session, limit=1, offset=1)

        assert total == 3
        assert [p.quality_score for p in items] == [89]

    def test_snapshot_fields(self, session):
        pending = make_pending(session, score=91)

        assert pending.title == "Python in a minute"
        assert pending.tags == ["python", "basics"]
        assert pending.duration_seconds == 60
        assert (pending.width, pending.height) == (1080, 1920)
        assert pending.language == "en"

    def test_soft_deleted_job_leaves_queue(self, session):
        pending = make_pending(session)

        job_service.soft_delete_job(session, pending.job_id, deleted_by="admin")
        session.commit()

        assert review.list_pending(session)[1] == 0
        with pytest.raises(PendingContentNotFoundError):
            review.get_pending(session, pending.id)
        with pytest.raises(JobNotFoundError):
            job_service.get_job(session, pending.job_id)

    def test_media_urls(self, session, storage):
        pending = make_pending(session)

        urls = review.media_urls(pending, storage, ttl_seconds=60)

        assert urls["video_url"] == "stub://ai-content/clips/v/1.mp4?ttl=60"
        assert urls["thumbnail_url"] == "stub://thumbnails/v/1.jpg?ttl=60"


# =============================================================================
# Approve and publish
# =============================================================================


class TestApproveAndPublish:
    def test_publishes_into_catalog(self, session, storage):
        pending = make_pending(session, generated_tags=["Python", "#basics"])

        outcome = review.approve_and_publish(session, pending.id, "alice", storage)

        assert outcome.changed
        assert outcome.job_status == JobStatus.PUBLISHED
        assert outcome.publish_error is None

        content = session.get(ContentModel, outcome.published_content_id)
        assert content.url == "stub://ai-content/clips/v/1.mp4"
        assert content.thumbnail_url == "stub://thumbnails/v/1.jpg"
        assert content.duration == 60
        assert content.status == "PUBLISHED"

        metadata = session.execute(
            select(ContentMetadataModel).where(ContentMetadataModel.content_id == content.id)
        ).scalar_one()
        assert metadata.title == "Python in a minute"
        assert metadata.category == "PROGRAMMING"

        interactions = session.execute(
            select(ContentInteractionModel).where(ContentInteractionModel.content_id == content.id)
        ).scalar_one()
        assert interactions.view_count == 0
        assert interactions.like_count == 0

        tags = session.execute(select(TagModel.normalized_name)).scalars().all()
        assert sorted(tags) == ["basics", "python"]
        assert _count(session, ContentTagModel) == 2

        session.expire_all()
        job = session.get(ContentJobModel, pending.job_id)
        assert job.status == JobStatus.PUBLISHED.value
        assert job.published_content_id == content.id
        assert job.reviewed_by == "alice"
        assert job.published_at is not None
        assert job.pending_content.status == PendingContentStatus.PUBLISHED.value

    def test_second_approval_is_a_noop(self, session, storage):
        pending = make_pending(session)
        first = review.approve_and_publish(session, pending.id, "alice", storage)

        second = review.approve_and_publish(session, pending.id, "bob", storage)

        assert not second.changed
        assert second.published_content_id == first.published_content_id
        assert _count(session, ContentModel) == 1
        session.expire_all()
        assert session.get(ContentJobModel, pending.job_id).reviewed_by == "alice"

    def test_publish_job_is_idempotent(self, session, storage):
        pending = make_pending(session)
        outcome = review.approve_and_publish(session, pending.id, "alice", storage)

        again = publish_job(session, pending.job_id, storage)

        assert again == outcome.published_content_id
        assert _count(session, ContentModel) == 1

    def test_edits_are_applied_before_publish(self, session, storage):
        pending = make_pending(session)
        edits = ReviewEdits(
            title="  Better title ",
            category=Category.SCIENCE,
            difficulty=Difficulty.ADVANCED,
            tags=["#new", "New", "other"],
        )

        outcome = review.approve_and_publish(session, pending.id, "alice", storage, edits)

        metadata = session.execute(
            select(ContentMetadataModel).where(
                ContentMetadataModel.content_id == outcome.published_content_id
            )
        ).scalar_one()
        assert metadata.title == "Better title"
        assert metadata.category == "SCIENCE"
        assert metadata.difficulty == "ADVANCED"
        assert metadata.tags == ["new", "other"]
        session.expire_all()
        assert session.get(ContentJobModel, pending.job_id).generated_title == "Better title"

    def test_shared_tags_are_counted(self, session, storage):
        first = make_pending(session, generated_tags=["python"])
        second = make_pending(session, generated_tags=["Python", "django"])

        review.approve_and_publish(session, first.id, "alice", storage)
        review.approve_and_publish(session, second.id, "alice", storage)

        python = session.execute(
            select(TagModel).where(TagModel.normalized_name == "python")
        ).scalar_one()
        assert python.usage_count == 2

    def test_publish_failure_keeps_job_approved(self, session):
        pending = make_pending(session)

        outcome = review.approve_and_publish(session, pending.id, "alice", BrokenStorage())

        assert outcome.job_status == JobStatus.APPROVED
        assert "storage unavailable" in outcome.publish_error
        assert _count(session, ContentModel) == 0
        session.expire_all()
        job = session.get(ContentJobModel, pending.job_id)
        assert job.status == JobStatus.APPROVED.value
        assert job.published_content_id is None
        assert job.pending_content.status == PendingContentStatus.APPROVED.value

    def test_failed_publish_can_be_retried(self, session, storage):
        pending = make_pending(session)
        review.approve_and_publish(session, pending.id, "alice", BrokenStorage())

        outcome = review.approve_and_publish(session, pending.id, "alice", storage)

        assert not outcome.changed
        assert outcome.job_status == JobStatus.PUBLISHED
        assert outcome.published_content_id is not None
        assert _count(session, ContentModel) == 1

    def test_retry_applies_new_edits(self, session, storage):
        pending = make_pending(session)
        review.approve_and_publish(
            session, pending.id, "alice", BrokenStorage(), ReviewEdits(title="First try")
        )

        outcome = review.approve_and_publish(
            session, pending.id, "alice", storage, ReviewEdits(title="Second try")
        )

        assert outcome.job_status == JobStatus.PUBLISHED
        metadata = session.execute(
            select(ContentMetadataModel).where(
                ContentMetadataModel.content_id == outcome.published_content_id
            )
        ).scalar_one()
        assert metadata.title == "Second try"

    def test_publish_job_raises_publish_error(self, session):
        pending = make_pending(session)
        review.approve(session, pending.id, "alice")

        with pytest.raises(PublishError):
            publish_job(session, pending.job_id, BrokenStorage())

    def test_publish_requires_approval(self, session, storage):
        pending = make_pending(session)

        with pytest.raises(InvalidTransitionError):
            publish_job(session, pending.job_id, storage)

    def test_publish_unknown_job(self, session, storage, db):
        with pytest.raises(JobNotFoundError):
            publish_job(session, uuid4(), storage)

    def test_normalize_tag(self):
        assert normalize_tag(" #Machine Learning ") == "machinelearning"


# =============================================================================
# Reject, request edit, metadata
# =============================================================================


class TestReviewerActions:
    def test_reject_with_reason_and_note(self, session):
        pending = make_pending(session)

        outcome = review.reject(session, pending.id, "bob", RejectionReason.POOR_AUDIO, " hiss ")

        assert outcome.job_status == JobStatus.REJECTED
        session.expire_all()
        job = session.get(ContentJobModel, pending.job_id)
        assert job.rejection_reason == "POOR_AUDIO"
        assert job.review_notes == "hiss"
        assert job.pending_content.status == PendingContentStatus.REJECTED.value
        assert job.pending_content.reviewed_by == "bob"

    def test_reject_with_free_text(self, session):
        pending = make_pending(session)

        review.reject(session, pending.id, "bob", note="off topic")

        session.expire_all()
        assert session.get(ContentJobModel, pending.job_id).rejection_reason == "off topic"

    def test_reject_requires_reason_or_note(self, session):
        pending = make_pending(session)

        with pytest.raises(ValueError):
            review.reject(session, pending.id, "bob", note="   ")

    def test_reject_twice_is_a_noop(self, session):
        pending = make_pending(session)
        review.reject(session, pending.id, "bob", RejectionReason.DUPLICATE)

        outcome = review.reject(session, pending.id, "carol", RejectionReason.OTHER)

        assert not outcome.changed
        session.expire_all()
        assert session.get(ContentJobModel, pending.job_id).reviewed_by == "bob"

    def test_reject_after_publish_is_a_noop(self, session, storage):
        pending = make_pending(session)
        review.approve_and_publish(session, pending.id, "alice", storage)

        outcome = review.reject(session, pending.id, "bob", RejectionReason.OTHER)

        assert not outcome.changed
        assert outcome.job_status == JobStatus.PUBLISHED

    def test_approve_after_reject_is_a_noop(self, session, storage):
        pending = make_pending(session)
        review.reject(session, pending.id, "bob", RejectionReason.COPYRIGHT)

        outcome = review.approve_and_publish(session, pending.id, "alice", storage)

        assert not outcome.changed
        assert outcome.job_status == JobStatus.REJECTED
        assert _count(session, ContentModel) == 0

    def test_request_edit(self, session):
        pending = make_pending(session)

        outcome = review.request_edit(session, pending.id, "bob", note="trim the intro")

        assert outcome.job_status == JobStatus.NEEDS_EDIT
        session.expire_all()
        job = session.get(ContentJobModel, pending.job_id)
        assert job.review_notes == "trim the intro"
        assert job.pending_content.status == PendingContentStatus.NEEDS_EDIT.value

    def test_request_edit_on_rejected_job(self, session):
        pending = make_pending(session)
        review.reject(session, pending.id, "bob", RejectionReason.OTHER)

        with pytest.raises(InvalidTransitionError):
            review.request_edit(session, pending.id, "bob")

    def test_update_metadata(self, session):
        pending = make_pending(session)

        updated = review.update_metadata(
            session, pending.id, ReviewEdits(description="Fixed", tags=["a", "a", "b"]), "bob"
        )

        assert updated.description == "Fixed"
        assert updated.tags == ["a", "b"]
        assert updated.status == PendingContentStatus.PENDING_REVIEW.value
        session.expire_all()
        assert session.get(ContentJobModel, pending.job_id).generated_description == "Fixed"

    def test_update_metadata_after_decision(self, session):
        pending = make_pending(session)
        review.reject(session, pending.id, "bob", RejectionReason.OTHER)

        with pytest.raises(InvalidTransitionError):
            review.update_metadata(session, pending.id, ReviewEdits(title="x"), "bob")

    def test_history(self, session, storage):
        rejected = make_pending(session)
        published = make_pending(session)
        review.reject(session, rejected.id, "bob", RejectionReason.OTHER)
        review.approve_and_publish(session, published.id, "alice", storage)

        items, total = review.list_history(session, [PendingContentStatus.REJECTED])
        assert [p.id for p in items] == [rejected.id]
        assert total == 1

        items, _ = review.list_history(
            session, [PendingContentStatus.APPROVED, PendingContentStatus.PUBLISHED]
        )
        assert [p.id for p in items] == [published.id]


# =============================================================================
# Dashboard and job helpers
# =============================================================================


class TestDashboard:
    def test_stats(self, session):
        make_pending(session, score=90, category="PROGRAMMING")
        make_pending(session, score=76, priority=ReviewPriority.NORMAL, category="SCIENCE")
        rejected = make_pending(session, score=88)
        approved = make_pending(session, score=80)
        review.reject(session, rejected.id, "bob", RejectionReason.OTHER)
        review.approve(session, approved.id, "alice")

        stats = get_dashboard_stats(session)

        assert stats.today_created == 4
        assert stats.pending_review == 2
        assert stats.approved_this_week == 1
        assert stats.rejected_this_week == 1
        assert stats.average_quality_score == 83.0
        assert stats.high_priority_count == 1
        assert stats.pending_by_category == {"PROGRAMMING": 1, "SCIENCE": 1}

    def test_empty(self, session):
        stats = get_dashboard_stats(session)

        assert stats.pending_review == 0
        assert stats.average_quality_score == 0.0
        assert stats.pending_by_category == {}


class TestJobHelpers:
    def test_list_and_count(self, session):
        make_job(session)
        make_job(session)
        make_job(session, status="FAILED")

        jobs, total = job_service.list_jobs(session, status=JobStatus.PENDING)

        assert total == 2
        assert len(jobs) == 2
        assert job_service.count_by_status(session) == {"PENDING": 2, "FAILED": 1}

    def test_apply_job_event_stamps_actor(self, session):
        job = make_job(session)

        new_status = job_service.apply_job_event(job, JobEvent.DOWNLOADED, actor="alice")

        assert new_status == JobStatus.CRAWLED
        assert job.status == JobStatus.CRAWLED.value
        assert job.updated_by == "alice"

    def test_mark_failed_skips_terminal_jobs(self, session):
        job = make_job(session, status="PUBLISHED")

        assert not job_service.mark_failed(session, job.id, "boom", 1)
        assert job.status == "PUBLISHED"

    def test_known_source_ids(self, session):
        make_job(session, source_video_id="seen")

        assert job_service.known_source_ids(session, ["seen", "new"]) == {"seen"}
        assert job_service.known_source_ids(session, []) == set()
