"""Tests for the content job state machine."""

import pytest

from clip_curator.domain.enums import JobEvent, JobStatus
from clip_curator.domain.state_machine import (
    TRANSITIONS,
    allowed_events,
    apply_event,
    can_transition,
    event_for,
    transition,
)
from clip_curator.errors import InvalidTransitionError


class _Job:
    def __init__(self, status: str) -> None:
        self.status = status


class TestApplyEvent:
    """Tests for the transition table."""

    @pytest.mark.parametrize(
        ("current", "event", "expected"),
        [
            (JobStatus.PENDING, JobEvent.DOWNLOADED, JobStatus.CRAWLED),
            (JobStatus.CRAWLED, JobEvent.TRANSCRIBED, JobStatus.TRANSCRIBED),
            (JobStatus.TRANSCRIBED, JobEvent.ANALYZED, JobStatus.ANALYZED),
            (JobStatus.ANALYZED, JobEvent.EDITED, JobStatus.EDITED),
            (JobStatus.NEEDS_EDIT, JobEvent.EDITED, JobStatus.EDITED),
            (JobStatus.EDITED, JobEvent.QUEUED_FOR_REVIEW, JobStatus.PENDING_APPROVAL),
            (JobStatus.EDITED, JobEvent.AUTO_REJECTED, JobStatus.REJECTED),
            (JobStatus.PENDING_APPROVAL, JobEvent.APPROVED, JobStatus.APPROVED),
            (JobStatus.PENDING_APPROVAL, JobEvent.REJECTED, JobStatus.REJECTED),
            (JobStatus.PENDING_APPROVAL, JobEvent.EDIT_REQUESTED, JobStatus.NEEDS_EDIT),
            (JobStatus.APPROVED, JobEvent.PUBLISHED, JobStatus.PUBLISHED),
        ],
    )
    def test_legal_edges(self, current, event, expected):
        assert apply_event(current, event) == expected

    def test_accepts_plain_strings(self):
        assert apply_event("PENDING", JobEvent.DOWNLOADED) == JobStatus.CRAWLED

    def test_every_non_terminal_status_can_fail(self):
        for status in JobStatus:
            if status.is_terminal:
                with pytest.raises(InvalidTransitionError):
                    apply_event(status, JobEvent.FAILED)
            else:
                assert apply_event(status, JobEvent.FAILED) == JobStatus.FAILED

    def test_cannot_skip_stages(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            apply_event(JobStatus.PENDING, JobEvent.ANALYZED)

        assert exc_info.value.current == JobStatus.PENDING
        assert exc_info.value.requested == JobEvent.ANALYZED

    def test_publish_requires_approval(self):
        with pytest.raises(InvalidTransitionError):
            apply_event(JobStatus.PENDING_APPROVAL, JobEvent.PUBLISHED)

    def test_terminal_statuses_have_no_exits(self):
        for status in (JobStatus.PUBLISHED, JobStatus.REJECTED, JobStatus.FAILED):
            assert allowed_events(status) == []

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValueError):
            apply_event("ARCHIVED", JobEvent.FAILED)


class TestHelpers:
    """Tests for the lookup helpers."""

    def test_can_transition(self):
        assert can_transition(JobStatus.EDITED, JobStatus.REJECTED)
        assert can_transition("NEEDS_EDIT", "EDITED")
        assert not can_transition(JobStatus.REJECTED, JobStatus.PENDING)
        assert not can_transition(JobStatus.APPROVED, JobStatus.REJECTED)

    def test_event_for(self):
        assert event_for(JobStatus.PENDING_APPROVAL, JobStatus.NEEDS_EDIT) == JobEvent.EDIT_REQUESTED
        with pytest.raises(InvalidTransitionError):
            event_for(JobStatus.PUBLISHED, JobStatus.APPROVED)

    def test_transition_updates_object(self):
        job = _Job("APPROVED")

        result = transition(job, JobEvent.PUBLISHED)

        assert result == JobStatus.PUBLISHED
        assert job.status == "PUBLISHED"

    def test_failed_transition_leaves_object_untouched(self):
        job = _Job("PENDING")

        with pytest.raises(InvalidTransitionError):
            transition(job, JobEvent.APPROVED)

        assert job.status == "PENDING"

    def test_allowed_events_for_review(self):
        events = set(allowed_events(JobStatus.PENDING_APPROVAL))
        assert events == {
            JobEvent.APPROVED,
            JobEvent.REJECTED,
            JobEvent.EDIT_REQUESTED,
            JobEvent.FAILED,
        }

    def test_table_targets_are_statuses(self):
        assert all(isinstance(target, JobStatus) for target in TRANSITIONS.values())
