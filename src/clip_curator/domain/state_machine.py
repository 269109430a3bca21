"""Content job state machine.

Every status change goes through :func:`apply_event`. The table below is the
complete set of legal edges; anything else raises
:class:`~clip_curator.errors.InvalidTransitionError`.
"""

from typing import Protocol

from clip_curator.domain.enums import JobEvent, JobStatus
from clip_curator.errors import InvalidTransitionError

S = JobStatus
E = JobEvent

TRANSITIONS: dict[tuple[JobStatus, JobEvent], JobStatus] = {
    (S.PENDING, E.DOWNLOADED): S.CRAWLED,
    (S.CRAWLED, E.TRANSCRIBED): S.TRANSCRIBED,
    (S.TRANSCRIBED, E.ANALYZED): S.ANALYZED,
    (S.ANALYZED, E.EDITED): S.EDITED,
    (S.NEEDS_EDIT, E.EDITED): S.EDITED,
    (S.EDITED, E.QUEUED_FOR_REVIEW): S.PENDING_APPROVAL,
    # Scores under the approval threshold never reach a reviewer
    (S.EDITED, E.AUTO_REJECTED): S.REJECTED,
    (S.PENDING_APPROVAL, E.APPROVED): S.APPROVED,
    (S.PENDING_APPROVAL, E.REJECTED): S.REJECTED,
    (S.PENDING_APPROVAL, E.EDIT_REQUESTED): S.NEEDS_EDIT,
    (S.APPROVED, E.PUBLISHED): S.PUBLISHED,
}

TRANSITIONS.update(
    {(status, E.FAILED): S.FAILED for status in JobStatus if not status.is_terminal}
)

del S, E


class HasStatus(Protocol):
    status: str


def apply_event(current: JobStatus | str, event: JobEvent) -> JobStatus:
    """Return the status reached by applying ``event`` in ``current``."""
    status = JobStatus(current)
    try:
        return TRANSITIONS[(status, event)]
    except KeyError:
        raise InvalidTransitionError(status, event) from None


def can_transition(source: JobStatus | str, target: JobStatus | str) -> bool:
    """Whether some event moves ``source`` directly to ``target``."""
    source, target = JobStatus(source), JobStatus(target)
    return any(src == source and dst == target for (src, _), dst in TRANSITIONS.items())


def event_for(source: JobStatus | str, target: JobStatus | str) -> JobEvent:
    """Find the event for a ``source -> target`` edge."""
    source, target = JobStatus(source), JobStatus(target)
    for (src, event), dst in TRANSITIONS.items():
        if src == source and dst == target:
            return event
    raise InvalidTransitionError(source, target)


def transition(job: HasStatus, event: JobEvent) -> JobStatus:
    """Validate and apply ``event`` to an object with a ``status`` attribute."""
    new_status = apply_event(job.status, event)
    job.status = new_status.value
    return new_status


def allowed_events(current: JobStatus | str) -> list[JobEvent]:
    status = JobStatus(current)
    return [event for (src, event) in TRANSITIONS if src == status]
