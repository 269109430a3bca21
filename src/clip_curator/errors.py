"""Exception types shared across the pipeline."""

from typing import Any

import httpx

RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


class ClipCuratorError(Exception):
    """Base class for application errors."""

    pass


class InvalidTransitionError(ClipCuratorError):
    """Raised when a job status change is not an edge of the state machine."""

    def __init__(self, current: Any, requested: Any) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Illegal job transition: {current} -> {requested}")


class ProviderError(ClipCuratorError):
    """A provider call failed and retrying will not help."""

    pass


class TransientProviderError(ProviderError):
    """A provider call failed in a way that may succeed on retry (quota, network)."""

    pass


class StageInputError(ClipCuratorError):
    """A job is missing an artifact its stage needs."""

    pass


class SkipLimitExceededError(ClipCuratorError):
    """Raised when a step skips more jobs than it is allowed to in one run."""

    def __init__(self, step: str, skipped: int, limit: int) -> None:
        self.step = step
        self.skipped = skipped
        self.limit = limit
        super().__init__(f"Step '{step}' skipped {skipped} jobs (limit {limit})")


class JobNotFoundError(ClipCuratorError):
    """Raised when a job does not exist or was soft-deleted."""

    pass


class PendingContentNotFoundError(ClipCuratorError):
    """Raised when a review queue entry does not exist."""

    pass


class PublishError(ClipCuratorError):
    """Raised when the catalog write fails; the job stays APPROVED."""

    pass


def is_transient(exc: BaseException) -> bool:
    """Whether an exception is worth retrying with backoff."""
    if isinstance(exc, TransientProviderError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, (httpx.TransportError, TimeoutError, ConnectionError)):
        return True
    return False
