"""Fault-tolerant chunked step runner.

A step repeatedly reads a chunk of jobs waiting in its source statuses and
processes them with bounded parallelism. Each job goes through three phases:

1. read: a short session takes a detached snapshot of the job
2. run: provider and storage calls, no session held
3. write: a fresh session re-checks the job is still waiting in this stage
   and applies the result

Transient errors (quota, network, timeouts) are retried with exponential
backoff. A job that exhausts its retries, or fails for any other reason, is
marked FAILED and counted as skipped. Once the skips in one invocation exceed
the step's limit the invocation aborts with ``SkipLimitExceededError``; job
rows keep their last committed state for the next run.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from clip_curator.config import settings
from clip_curator.db.models import ContentJobModel
from clip_curator.db.session import SessionFactory, get_session_context
from clip_curator.domain.enums import JobStatus
from clip_curator.errors import SkipLimitExceededError, is_transient
from clip_curator.logging import get_logger, step_context
from clip_curator.services.jobs import jobs_for_stage, mark_failed
from clip_curator.utils.async_utils import gather_bounded, with_timeout

logger = get_logger(__name__)

COMPLETED = "completed"
SKIPPED = "skipped"
STALE = "stale"


@dataclass(frozen=True)
class JobSnapshot:
    """Detached copy of the job fields stages read outside a session."""

    id: UUID
    status: JobStatus
    source_video_id: str
    source_title: str
    source_channel_title: str | None
    language: str
    raw_video_key: str | None
    audio_key: str | None
    source_duration_ms: int | None
    transcript: str | None
    transcript_segments: list[dict[str, Any]] | None
    edit_plan: dict[str, Any] | None
    generated_title: str | None = None

    @classmethod
    def of(cls, job: ContentJobModel) -> "JobSnapshot":
        return cls(
            id=job.id,
            status=JobStatus(job.status),
            source_video_id=job.source_video_id,
            source_title=job.source_title,
            source_channel_title=job.source_channel_title or job.source_channel_id,
            language=job.language,
            raw_video_key=job.raw_video_key,
            audio_key=job.audio_key,
            source_duration_ms=job.source_duration_ms,
            transcript=job.transcript,
            transcript_segments=list(job.transcript_segments or []),
            edit_plan=dict(job.edit_plan) if job.edit_plan else None,
            generated_title=job.generated_title,
        )


class Stage(ABC):
    """One pipeline stage as seen by :class:`ChunkStep`."""

    name: str
    source_statuses: tuple[JobStatus, ...]

    @property
    def skip_limit(self) -> int:
        return settings.step_skip_limit

    @property
    def timeout_seconds(self) -> float | None:
        """Upper bound for :meth:`run` on one job; a timeout is retried."""
        return settings.provider_timeout_seconds

    @abstractmethod
    async def run(self, job: JobSnapshot) -> Any:
        """Do the stage's external work. Must not touch the database."""
        ...

    @abstractmethod
    def apply(self, session: Session, job: ContentJobModel, result: Any) -> None:
        """Record the result on the job and move it along the state machine."""
        ...


@dataclass
class ItemResult:
    job_id: UUID
    outcome: str
    attempts: int = 1
    error: str | None = None


@dataclass
class StepReport:
    step: str
    chunks: int = 0
    results: list[ItemResult] = field(default_factory=list)

    def count(self, outcome: str) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def skipped(self) -> int:
        return self.count(SKIPPED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "chunks": self.chunks,
            "processed": len(self.results),
            "completed": self.count(COMPLETED),
            "skipped": self.skipped,
            "stale": self.count(STALE),
            "failures": [
                {"job_id": str(r.job_id), "attempts": r.attempts, "error": r.error}
                for r in self.results
                if r.outcome == SKIPPED
            ],
        }


class ChunkStep:
    """Runs a :class:`Stage` over waiting jobs, chunk by chunk."""

    def __init__(
        self,
        stage: Stage,
        session_factory: SessionFactory = get_session_context,
        chunk_size: int | None = None,
        concurrency: int | None = None,
        retry_limit: int | None = None,
        backoff_seconds: float | None = None,
        backoff_max_seconds: float | None = None,
        skip_limit: int | None = None,
        max_chunks: int | None = None,
    ) -> None:
        self.stage = stage
        self.session_factory = session_factory
        self.chunk_size = chunk_size or settings.chunk_size
        self.concurrency = concurrency or settings.chunk_concurrency
        self.retry_limit = max(1, retry_limit or settings.step_retry_limit)
        self.backoff_seconds = settings.step_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.backoff_max_seconds = (
            settings.step_backoff_max_seconds if backoff_max_seconds is None else backoff_max_seconds
        )
        self.skip_limit = stage.skip_limit if skip_limit is None else skip_limit
        self.max_chunks = max_chunks

    def _read_chunk(self, seen: set[UUID]) -> list[UUID]:
        # Failing to read aborts the invocation; nothing has been changed yet
        with self.session_factory() as session:
            ids = jobs_for_stage(session, self.stage.source_statuses, self.chunk_size + len(seen))
        return [job_id for job_id in ids if job_id not in seen][: self.chunk_size]

    async def run(self) -> StepReport:
        with step_context(self.stage.name):
            return await self._run()

    async def _run(self) -> StepReport:
        report = StepReport(step=self.stage.name)
        seen: set[UUID] = set()

        while self.max_chunks is None or report.chunks < self.max_chunks:
            chunk = self._read_chunk(seen)
            if not chunk:
                break
            seen.update(chunk)
            report.chunks += 1

            results = await gather_bounded((self._process(job_id) for job_id in chunk), self.concurrency)
            report.results.extend(results)

            if report.skipped > self.skip_limit:
                logger.error(
                    "step_skip_limit_exceeded",
                    skipped=report.skipped,
                    limit=self.skip_limit,
                )
                raise SkipLimitExceededError(self.stage.name, report.skipped, self.skip_limit)

        logger.info("step_completed", **{k: v for k, v in report.to_dict().items() if k != "failures"})
        return report

    async def _process(self, job_id: UUID) -> ItemResult:
        attempts = 0
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception(is_transient),
                stop=stop_after_attempt(self.retry_limit),
                wait=wait_exponential(multiplier=self.backoff_seconds, max=self.backoff_max_seconds),
                reraise=True,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    if attempts > 1:
                        logger.warning("stage_item_retrying", job_id=str(job_id), attempt=attempts)
                    outcome = await self._attempt(job_id)
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.error(
                "stage_item_failed",
                job_id=str(job_id),
                attempts=attempts,
                transient=is_transient(e),
                error=error,
            )
            self._mark_failed(job_id, error, attempts)
            return ItemResult(job_id=job_id, outcome=SKIPPED, attempts=attempts, error=error)

        return ItemResult(job_id=job_id, outcome=outcome, attempts=attempts)

    async def _attempt(self, job_id: UUID) -> str:
        with self.session_factory() as session:
            job = session.get(ContentJobModel, job_id)
            if not self._still_waiting(job):
                return STALE
            snapshot = JobSnapshot.of(job)

        result = await with_timeout(self.stage.run(snapshot), self.stage.timeout_seconds)

        with self.session_factory() as session:
            job = session.get(ContentJobModel, job_id)
            if not self._still_waiting(job) or job.status != snapshot.status.value:
                # Someone else moved the job while the stage ran
                logger.warning("stage_item_stale", job_id=str(job_id))
                return STALE
            self.stage.apply(session, job, result)

        logger.info("stage_item_completed", job_id=str(job_id))
        return COMPLETED

    def _still_waiting(self, job: ContentJobModel | None) -> bool:
        return (
            job is not None
            and job.deleted_at is None
            and job.status in {s.value for s in self.stage.source_statuses}
        )

    def _mark_failed(self, job_id: UUID, error: str, attempts: int) -> None:
        try:
            with self.session_factory() as session:
                mark_failed(session, job_id, error, attempts)
        except Exception as e:
            # Left in its stage; the next run picks it up again
            logger.error("stage_item_mark_failed_error", job_id=str(job_id), error=str(e))
