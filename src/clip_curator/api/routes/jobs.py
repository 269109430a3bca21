"""Content job endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

from celery.result import AsyncResult
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from clip_curator.api.deps import ReviewerDep, SessionDep
from clip_curator.domain.enums import JobStatus
from clip_curator.domain.state_machine import allowed_events
from clip_curator.jobs.pipeline import STAGE_TASKS, discover_task, publish_task
from clip_curator.logging import get_logger
from clip_curator.services import jobs as job_service
from clip_curator.worker import celery_app

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = get_logger(__name__)


class TaskResponse(BaseModel):
    """Response when a task is enqueued."""

    task_id: str
    status: str
    message: str


class TaskStatusResponse(BaseModel):
    task_id: str
    status: str
    result: dict[str, Any] | None = None
    error: str | None = None


class DiscoverRequest(BaseModel):
    max_new_jobs: int | None = Field(None, ge=1, le=100)


class JobSummary(BaseModel):
    id: UUID
    source_video_id: str
    source_title: str
    language: str
    status: str
    evaluation_score: int | None
    recommendation: str | None
    quality_score: int | None
    generated_title: str | None
    error_message: str | None
    created_at: datetime
    updated_at: datetime | None


class JobListResponse(BaseModel):
    items: list[JobSummary]
    total: int
    limit: int
    offset: int


class JobDetailResponse(JobSummary):
    source_url: str
    source_channel_title: str | None
    search_query: str | None
    duration_ms: int | None
    transcript_confidence: float | None
    edit_plan: dict[str, Any] | None
    quality_breakdown: dict[str, int] | None
    review_priority: str | None
    llm_provider: str | None
    stt_provider: str | None
    retry_count: int
    reviewed_by: str | None
    rejection_reason: str | None
    published_content_id: UUID | None
    allowed_events: list[str]


def _summary(job: Any) -> JobSummary:
    return JobSummary(
        id=job.id,
        source_video_id=job.source_video_id,
        source_title=job.source_title,
        language=job.language,
        status=job.status,
        evaluation_score=job.evaluation_score,
        recommendation=job.recommendation,
        quality_score=job.quality_score,
        generated_title=job.generated_title,
        error_message=job.error_message,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


@router.get("", response_model=JobListResponse, summary="List jobs")
async def list_jobs(
    session: SessionDep,
    status_filter: JobStatus | None = Query(None, alias="status", description="Filter by status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> JobListResponse:
    jobs, total = job_service.list_jobs(session, status=status_filter, limit=limit, offset=offset)
    return JobListResponse(items=[_summary(j) for j in jobs], total=total, limit=limit, offset=offset)


@router.get("/stats", summary="Job counts by status")
async def job_stats(session: SessionDep) -> dict[str, int]:
    counts = job_service.count_by_status(session)
    return {s.value: counts.get(s.value, 0) for s in JobStatus}


@router.post(
    "/discover",
    response_model=TaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Run discovery",
    description="Enqueue a search, evaluate and job creation run.",
)
async def trigger_discovery(request: DiscoverRequest | None = None) -> TaskResponse:
    max_new_jobs = request.max_new_jobs if request else None
    task = discover_task.delay(max_new_jobs=max_new_jobs)
    logger.info("discovery_triggered", task_id=task.id, max_new_jobs=max_new_jobs)
    return TaskResponse(task_id=task.id, status="queued", message="Discovery enqueued")


@router.post(
    "/stages/{stage}",
    response_model=TaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Run a pipeline stage",
)
async def trigger_stage(stage: str) -> TaskResponse:
    task_fn = STAGE_TASKS.get(stage)
    if task_fn is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown stage '{stage}'. Options: {', '.join(STAGE_TASKS)}",
        )
    task = task_fn.delay()
    logger.info("stage_triggered", stage=stage, task_id=task.id)
    return TaskResponse(task_id=task.id, status="queued", message=f"Stage '{stage}' enqueued")


@router.get("/tasks/{task_id}", response_model=TaskStatusResponse, summary="Task status")
async def task_status(task_id: str) -> TaskStatusResponse:
    result = AsyncResult(task_id, app=celery_app)
    response = TaskStatusResponse(task_id=task_id, status=result.state)
    if result.state == "SUCCESS":
        response.result = result.result if isinstance(result.result, dict) else {"value": result.result}
    elif result.state == "FAILURE":
        response.error = str(result.result)
    return response


@router.get("/{job_id}", response_model=JobDetailResponse, summary="Job detail")
async def get_job(job_id: UUID, session: SessionDep) -> JobDetailResponse:
    job = job_service.get_job(session, job_id)
    return JobDetailResponse(
        **_summary(job).model_dump(),
        source_url=job.source_url,
        source_channel_title=job.source_channel_title,
        search_query=job.search_query,
        duration_ms=job.duration_ms,
        transcript_confidence=job.transcript_confidence,
        edit_plan=job.edit_plan,
        quality_breakdown=job.quality_breakdown,
        review_priority=job.review_priority,
        llm_provider=job.llm_provider,
        stt_provider=job.stt_provider,
        retry_count=job.retry_count,
        reviewed_by=job.reviewed_by,
        rejection_reason=job.rejection_reason,
        published_content_id=job.published_content_id,
        allowed_events=[e.value for e in allowed_events(job.status)],
    )


@router.post(
    "/{job_id}/publish",
    response_model=TaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Enqueue publish",
    description="Publish an APPROVED job in the background, retrying on failure.",
)
async def trigger_publish(job_id: UUID, session: SessionDep) -> TaskResponse:
    job = job_service.get_job(session, job_id)
    if job.status != JobStatus.APPROVED.value:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Job is {job.status}; only APPROVED jobs can be published",
        )
    task = publish_task.delay(str(job_id))
    return TaskResponse(task_id=task.id, status="queued", message="Publish enqueued")


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Soft-delete a job")
async def delete_job(job_id: UUID, session: SessionDep, actor: ReviewerDep) -> None:
    job_service.soft_delete_job(session, job_id, deleted_by=actor)
    session.commit()
