"""Celery tasks for the content pipeline.

Each stage task runs one :class:`ChunkStep` invocation. The async runners
below are also used directly by the CLI and the API.
"""

from typing import Any
from uuid import UUID

from clip_curator.adapters.storage import get_storage_provider
from clip_curator.db.session import SessionFactory, get_session_context
from clip_curator.errors import ClipCuratorError, PublishError, SkipLimitExceededError
from clip_curator.jobs.chunk import ChunkStep
from clip_curator.jobs.stages import STAGE_ORDER, Providers, build_stage
from clip_curator.logging import get_logger
from clip_curator.services.discovery import run_discovery
from clip_curator.services.publish import publish_job
from clip_curator.utils.async_utils import run_async
from clip_curator.worker import celery_app

logger = get_logger(__name__)


async def run_stage(
    name: str,
    providers: Providers | None = None,
    session_factory: SessionFactory = get_session_context,
    **step_options: Any,
) -> dict[str, Any]:
    """Run one invocation of the named stage's chunk step."""
    providers = providers or Providers.from_settings()
    step = ChunkStep(build_stage(name, providers), session_factory=session_factory, **step_options)
    report = await step.run()
    return report.to_dict()


async def run_all_stages(
    providers: Providers | None = None,
    session_factory: SessionFactory = get_session_context,
    **step_options: Any,
) -> dict[str, Any]:
    """Run every stage once, in pipeline order.

    A stage that aborts on its skip limit is reported and the next stage
    still runs.
    """
    providers = providers or Providers.from_settings()
    results: dict[str, Any] = {}
    for name in STAGE_ORDER:
        try:
            results[name] = await run_stage(name, providers, session_factory, **step_options)
        except SkipLimitExceededError as e:
            logger.error("pipeline_stage_aborted", stage=name, error=str(e))
            results[name] = {"step": name, "aborted": True, "error": str(e)}
    return results


def _stage_task(name: str) -> dict[str, Any]:
    logger.info("stage_task_started", stage=name)
    try:
        result = run_async(run_stage(name))
    except SkipLimitExceededError as e:
        # The invocation ends; rows keep their committed state for the next beat
        return {"success": False, "step": name, "error": str(e)}
    return {"success": True, **result}


@celery_app.task(bind=True, name="pipeline.discover")
def discover_task(self: Any, max_new_jobs: int | None = None) -> dict[str, Any]:  # noqa: ARG001
    """Search, evaluate and create new PENDING jobs."""
    providers = Providers.from_settings()
    result = run_async(run_discovery(providers.llm, providers.source, max_new_jobs=max_new_jobs))
    return {"success": True, **result.to_dict()}


@celery_app.task(bind=True, name="pipeline.download")
def download_task(self: Any) -> dict[str, Any]:  # noqa: ARG001
    return _stage_task("download")


@celery_app.task(bind=True, name="pipeline.transcribe")
def transcribe_task(self: Any) -> dict[str, Any]:  # noqa: ARG001
    return _stage_task("transcribe")


@celery_app.task(bind=True, name="pipeline.analyze")
def analyze_task(self: Any) -> dict[str, Any]:  # noqa: ARG001
    return _stage_task("analyze")


@celery_app.task(bind=True, name="pipeline.edit")
def edit_task(self: Any) -> dict[str, Any]:  # noqa: ARG001
    return _stage_task("edit")


@celery_app.task(bind=True, name="pipeline.review")
def review_task(self: Any) -> dict[str, Any]:  # noqa: ARG001
    return _stage_task("review")


@celery_app.task(bind=True, name="pipeline.run_all")
def run_all_task(self: Any) -> dict[str, Any]:  # noqa: ARG001
    """Run every stage once in order."""
    return {"success": True, "stages": run_async(run_all_stages())}


@celery_app.task(
    bind=True,
    name="pipeline.publish",
    max_retries=3,
    default_retry_delay=30,
    retry_backoff=True,
    retry_backoff_max=300,
)
def publish_task(self: Any, job_id: str) -> dict[str, Any]:
    """Publish (or re-publish after a failure) an APPROVED job."""
    try:
        with get_session_context() as session:
            content_id = publish_job(session, UUID(job_id), get_storage_provider())
    except PublishError as e:
        raise self.retry(exc=e) from e
    except ClipCuratorError as e:
        logger.error("publish_task_failed", job_id=job_id, error=str(e))
        return {"success": False, "job_id": job_id, "error": str(e)}
    return {"success": True, "job_id": job_id, "content_id": str(content_id)}


STAGE_TASKS = {
    "download": download_task,
    "transcribe": transcribe_task,
    "analyze": analyze_task,
    "edit": edit_task,
    "review": review_task,
    "all": run_all_task,
}
