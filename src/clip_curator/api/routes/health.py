"""Health check endpoints."""

import asyncio

from fastapi import APIRouter, status
from pydantic import BaseModel

from clip_curator import __version__
from clip_curator.api.deps import StorageDep
from clip_curator.config import settings
from clip_curator.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)

TEST_DOUBLES = {"mock", "stub"}


class HealthResponse(BaseModel):
    status: str
    version: str
    # True where a real provider is configured, False for mocks and stubs
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    ready: bool
    database: bool
    redis: bool
    storage: bool


def configured_providers() -> dict[str, str]:
    return {
        "llm": settings.llm_provider,
        "stt": settings.stt_provider,
        "storage": settings.storage_provider,
        "media": settings.media_provider,
        "video_source": settings.video_source_provider,
    }


def _check_database() -> bool:
    from clip_curator.db.session import init_db

    init_db()
    return True


def _check_redis() -> bool:
    import redis

    return bool(redis.from_url(settings.redis_url, socket_timeout=2).ping())


async def _probe(name: str, check) -> bool:
    """Run a blocking check off the event loop; any exception means not ready."""
    try:
        return await asyncio.to_thread(check)
    except Exception as e:
        logger.error("readiness_probe_failed", component=name, error=str(e))
        return False


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Reports the API version and which providers are real.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        components={k: v not in TEST_DOUBLES for k, v in configured_providers().items()},
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Verifies the database, Redis and object storage are reachable.",
)
async def readiness_check(storage: StorageDep) -> ReadinessResponse:
    database_ok, redis_ok = await asyncio.gather(
        _probe("database", _check_database),
        _probe("redis", _check_redis),
    )
    try:
        storage_ok = await storage.health_check()
    except Exception as e:
        logger.error("readiness_probe_failed", component="storage", error=str(e))
        storage_ok = False

    return ReadinessResponse(
        ready=database_ok and redis_ok and storage_ok,
        database=database_ok,
        redis=redis_ok,
        storage=storage_ok,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple liveness probe for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
