"""Map application errors to HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from clip_curator.errors import (
    InvalidTransitionError,
    JobNotFoundError,
    PendingContentNotFoundError,
    PublishError,
)
from clip_curator.logging import get_logger

logger = get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(JobNotFoundError)
    @app.exception_handler(PendingContentNotFoundError)
    async def not_found(_request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(InvalidTransitionError)
    async def conflict(_request: Request, exc: InvalidTransitionError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "current": str(exc.current),
                "requested": str(exc.requested),
            },
        )

    @app.exception_handler(PublishError)
    async def publish_failed(_request: Request, exc: PublishError) -> JSONResponse:
        logger.error("publish_request_failed", error=str(exc))
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def bad_request(_request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})
