"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clip_curator import __version__
from clip_curator.api.errors import register_error_handlers
from clip_curator.api.routes import health, jobs, media, review
from clip_curator.config import settings
from clip_curator.logging import get_logger, setup_logging

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("application_starting", version=__version__)

    # Startup: verify database connection
    try:
        from clip_curator.db.session import init_db

        init_db()
        logger.info("database_connected")
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))
        # Health checks report the issue

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="Clip Curator",
    description="Curates openly licensed videos into reviewed short-form clips",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register routers
app.include_router(health.router)
app.include_router(media.router)
app.include_router(jobs.router, prefix="/api/v1")
app.include_router(review.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    return {
        "name": "Clip Curator",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clip_curator.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
