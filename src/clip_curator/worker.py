"""Celery worker configuration."""

from celery import Celery

from clip_curator.config import settings
from clip_curator.logging import setup_logging

# Setup logging before anything else
setup_logging()

celery_app = Celery(
    "clip_curator",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=3600,  # 1 hour max, a step drains its whole backlog
    task_soft_time_limit=3300,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
    # Result backend
    result_expires=86400,  # 24 hours
    # Task routing
    task_routes={
        "pipeline.discover": {"queue": "discovery"},
        "pipeline.download": {"queue": "media"},
        "pipeline.edit": {"queue": "media"},
        "pipeline.transcribe": {"queue": "ai"},
        "pipeline.analyze": {"queue": "ai"},
        "pipeline.review": {"queue": "default"},
        "pipeline.run_all": {"queue": "default"},
        "pipeline.publish": {"queue": "high"},
    },
    # Beat scheduler
    beat_schedule={
        "discover-hourly": {
            "task": "pipeline.discover",
            "schedule": 3600.0,
            "options": {"queue": "discovery"},
        },
        "download-5m": {
            "task": "pipeline.download",
            "schedule": 300.0,
            "options": {"queue": "media"},
        },
        "transcribe-5m": {
            "task": "pipeline.transcribe",
            "schedule": 300.0,
            "options": {"queue": "ai"},
        },
        "analyze-5m": {
            "task": "pipeline.analyze",
            "schedule": 300.0,
            "options": {"queue": "ai"},
        },
        "edit-5m": {
            "task": "pipeline.edit",
            "schedule": 300.0,
            "options": {"queue": "media"},
        },
        "review-2m": {
            "task": "pipeline.review",
            "schedule": 120.0,
            "options": {"queue": "default"},
        },
    },
)

# Auto-discover tasks
celery_app.autodiscover_tasks(["clip_curator.jobs"])
