"""API route modules."""

from clip_curator.api.routes import health, jobs, media, review

__all__ = ["health", "jobs", "media", "review"]
