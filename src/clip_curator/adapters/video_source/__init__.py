"""External video source adapters."""

from clip_curator.adapters.video_source.base import VideoSourceProvider, parse_iso_duration_ms
from clip_curator.adapters.video_source.stub import StubVideoSource
from clip_curator.adapters.video_source.youtube import YouTubeSource
from clip_curator.config import settings


def get_video_source(name: str | None = None) -> VideoSourceProvider:
    """Build the video source named by ``name`` or ``settings.video_source_provider``."""
    provider_name = (name or settings.video_source_provider).lower()
    if provider_name == "youtube":
        return YouTubeSource()
    if provider_name == "stub":
        return StubVideoSource()
    raise ValueError(f"Unknown video source '{provider_name}'. Options: youtube, stub")


__all__ = [
    "StubVideoSource",
    "VideoSourceProvider",
    "YouTubeSource",
    "get_video_source",
    "parse_iso_duration_ms",
]
