"""Media processing adapters."""

from clip_curator.adapters.media.base import MediaError, MediaProcessor
from clip_curator.adapters.media.ffmpeg import FFmpegMediaProcessor
from clip_curator.adapters.media.stub import StubMediaProcessor
from clip_curator.adapters.storage.base import StorageProvider
from clip_curator.config import settings


def get_media_processor(storage: StorageProvider, name: str | None = None) -> MediaProcessor:
    """Build the media processor named by ``name`` or ``settings.media_provider``."""
    provider_name = (name or settings.media_provider).lower()
    if provider_name == "ffmpeg":
        return FFmpegMediaProcessor(storage)
    if provider_name == "stub":
        return StubMediaProcessor()
    raise ValueError(f"Unknown media provider '{provider_name}'. Options: ffmpeg, stub")


__all__ = [
    "FFmpegMediaProcessor",
    "MediaError",
    "MediaProcessor",
    "StubMediaProcessor",
    "get_media_processor",
]
