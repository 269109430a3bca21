"""Base interface for external video sources."""

import re
from abc import ABC, abstractmethod
from pathlib import Path

from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import VideoCandidate

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def parse_iso_duration_ms(value: str | None) -> int | None:
    """``PT1H2M3S`` -> milliseconds; ``None`` for anything unparseable."""
    if not value:
        return None
    match = _ISO_DURATION.match(value.strip())
    if not match:
        return None
    parts = {k: float(v) if v else 0.0 for k, v in match.groupdict().items()}
    seconds = parts["days"] * 86400 + parts["hours"] * 3600 + parts["minutes"] * 60 + parts["seconds"]
    return int(seconds * 1000)


class VideoSourceProvider(ABC):
    """Searches for openly licensed videos and downloads them."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def search(
        self,
        query: str,
        language: ContentLanguage,
        max_results: int = 5,
    ) -> list[VideoCandidate]:
        """Return CC-licensed candidates for ``query``."""
        ...

    @abstractmethod
    async def download(self, video_id: str, dest_dir: Path) -> Path:
        """Download the source video into ``dest_dir`` and return the file path."""
        ...

    async def health_check(self) -> bool:
        return True
