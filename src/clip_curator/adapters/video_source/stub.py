"""Stub video source for tests."""

from pathlib import Path

from clip_curator.adapters.video_source.base import VideoSourceProvider
from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import VideoCandidate


class StubVideoSource(VideoSourceProvider):
    """Returns synthetic candidates derived from the query and writes placeholder files."""

    def __init__(self, results_per_query: int = 2) -> None:
        self.results_per_query = results_per_query
        self.searches: list[tuple[str, ContentLanguage]] = []
        self.downloads: list[str] = []

    @property
    def name(self) -> str:
        return "stub"

    async def search(
        self,
        query: str,
        language: ContentLanguage,
        max_results: int = 5,
    ) -> list[VideoCandidate]:
        self.searches.append((query, language))
        slug = "-".join(query.lower().split())[:20]
        return [
            VideoCandidate(
                video_id=f"{slug}-{language.value}-{i}",
                title=f"{query} #{i + 1}",
                description=f"Creative Commons lecture about {query}",
                channel_id="UCstub",
                channel_title="Stub Channel",
                duration="PT12M",
                view_count=10_000 * (i + 1),
                language=language,
            )
            for i in range(min(self.results_per_query, max_results))
        ]

    async def download(self, video_id: str, dest_dir: Path) -> Path:
        self.downloads.append(video_id)
        dest_dir.mkdir(parents=True, exist_ok=True)
        path = dest_dir / f"{video_id}.mp4"
        path.write_bytes(b"stub video " + video_id.encode())
        return path
