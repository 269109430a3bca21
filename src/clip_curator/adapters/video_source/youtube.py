"""YouTube Data API search and yt-dlp download."""

import asyncio
import shutil
from pathlib import Path
from typing import Any

import httpx

from clip_curator.adapters.video_source.base import VideoSourceProvider
from clip_curator.config import settings
from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import VideoCandidate
from clip_curator.errors import ProviderError, TransientProviderError
from clip_curator.logging import get_logger

logger = get_logger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"


def _raise_for_youtube_error(response: httpx.Response) -> None:
    if response.status_code == 403:
        try:
            errors = response.json().get("error", {}).get("errors", [])
        except ValueError:
            errors = []
        reasons = {e["reason"] for e in errors if isinstance(e, dict) and e.get("reason")}
        if reasons & {"quotaExceeded", "rateLimitExceeded", "userRateLimitExceeded"}:
            raise TransientProviderError(f"YouTube quota exhausted: {', '.join(sorted(reasons))}")
    response.raise_for_status()


class YouTubeSource(VideoSourceProvider):
    """Searches Creative Commons videos only."""

    def __init__(
        self,
        api_key: str | None = None,
        yt_dlp_path: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.youtube_api_key
        self.yt_dlp_path = yt_dlp_path or settings.yt_dlp_path
        self.timeout = timeout or settings.provider_timeout_seconds

        if not self.api_key:
            logger.warning("youtube_api_key_missing")

    @property
    def name(self) -> str:
        return "youtube"

    async def search(
        self,
        query: str,
        language: ContentLanguage,
        max_results: int = 5,
    ) -> list[VideoCandidate]:
        if not self.api_key:
            raise ProviderError("YouTube API key not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                YOUTUBE_SEARCH_URL,
                params={
                    "part": "snippet",
                    "q": query,
                    "type": "video",
                    "videoLicense": "creativeCommon",
                    "videoDuration": "medium",
                    "relevanceLanguage": language.value,
                    "maxResults": max_results,
                    "key": self.api_key,
                },
            )
            _raise_for_youtube_error(response)
            ids = [
                item["id"]["videoId"]
                for item in response.json().get("items", [])
                if item.get("id", {}).get("videoId")
            ]
            if not ids:
                return []

            response = await client.get(
                YOUTUBE_VIDEOS_URL,
                params={
                    "part": "snippet,contentDetails,statistics,status",
                    "id": ",".join(ids),
                    "key": self.api_key,
                },
            )
            _raise_for_youtube_error(response)
            items: list[dict[str, Any]] = response.json().get("items", [])

        candidates = []
        for item in items:
            # Search filter is advisory; re-check the license on the video itself
            if item.get("status", {}).get("license") != "creativeCommon":
                continue
            snippet = item.get("snippet", {})
            stats = item.get("statistics", {})
            candidates.append(
                VideoCandidate(
                    video_id=item["id"],
                    title=snippet.get("title", ""),
                    description=snippet.get("description", ""),
                    channel_id=snippet.get("channelId"),
                    channel_title=snippet.get("channelTitle"),
                    published_at=snippet.get("publishedAt"),
                    duration=item.get("contentDetails", {}).get("duration"),
                    thumbnail_url=snippet.get("thumbnails", {}).get("high", {}).get("url"),
                    view_count=int(stats["viewCount"]) if "viewCount" in stats else None,
                    like_count=int(stats["likeCount"]) if "likeCount" in stats else None,
                    language=language,
                )
            )

        logger.info("youtube_search_completed", query=query, language=language.value, results=len(candidates))
        return candidates

    async def download(self, video_id: str, dest_dir: Path) -> Path:
        dest_dir.mkdir(parents=True, exist_ok=True)
        output = dest_dir / f"{video_id}.mp4"
        cmd = [
            self.yt_dlp_path,
            "-f", "bv*[height<=1080][ext=mp4]+ba[ext=m4a]/b[height<=1080]",
            "--merge-output-format", "mp4",
            "--no-playlist",
            "-o", str(output),
            f"https://www.youtube.com/watch?v={video_id}",
        ]
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=settings.ffmpeg_timeout)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise
        if proc.returncode != 0 or not output.exists():
            message = stderr.decode(errors="replace")[-500:]
            # yt-dlp reports throttling and network resets as plain errors
            if "HTTP Error 429" in message or "timed out" in message:
                raise TransientProviderError(f"yt-dlp throttled: {message}")
            raise ProviderError(f"yt-dlp failed for {video_id}: {message}")

        logger.info("youtube_download_completed", video_id=video_id, bytes=output.stat().st_size)
        return output

    async def health_check(self) -> bool:
        return bool(self.api_key) and shutil.which(self.yt_dlp_path) is not None
