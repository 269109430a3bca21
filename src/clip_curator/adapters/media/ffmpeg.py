"""FFmpeg-backed media processor."""

import asyncio
import json
import shutil
import tempfile
from pathlib import Path
from uuid import uuid4

from clip_curator.adapters.media.base import MediaError, MediaProcessor
from clip_curator.adapters.storage.base import StorageProvider
from clip_curator.config import settings
from clip_curator.logging import get_logger

logger = get_logger(__name__)


# ASS styles; Alignment 8 is top centre, 2 is bottom centre
TITLE_STYLE = (
    "FontSize=20,PrimaryColour=&HFFFFFF,OutlineColour=&H000000,Outline=2,"
    "BackColour=&H80000000,Bold=1,Alignment=8,MarginV=15"
)
SUBTITLE_STYLE = (
    "FontSize=14,PrimaryColour=&HFFFFFF,OutlineColour=&H000000,Outline=1,"
    "Bold=1,Alignment=2,MarginV=60"
)


def _seconds(ms: int) -> str:
    return f"{ms / 1000:.3f}"


class FFmpegMediaProcessor(MediaProcessor):
    """Runs ffmpeg/ffprobe on local copies of stored objects."""

    def __init__(
        self,
        storage: StorageProvider,
        ffmpeg_path: str | None = None,
        ffprobe_path: str | None = None,
        timeout: int | None = None,
        width: int | None = None,
        height: int | None = None,
        font_name: str | None = None,
    ) -> None:
        self.storage = storage
        self.ffmpeg_path = ffmpeg_path or settings.ffmpeg_path
        self.ffprobe_path = ffprobe_path or settings.ffprobe_path
        self.timeout = timeout or settings.ffmpeg_timeout
        self.width = width or settings.output_width
        self.height = height or settings.output_height
        self.font_name = font_name or settings.overlay_font_name

    @property
    def name(self) -> str:
        return "ffmpeg"

    async def _run(self, cmd: list[str]) -> bytes:
        logger.debug("ffmpeg_command", cmd=" ".join(cmd))
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise
        if proc.returncode != 0:
            raise MediaError(f"{Path(cmd[0]).name} failed: {stderr.decode(errors='replace')[-500:]}")
        return stdout

    async def _fetch(self, key: str, workdir: Path) -> Path:
        return await self.storage.download(key, workdir / f"input{Path(key).suffix or '.mp4'}")

    def _vertical_filter(self) -> str:
        w, h = self.width, self.height
        return (
            f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
            f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,setsar=1"
        )

    async def clip(
        self,
        input_key: str,
        start_ms: int,
        end_ms: int,
        output_key: str | None = None,
    ) -> str:
        if end_ms <= start_ms:
            raise MediaError(f"Empty clip range {start_ms}-{end_ms}")
        output_key = output_key or f"clips/{uuid4().hex}.mp4"
        with tempfile.TemporaryDirectory() as tmp:
            workdir = Path(tmp)
            source = await self._fetch(input_key, workdir)
            output = workdir / "clip.mp4"
            await self._run(
                [
                    self.ffmpeg_path, "-y",
                    "-ss", _seconds(start_ms),
                    "-i", str(source),
                    "-t", _seconds(end_ms - start_ms),
                    "-vf", self._vertical_filter(),
                    "-c:v", "libx264", "-preset", "fast", "-crf", "23",
                    "-c:a", "aac", "-b:a", "128k",
                    "-movflags", "+faststart",
                    str(output),
                ]
            )
            key = await self.storage.upload(output, output_key)
        logger.info("media_clip_created", input_key=input_key, key=key, start_ms=start_ms, end_ms=end_ms)
        return key

    async def thumbnail(self, input_key: str, at_ms: int, output_key: str | None = None) -> str:
        output_key = output_key or f"thumbnails/{uuid4().hex}.jpg"
        with tempfile.TemporaryDirectory() as tmp:
            workdir = Path(tmp)
            source = await self._fetch(input_key, workdir)
            output = workdir / "thumbnail.jpg"
            await self._run(
                [
                    self.ffmpeg_path, "-y",
                    "-ss", _seconds(max(0, at_ms)),
                    "-i", str(source),
                    "-frames:v", "1",
                    "-q:v", "2",
                    str(output),
                ]
            )
            return await self.storage.upload(output, output_key)

    async def extract_audio(self, input_key: str, output_key: str | None = None) -> str:
        output_key = output_key or f"audio/{uuid4().hex}.mp3"
        with tempfile.TemporaryDirectory() as tmp:
            workdir = Path(tmp)
            source = await self._fetch(input_key, workdir)
            output = workdir / "audio.mp3"
            await self._run(
                [
                    self.ffmpeg_path, "-y",
                    "-i", str(source),
                    "-vn", "-ac", "1", "-ar", "16000", "-b:a", "64k",
                    str(output),
                ]
            )
            return await self.storage.upload(output, output_key)

    async def concat(self, input_keys: list[str], output_key: str) -> str:
        if not input_keys:
            raise MediaError("Nothing to concatenate")
        with tempfile.TemporaryDirectory() as tmp:
            workdir = Path(tmp)
            if len(input_keys) == 1:
                single = await self.storage.download(input_keys[0], workdir / "single.mp4")
                return await self.storage.upload(single, output_key)

            parts = [
                await self.storage.download(key, workdir / f"part_{i:02d}.mp4")
                for i, key in enumerate(input_keys)
            ]
            list_file = workdir / "parts.txt"
            list_file.write_text("".join(f"file '{p.name}'\n" for p in parts))
            output = workdir / "joined.mp4"
            await self._run(
                [
                    self.ffmpeg_path, "-y",
                    "-f", "concat", "-safe", "0",
                    "-i", str(list_file),
                    "-c", "copy",
                    str(output),
                ]
            )
            return await self.storage.upload(output, output_key)

    def _subtitle_filter(self, srt_path: Path, style: str) -> str:
        escaped = str(srt_path).replace("\\", "/").replace(":", "\\:").replace("'", "\\'")
        return f"subtitles='{escaped}':force_style='FontName={self.font_name},{style}'"

    async def overlay(
        self,
        input_key: str,
        title: str,
        subtitles: str | None,
        output_key: str,
    ) -> str:
        with tempfile.TemporaryDirectory() as tmp:
            workdir = Path(tmp)
            source = await self._fetch(input_key, workdir)
            title_srt = workdir / "title.srt"
            title_srt.write_text(f"1\n00:00:00,000 --> 99:59:59,999\n{title}\n", encoding="utf-8")
            filters = [self._subtitle_filter(title_srt, TITLE_STYLE)]
            if subtitles:
                subtitle_srt = workdir / "subtitles.srt"
                subtitle_srt.write_text(subtitles, encoding="utf-8")
                filters.append(self._subtitle_filter(subtitle_srt, SUBTITLE_STYLE))

            output = workdir / "overlay.mp4"
            await self._run(
                [
                    self.ffmpeg_path, "-y",
                    "-i", str(source),
                    "-vf", ",".join(filters),
                    "-c:v", "libx264", "-preset", "fast", "-crf", "23",
                    "-c:a", "copy",
                    "-movflags", "+faststart",
                    str(output),
                ]
            )
            key = await self.storage.upload(output, output_key)
        logger.info("media_overlay_created", input_key=input_key, key=key, subtitles=bool(subtitles))
        return key

    async def probe_duration_ms(self, input_key: str) -> int:
        with tempfile.TemporaryDirectory() as tmp:
            source = await self._fetch(input_key, Path(tmp))
            stdout = await self._run(
                [
                    self.ffprobe_path,
                    "-v", "quiet",
                    "-print_format", "json",
                    "-show_format",
                    str(source),
                ]
            )
        try:
            duration = float(json.loads(stdout.decode())["format"]["duration"])
        except (KeyError, ValueError) as e:
            raise MediaError(f"Could not read duration of {input_key}") from e
        return int(duration * 1000)

    async def health_check(self) -> bool:
        return shutil.which(self.ffmpeg_path) is not None
