"""Stub media processor for tests."""

from uuid import uuid4

from clip_curator.adapters.media.base import MediaProcessor


class StubMediaProcessor(MediaProcessor):
    """Records every command and returns the requested (or generated) keys."""

    def __init__(self, duration_ms: int = 600_000) -> None:
        self.duration_ms = duration_ms
        self.calls: list[tuple] = []

    @property
    def name(self) -> str:
        return "stub"

    async def clip(
        self,
        input_key: str,
        start_ms: int,
        end_ms: int,
        output_key: str | None = None,
    ) -> str:
        key = output_key or f"clips/{uuid4().hex}.mp4"
        self.calls.append(("clip", input_key, start_ms, end_ms, key))
        return key

    async def thumbnail(self, input_key: str, at_ms: int, output_key: str | None = None) -> str:
        key = output_key or f"thumbnails/{uuid4().hex}.jpg"
        self.calls.append(("thumbnail", input_key, at_ms, key))
        return key

    async def extract_audio(self, input_key: str, output_key: str | None = None) -> str:
        key = output_key or f"audio/{uuid4().hex}.mp3"
        self.calls.append(("extract_audio", input_key, key))
        return key

    async def concat(self, input_keys: list[str], output_key: str) -> str:
        self.calls.append(("concat", tuple(input_keys), output_key))
        return output_key

    async def overlay(
        self,
        input_key: str,
        title: str,
        subtitles: str | None,
        output_key: str,
    ) -> str:
        self.calls.append(("overlay", input_key, title, subtitles, output_key))
        return output_key

    async def probe_duration_ms(self, input_key: str) -> int:
        self.calls.append(("probe", input_key))
        return self.duration_ms
