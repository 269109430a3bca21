"""Base interface for media processing."""

from abc import ABC, abstractmethod

from clip_curator.errors import ProviderError


class MediaError(ProviderError):
    """A media command failed."""

    pass


class MediaProcessor(ABC):
    """Black-box media commands that work on storage keys.

    Each operation reads its input from storage and returns the key of the
    stored output.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def clip(
        self,
        input_key: str,
        start_ms: int,
        end_ms: int,
        output_key: str | None = None,
    ) -> str:
        """Cut ``[start_ms, end_ms)`` into a vertical clip."""
        ...

    @abstractmethod
    async def thumbnail(self, input_key: str, at_ms: int, output_key: str | None = None) -> str:
        """Grab one frame at ``at_ms`` as a JPEG."""
        ...

    @abstractmethod
    async def extract_audio(self, input_key: str, output_key: str | None = None) -> str:
        """Extract a mono speech-friendly audio track."""
        ...

    @abstractmethod
    async def concat(self, input_keys: list[str], output_key: str) -> str:
        """Join clips in order."""
        ...

    @abstractmethod
    async def overlay(
        self,
        input_key: str,
        title: str,
        subtitles: str | None,
        output_key: str,
    ) -> str:
        """Burn ``title`` in at the top and the SRT ``subtitles`` at the bottom."""
        ...

    @abstractmethod
    async def probe_duration_ms(self, input_key: str) -> int:
        ...

    async def health_check(self) -> bool:
        return True
