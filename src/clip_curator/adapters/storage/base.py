"""Base interface for object storage."""

from abc import ABC, abstractmethod
from pathlib import Path
from uuid import uuid4


def default_key(local_path: Path) -> str:
    return f"uploads/{uuid4().hex}/{local_path.name}"


class StorageProvider(ABC):
    """Maps local artifacts to durable keys and keys to fetchable URLs.

    The pipeline never builds storage URLs itself; it only holds keys.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def upload(self, local_path: Path, key: str | None = None) -> str:
        """Store a local file and return its object key."""
        ...

    @abstractmethod
    async def download(self, key: str, dest: Path) -> Path:
        """Copy an object to ``dest`` and return the path."""
        ...

    @abstractmethod
    def presign(self, key: str, ttl_seconds: int) -> str:
        """Return a URL that grants read access to ``key`` for ``ttl_seconds``."""
        ...

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Return the durable URL written into the serving catalog on publish."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    async def health_check(self) -> bool:
        return True
