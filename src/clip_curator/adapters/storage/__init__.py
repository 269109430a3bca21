"""Object storage adapters."""

from clip_curator.adapters.storage.base import StorageProvider
from clip_curator.adapters.storage.local import LocalStorageProvider, verify_signature
from clip_curator.adapters.storage.stub import StubStorageProvider
from clip_curator.config import settings


def get_storage_provider(name: str | None = None) -> StorageProvider:
    """Build the storage provider named by ``name`` or ``settings.storage_provider``."""
    provider_name = (name or settings.storage_provider).lower()
    if provider_name == "local":
        return LocalStorageProvider()
    if provider_name == "stub":
        return StubStorageProvider()
    raise ValueError(f"Unknown storage provider '{provider_name}'. Options: local, stub")


__all__ = [
    "LocalStorageProvider",
    "StorageProvider",
    "StubStorageProvider",
    "get_storage_provider",
    "verify_signature",
]
