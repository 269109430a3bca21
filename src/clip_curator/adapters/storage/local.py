"""Filesystem storage with HMAC-signed expiring URLs."""

import asyncio
import hashlib
import hmac
import shutil
import time
from pathlib import Path
from urllib.parse import quote, urlencode

from clip_curator.adapters.storage.base import StorageProvider, default_key
from clip_curator.config import settings
from clip_curator.logging import get_logger

logger = get_logger(__name__)


def sign(key: str, expires: int, secret: str) -> str:
    message = f"{key}:{expires}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_signature(key: str, expires: int, signature: str, secret: str | None = None) -> bool:
    """Check a presigned URL's signature and expiry."""
    if expires < int(time.time()):
        return False
    expected = sign(key, expires, secret or settings.presign_secret)
    return hmac.compare_digest(expected, signature)


class LocalStorageProvider(StorageProvider):
    """Stores objects under ``base_path``; URLs are served by the ``/media`` route."""

    def __init__(
        self,
        base_path: Path | None = None,
        public_base_url: str | None = None,
        secret: str | None = None,
    ) -> None:
        self.base_path = Path(base_path or settings.storage_base_path)
        self.public_base_url = (public_base_url or settings.storage_public_base_url).rstrip("/")
        self.secret = secret or settings.presign_secret
        self.base_path.mkdir(parents=True, exist_ok=True)

    @property
    def name(self) -> str:
        return "local"

    def path_for(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if not path.is_relative_to(self.base_path.resolve()):
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    async def upload(self, local_path: Path, key: str | None = None) -> str:
        key = key or default_key(local_path)
        target = self.path_for(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(shutil.copyfile, local_path, target)
        logger.info("storage_uploaded", key=key, bytes=target.stat().st_size)
        return key

    async def download(self, key: str, dest: Path) -> Path:
        source = self.path_for(key)
        if not source.exists():
            raise FileNotFoundError(f"Object not found: {key}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(shutil.copyfile, source, dest)
        return dest

    def presign(self, key: str, ttl_seconds: int) -> str:
        expires = int(time.time()) + ttl_seconds
        query = urlencode({"expires": expires, "signature": sign(key, expires, self.secret)})
        return f"{self.public_base_url}/{quote(key)}?{query}"

    def public_url(self, key: str) -> str:
        # Unsigned; the media route serves these only once the object is published
        return f"{self.public_base_url}/{quote(key)}"

    async def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    async def health_check(self) -> bool:
        return self.base_path.is_dir()
