"""In-memory storage for tests."""

from pathlib import Path

from clip_curator.adapters.storage.base import StorageProvider, default_key


class StubStorageProvider(StorageProvider):
    """Keeps object bytes in a dict."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}

    @property
    def name(self) -> str:
        return "stub"

    def put(self, key: str, data: bytes) -> str:
        self.objects[key] = data
        return key

    async def upload(self, local_path: Path, key: str | None = None) -> str:
        key = key or default_key(local_path)
        self.objects[key] = local_path.read_bytes()
        return key

    async def download(self, key: str, dest: Path) -> Path:
        if key not in self.objects:
            raise FileNotFoundError(f"Object not found: {key}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self.objects[key])
        return dest

    def presign(self, key: str, ttl_seconds: int) -> str:
        return f"stub://{key}?ttl={ttl_seconds}"

    def public_url(self, key: str) -> str:
        return f"stub://{key}"

    async def exists(self, key: str) -> bool:
        return key in self.objects
