"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from clip_curator.adapters.storage import StorageProvider, get_storage_provider
from clip_curator.db.session import get_session

# Database session dependency
SessionDep = Annotated[Session, Depends(get_session)]


def get_storage() -> StorageProvider:
    """Get the configured storage provider."""
    return get_storage_provider()


StorageDep = Annotated[StorageProvider, Depends(get_storage)]


def get_reviewer(x_reviewer: Annotated[str | None, Header()] = None) -> str:
    """Reviewer identity, taken from the ``X-Reviewer`` header."""
    return (x_reviewer or "admin").strip()[:100] or "admin"


ReviewerDep = Annotated[str, Depends(get_reviewer)]
