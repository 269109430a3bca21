"""Serve objects from the local storage provider.

Signed URLs (``expires`` + ``signature``) work for any key until they expire.
Unsigned URLs are only honoured for the video and thumbnail of published
content.
"""

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import FileResponse
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from clip_curator.adapters.storage import LocalStorageProvider, verify_signature
from clip_curator.api.deps import SessionDep, StorageDep
from clip_curator.db.models import PendingContentModel
from clip_curator.domain.enums import PendingContentStatus
from clip_curator.logging import get_logger

router = APIRouter(tags=["Media"])
logger = get_logger(__name__)


def is_published_key(session: Session, key: str) -> bool:
    row = session.execute(
        select(PendingContentModel.id)
        .where(
            PendingContentModel.deleted_at.is_(None),
            PendingContentModel.status == PendingContentStatus.PUBLISHED.value,
            or_(PendingContentModel.video_key == key, PendingContentModel.thumbnail_key == key),
        )
        .limit(1)
    ).first()
    return row is not None


@router.get("/media/{key:path}", include_in_schema=False)
async def serve_media(
    key: str,
    session: SessionDep,
    storage: StorageDep,
    expires: int | None = Query(None),
    signature: str | None = Query(None),
) -> FileResponse:
    if not isinstance(storage, LocalStorageProvider):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media is not served locally")

    if expires is not None and signature is not None:
        allowed = verify_signature(key, expires, signature, storage.secret)
    else:
        allowed = is_published_key(session, key)
    if not allowed:
        logger.warning("media_access_denied", key=key, signed=signature is not None)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired media URL")

    try:
        path = storage.path_for(key)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid key") from None
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")
    return FileResponse(path)
