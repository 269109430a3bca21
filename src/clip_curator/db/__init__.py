"""Database layer."""

from clip_curator.db.models import (
    Base,
    ContentInteractionModel,
    ContentJobMetadataModel,
    ContentJobModel,
    ContentMetadataModel,
    ContentModel,
    ContentTagModel,
    PendingContentModel,
    TagModel,
)
from clip_curator.db.session import (
    SessionFactory,
    SessionLocal,
    get_session,
    get_session_context,
    init_db,
)

__all__ = [
    "Base",
    "SessionFactory",
    "SessionLocal",
    "get_session",
    "get_session_context",
    "init_db",
    # Models
    "ContentInteractionModel",
    "ContentJobMetadataModel",
    "ContentJobModel",
    "ContentMetadataModel",
    "ContentModel",
    "ContentTagModel",
    "PendingContentModel",
    "TagModel",
]
