"""SQLAlchemy ORM models."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from clip_curator.domain.enums import (
    ContentLanguage,
    ContentStatus,
    ContentType,
    JobStatus,
    PendingContentStatus,
)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Pipeline
# =============================================================================


class ContentJobModel(Base):
    """One source video on its way to becoming a published clip.

    Rows are never physically deleted; ``deleted_at`` marks removal and every
    query filters on it.
    """

    __tablename__ = "ai_content_jobs"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    source_video_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    source_title: Mapped[str] = mapped_column(String(500), nullable=False)
    source_channel_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_channel_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    language: Mapped[str] = mapped_column(String(8), default=ContentLanguage.KO.value)
    status: Mapped[str] = mapped_column(String(32), default=JobStatus.PENDING.value, index=True)

    # Pre-download evaluation
    evaluation_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    recommendation: Mapped[str | None] = mapped_column(String(32), nullable=True)
    search_query: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Artifacts (storage keys)
    raw_video_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    audio_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    edited_video_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    thumbnail_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Transcription
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcript_segments: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    transcript_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Analysis
    edit_plan: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    generated_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    generated_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    generated_tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    category: Mapped[str | None] = mapped_column(String(32), nullable=True)
    difficulty: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Scoring
    quality_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quality_breakdown: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)
    review_priority: Mapped[str | None] = mapped_column(String(16), nullable=True)

    # Providers used
    llm_provider: Mapped[str | None] = mapped_column(String(64), nullable=True)
    llm_model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    stt_provider: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Failure tracking
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    retry_count: Mapped[int] = mapped_column(Integer, default=0)

    # Review
    reviewed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Publish link (idempotency key is the job id)
    published_content_id: Mapped[PyUUID | None] = mapped_column(Uuid, nullable=True, unique=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utcnow)
    updated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    metadata_entries: Mapped[list["ContentJobMetadataModel"]] = relationship(
        "ContentJobMetadataModel",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="ContentJobMetadataModel.language",
    )
    pending_content: Mapped["PendingContentModel | None"] = relationship(
        "PendingContentModel", back_populates="job", uselist=False
    )

    @property
    def source_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.source_video_id}"


class ContentJobMetadataModel(Base):
    """Generated metadata for one job in one language."""

    __tablename__ = "ai_content_job_metadata"
    __table_args__ = (UniqueConstraint("job_id", "language", name="uq_job_metadata_language"),)

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    job_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("ai_content_jobs.id", ondelete="CASCADE"), index=True
    )
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    job: Mapped["ContentJobModel"] = relationship("ContentJobModel", back_populates="metadata_entries")


class PendingContentModel(Base):
    """Review queue entry with a denormalized snapshot of its job."""

    __tablename__ = "pending_contents"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    job_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("ai_content_jobs.id", ondelete="CASCADE"), unique=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    difficulty: Mapped[str | None] = mapped_column(String(32), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    video_key: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    width: Mapped[int] = mapped_column(Integer, default=1080)
    height: Mapped[int] = mapped_column(Integer, default=1920)
    source_video_id: Mapped[str] = mapped_column(String(64), nullable=False)
    source_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    source_channel_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quality_score: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    language: Mapped[str] = mapped_column(String(8), default=ContentLanguage.KO.value)
    review_priority: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(32), default=PendingContentStatus.PENDING_REVIEW.value, index=True
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_content_id: Mapped[PyUUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    job: Mapped["ContentJobModel"] = relationship("ContentJobModel", back_populates="pending_content")


# =============================================================================
# Serving catalog (written by the publish transaction, owned by the app backend)
# =============================================================================


class ContentModel(Base):
    """Published content row."""

    __tablename__ = "contents"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True)
    creator_id: Mapped[PyUUID] = mapped_column(Uuid, nullable=False, index=True)
    content_type: Mapped[str] = mapped_column(String(16), default=ContentType.VIDEO.value)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    thumbnail_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default=ContentStatus.PUBLISHED.value, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    content_metadata: Mapped["ContentMetadataModel"] = relationship(
        "ContentMetadataModel", back_populates="content", uselist=False
    )
    interactions: Mapped["ContentInteractionModel"] = relationship(
        "ContentInteractionModel", back_populates="content", uselist=False
    )


class ContentMetadataModel(Base):
    """Published content metadata row."""

    __tablename__ = "content_metadata"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    content_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("contents.id", ondelete="CASCADE"), unique=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    difficulty: Mapped[str | None] = mapped_column(String(32), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    language: Mapped[str] = mapped_column(String(8), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    content: Mapped["ContentModel"] = relationship("ContentModel", back_populates="content_metadata")


class ContentInteractionModel(Base):
    """Interaction counters for published content."""

    __tablename__ = "content_interactions"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    content_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("contents.id", ondelete="CASCADE"), unique=True
    )
    like_count: Mapped[int] = mapped_column(Integer, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, default=0)
    save_count: Mapped[int] = mapped_column(Integer, default=0)
    share_count: Mapped[int] = mapped_column(Integer, default=0)
    view_count: Mapped[int] = mapped_column(Integer, default=0)

    content: Mapped["ContentModel"] = relationship("ContentModel", back_populates="interactions")


class TagModel(Base):
    """Catalog tag with a usage counter."""

    __tablename__ = "tags"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    usage_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ContentTagModel(Base):
    """Content to tag link."""

    __tablename__ = "content_tags"
    __table_args__ = (UniqueConstraint("content_id", "tag_id", name="uq_content_tag"),)

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    content_id: Mapped[PyUUID] = mapped_column(
        Uuid, ForeignKey("contents.id", ondelete="CASCADE"), index=True
    )
    tag_id: Mapped[PyUUID] = mapped_column(Uuid, ForeignKey("tags.id", ondelete="CASCADE"), index=True)
