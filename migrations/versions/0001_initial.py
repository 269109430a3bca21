"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Content jobs
    op.create_table(
        "ai_content_jobs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source_video_id", sa.String(64), nullable=False),
        sa.Column("source_title", sa.String(500), nullable=False),
        sa.Column("source_channel_id", sa.String(64), nullable=True),
        sa.Column("source_channel_title", sa.String(255), nullable=True),
        sa.Column("source_duration_ms", sa.Integer(), nullable=True),
        sa.Column("language", sa.String(8), nullable=False, server_default="ko"),
        sa.Column("status", sa.String(32), nullable=False, server_default="PENDING"),
        sa.Column("evaluation_score", sa.Integer(), nullable=True),
        sa.Column("recommendation", sa.String(32), nullable=True),
        sa.Column("search_query", sa.String(255), nullable=True),
        sa.Column("raw_video_key", sa.String(500), nullable=True),
        sa.Column("audio_key", sa.String(500), nullable=True),
        sa.Column("edited_video_key", sa.String(500), nullable=True),
        sa.Column("thumbnail_key", sa.String(500), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("transcript", sa.Text(), nullable=True),
        sa.Column("transcript_segments", sa.JSON(), nullable=True),
        sa.Column("transcript_confidence", sa.Float(), nullable=True),
        sa.Column("edit_plan", sa.JSON(), nullable=True),
        sa.Column("generated_title", sa.String(255), nullable=True),
        sa.Column("generated_description", sa.Text(), nullable=True),
        sa.Column("generated_tags", sa.JSON(), nullable=True),
        sa.Column("category", sa.String(32), nullable=True),
        sa.Column("difficulty", sa.String(32), nullable=True),
        sa.Column("quality_score", sa.Integer(), nullable=True),
        sa.Column("quality_breakdown", sa.JSON(), nullable=True),
        sa.Column("review_priority", sa.String(16), nullable=True),
        sa.Column("llm_provider", sa.String(64), nullable=True),
        sa.Column("llm_model", sa.String(128), nullable=True),
        sa.Column("stt_provider", sa.String(64), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reviewed_by", sa.String(100), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("published_content_id", sa.Uuid(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_by", sa.String(100), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_video_id", name="uq_ai_content_jobs_source_video_id"),
        sa.UniqueConstraint("published_content_id", name="uq_ai_content_jobs_published_content_id"),
    )
    op.create_index("ix_ai_content_jobs_status", "ai_content_jobs", ["status"])
    op.create_index("ix_ai_content_jobs_created_at", "ai_content_jobs", ["created_at"])

    # Per-language generated metadata
    op.create_table(
        "ai_content_job_metadata",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("job_id", sa.Uuid(), nullable=False),
        sa.Column("language", sa.String(8), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("difficulty", sa.String(32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["job_id"], ["ai_content_jobs.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("job_id", "language", name="uq_job_metadata_language"),
    )
    op.create_index("ix_ai_content_job_metadata_job_id", "ai_content_job_metadata", ["job_id"])

    # Review queue
    op.create_table(
        "pending_contents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("job_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("difficulty", sa.String(32), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("video_key", sa.String(500), nullable=False),
        sa.Column("thumbnail_key", sa.String(500), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=False, server_default="1080"),
        sa.Column("height", sa.Integer(), nullable=False, server_default="1920"),
        sa.Column("source_video_id", sa.String(64), nullable=False),
        sa.Column("source_title", sa.String(500), nullable=True),
        sa.Column("source_channel_title", sa.String(255), nullable=True),
        sa.Column("quality_score", sa.Integer(), nullable=False),
        sa.Column("language", sa.String(8), nullable=False, server_default="ko"),
        sa.Column("review_priority", sa.String(16), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="PENDING_REVIEW"),
        sa.Column("reviewed_by", sa.String(100), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("published_content_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["job_id"], ["ai_content_jobs.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("job_id", name="uq_pending_contents_job_id"),
    )
    op.create_index("ix_pending_contents_status", "pending_contents", ["status"])
    op.create_index("ix_pending_contents_quality_score", "pending_contents", ["quality_score"])
    op.create_index("ix_pending_contents_review_priority", "pending_contents", ["review_priority"])
    op.create_index("ix_pending_contents_created_at", "pending_contents", ["created_at"])

    # Serving catalog
    op.create_table(
        "contents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=False),
        sa.Column("content_type", sa.String(16), nullable=False, server_default="VIDEO"),
        sa.Column("url", sa.String(1000), nullable=False),
        sa.Column("thumbnail_url", sa.String(1000), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("width", sa.Integer(), nullable=True),
        sa.Column("height", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="PUBLISHED"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contents_creator_id", "contents", ["creator_id"])
    op.create_index("ix_contents_status", "contents", ["status"])

    op.create_table(
        "content_metadata",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("difficulty", sa.String(32), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("language", sa.String(8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["content_id"], ["contents.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("content_id", name="uq_content_metadata_content_id"),
    )
    op.create_index("ix_content_metadata_category", "content_metadata", ["category"])

    op.create_table(
        "content_interactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content_id", sa.Uuid(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("save_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("share_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["content_id"], ["contents.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("content_id", name="uq_content_interactions_content_id"),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("normalized_name", sa.String(100), nullable=False),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("normalized_name", name="uq_tags_normalized_name"),
    )

    op.create_table(
        "content_tags",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content_id", sa.Uuid(), nullable=False),
        sa.Column("tag_id", sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["content_id"], ["contents.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("content_id", "tag_id", name="uq_content_tag"),
    )
    op.create_index("ix_content_tags_content_id", "content_tags", ["content_id"])
    op.create_index("ix_content_tags_tag_id", "content_tags", ["tag_id"])


def downgrade() -> None:
    op.drop_table("content_tags")
    op.drop_table("tags")
    op.drop_table("content_interactions")
    op.drop_table("content_metadata")
    op.drop_table("contents")
    op.drop_table("pending_contents")
    op.drop_table("ai_content_job_metadata")
    op.drop_table("ai_content_jobs")
