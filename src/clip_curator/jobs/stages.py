"""Pipeline stages.

Each stage moves jobs one edge along the state machine:

    download    PENDING              -> CRAWLED
    transcribe  CRAWLED              -> TRANSCRIBED
    analyze     TRANSCRIBED          -> ANALYZED
    edit        ANALYZED, NEEDS_EDIT -> EDITED
    review      EDITED               -> PENDING_APPROVAL | REJECTED
"""

import tempfile
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from clip_curator.adapters.llm import LLMClient, get_llm_client
from clip_curator.adapters.media import MediaProcessor, get_media_processor
from clip_curator.adapters.storage import StorageProvider, get_storage_provider
from clip_curator.adapters.stt import STTProvider, get_stt_provider
from clip_curator.adapters.video_source import VideoSourceProvider, get_video_source
from clip_curator.config import settings
from clip_curator.db.models import ContentJobMetadataModel, ContentJobModel
from clip_curator.domain.enums import (
    ContentLanguage,
    JobEvent,
    JobStatus,
    PendingContentStatus,
    RejectionReason,
)
from clip_curator.domain.models import ClipSegment, ContentMetadata, EditPlan, TranscriptResult
from clip_curator.errors import StageInputError
from clip_curator.jobs.chunk import JobSnapshot, Stage
from clip_curator.logging import get_logger
from clip_curator.services.jobs import SYSTEM_ACTOR, apply_job_event
from clip_curator.services.quality import route, score_job
from clip_curator.services.review import enqueue_for_review
from clip_curator.services.subtitles import build_srt, clip_subtitles, wrap_title
from clip_curator.services.transcript import format_transcript, source_attribution, with_attribution

logger = get_logger(__name__)

FALLBACK_CLIP_START_MS = 30_000
FALLBACK_CLIP_LENGTH_MS = 60_000


@dataclass
class Providers:
    """The external collaborators stages call."""

    llm: LLMClient
    stt: STTProvider
    storage: StorageProvider
    media: MediaProcessor
    source: VideoSourceProvider

    @classmethod
    def from_settings(cls) -> "Providers":
        storage = get_storage_provider()
        return cls(
            llm=get_llm_client(),
            stt=get_stt_provider(),
            storage=storage,
            media=get_media_processor(storage),
            source=get_video_source(),
        )


# =============================================================================
# Download
# =============================================================================


@dataclass(frozen=True)
class DownloadResult:
    raw_video_key: str
    audio_key: str
    duration_ms: int | None


class DownloadStage(Stage):
    name = "download"
    source_statuses = (JobStatus.PENDING,)

    def __init__(self, providers: Providers) -> None:
        self.providers = providers

    @property
    def skip_limit(self) -> int:
        return settings.download_skip_limit

    @property
    def timeout_seconds(self) -> float:
        return settings.ffmpeg_timeout + settings.provider_timeout_seconds

    async def run(self, job: JobSnapshot) -> DownloadResult:
        p = self.providers
        with tempfile.TemporaryDirectory(prefix="clip-curator-") as tmp:
            path = await p.source.download(job.source_video_id, Path(tmp))
            raw_key = await p.storage.upload(path, f"raw/{job.source_video_id}/{job.id}.mp4")
        audio_key = await p.media.extract_audio(raw_key, f"audio/{job.source_video_id}/{job.id}.mp3")
        duration_ms = await p.media.probe_duration_ms(raw_key)
        return DownloadResult(raw_video_key=raw_key, audio_key=audio_key, duration_ms=duration_ms)

    def apply(self, session: Session, job: ContentJobModel, result: DownloadResult) -> None:
        job.raw_video_key = result.raw_video_key
        job.audio_key = result.audio_key
        job.source_duration_ms = result.duration_ms
        apply_job_event(job, JobEvent.DOWNLOADED)


# =============================================================================
# Transcribe
# =============================================================================


class TranscribeStage(Stage):
    name = "transcribe"
    source_statuses = (JobStatus.CRAWLED,)

    def __init__(self, providers: Providers) -> None:
        self.providers = providers

    async def run(self, job: JobSnapshot) -> TranscriptResult:
        if not job.audio_key:
            raise StageInputError(f"Job {job.id} has no audio to transcribe")
        audio_url = self.providers.storage.presign(job.audio_key, settings.presign_ttl_seconds)
        result = await self.providers.stt.transcribe(audio_url, ContentLanguage.from_code(job.language))
        if not result.text.strip():
            raise StageInputError(f"Job {job.id} produced an empty transcript")
        return result

    def apply(self, session: Session, job: ContentJobModel, result: TranscriptResult) -> None:
        job.transcript = result.text
        job.transcript_segments = result.segments_as_dicts()
        job.transcript_confidence = result.confidence
        job.stt_provider = self.providers.stt.name
        apply_job_event(job, JobEvent.TRANSCRIBED)


# =============================================================================
# Analyze
# =============================================================================


@dataclass
class AnalysisResult:
    edit_plan: EditPlan
    metadata: dict[ContentLanguage, ContentMetadata] = field(default_factory=dict)
    primary_language: ContentLanguage = ContentLanguage.KO


def plan_from_segments(segments: list[Any]) -> EditPlan:
    """Build a plan from key segments when the model returned no usable plan."""
    clips = [
        ClipSegment(
            order_index=i,
            start_ms=s.start_ms,
            end_ms=s.end_ms,
            title=s.title,
            description=s.description,
            keywords=list(s.keywords),
        )
        for i, s in enumerate(segments)
    ]
    if not clips:
        return EditPlan.empty()
    return EditPlan(clips=clips, total_duration_ms=sum(c.duration_ms for c in clips))


def metadata_languages(primary: ContentLanguage) -> list[ContentLanguage]:
    languages = [ContentLanguage.from_code(code) for code in settings.target_languages]
    return list(dict.fromkeys([primary, *languages]))


class AnalyzeStage(Stage):
    name = "analyze"
    source_statuses = (JobStatus.TRANSCRIBED,)

    def __init__(self, providers: Providers) -> None:
        self.providers = providers

    @property
    def timeout_seconds(self) -> float:
        calls = 2 + len(settings.target_languages)
        return settings.provider_timeout_seconds * calls

    async def run(self, job: JobSnapshot) -> AnalysisResult:
        if not job.transcript:
            raise StageInputError(f"Job {job.id} has no transcript to analyze")
        llm = self.providers.llm
        primary = ContentLanguage.from_code(job.language)
        timed = format_transcript(job.transcript, job.transcript_segments)

        plan = await llm.generate_edit_plan(timed)
        if plan.is_empty:
            segments = await llm.extract_key_segments(timed)
            plan = plan_from_segments(segments)
            logger.info("edit_plan_from_segments", job_id=str(job.id), clips=len(plan.clips))

        result = AnalysisResult(edit_plan=plan, primary_language=primary)
        for language in metadata_languages(primary):
            metadata = await llm.generate_metadata(job.transcript, language)
            metadata.description = with_attribution(
                metadata.description,
                source_attribution(
                    job.source_video_id, job.source_title, job.source_channel_title, language
                ),
            )
            result.metadata[language] = metadata
        return result

    def apply(self, session: Session, job: ContentJobModel, result: AnalysisResult) -> None:
        primary = result.metadata[result.primary_language]
        job.edit_plan = result.edit_plan.to_dict()
        job.generated_title = primary.title
        job.generated_description = primary.description
        job.generated_tags = list(primary.tags)
        job.category = primary.category.value
        job.difficulty = primary.difficulty.value
        job.llm_provider = self.providers.llm.name
        job.llm_model = self.providers.llm.model

        existing = {entry.language: entry for entry in job.metadata_entries}
        for language, metadata in result.metadata.items():
            entry = existing.get(language.value)
            if entry is None:
                entry = ContentJobMetadataModel(language=language.value)
                job.metadata_entries.append(entry)
            entry.title = metadata.title
            entry.description = metadata.description
            entry.tags = list(metadata.tags)
            entry.category = metadata.category.value
            entry.difficulty = metadata.difficulty.value

        apply_job_event(job, JobEvent.ANALYZED)


# =============================================================================
# Edit
# =============================================================================


def plan_clip_ranges(
    plan: EditPlan,
    source_duration_ms: int | None,
    max_total_ms: int | None = None,
    min_total_ms: int | None = None,
) -> list[tuple[int, int]]:
    """Turn an edit plan into the ranges actually cut, in plan order.

    Ranges are clamped to the source. Empty ranges are dropped. Overlapping
    or out-of-order clips are kept as the model asked and logged. The total
    is capped at ``max_total_ms`` by trimming the last clip that crosses it.
    With nothing usable left, one fallback clip near the start is cut.
    """
    max_total = settings.clip_max_duration_ms if max_total_ms is None else max_total_ms
    min_total = settings.clip_min_duration_ms if min_total_ms is None else min_total_ms
    limit = source_duration_ms if source_duration_ms and source_duration_ms > 0 else None

    ranges: list[tuple[int, int]] = []
    total = 0
    for clip in plan.clips:
        start = max(0, clip.start_ms)
        end = min(clip.end_ms, limit) if limit else clip.end_ms
        if end <= start:
            logger.warning("edit_clip_dropped", start_ms=clip.start_ms, end_ms=clip.end_ms, source_ms=limit)
            continue
        if any(start < prev_end and end > prev_start for prev_start, prev_end in ranges):
            logger.warning("edit_clip_overlap", start_ms=start, end_ms=end)
        elif ranges and start < ranges[-1][0]:
            logger.warning("edit_clip_out_of_order", start_ms=start, previous_start_ms=ranges[-1][0])

        remaining = max_total - total
        if remaining <= 0:
            break
        end = min(end, start + remaining)
        ranges.append((start, end))
        total += end - start

    if not ranges:
        start = FALLBACK_CLIP_START_MS
        if limit:
            start = max(0, min(start, limit - FALLBACK_CLIP_LENGTH_MS))
        end = start + min(FALLBACK_CLIP_LENGTH_MS, max_total)
        if limit:
            end = min(end, limit)
        logger.warning("edit_plan_fallback_clip", start_ms=start, end_ms=end)
        ranges = [(start, end)]
        total = end - start

    if total < min_total:
        logger.warning("edit_output_short", total_ms=total, min_ms=min_total)
    return ranges


@dataclass(frozen=True)
class EditResult:
    edited_video_key: str
    thumbnail_key: str
    duration_ms: int


class EditStage(Stage):
    name = "edit"
    source_statuses = (JobStatus.ANALYZED, JobStatus.NEEDS_EDIT)

    def __init__(self, providers: Providers) -> None:
        self.providers = providers

    @property
    def timeout_seconds(self) -> float:
        return settings.ffmpeg_timeout * 3

    async def run(self, job: JobSnapshot) -> EditResult:
        if not job.raw_video_key:
            raise StageInputError(f"Job {job.id} has no source video to edit")
        media = self.providers.media
        plan = EditPlan.from_dict(job.edit_plan)

        duration = job.source_duration_ms or await media.probe_duration_ms(job.raw_video_key)
        ranges = plan_clip_ranges(plan, duration)

        base = f"{settings.storage_key_prefix}/clips/{job.source_video_id}/{job.id}"
        cut_key = f"{base}_cut.mp4"
        if len(ranges) == 1:
            start, end = ranges[0]
            await media.clip(job.raw_video_key, start, end, cut_key)
        else:
            parts = [
                await media.clip(job.raw_video_key, start, end, f"{base}_part{i}.mp4")
                for i, (start, end) in enumerate(ranges)
            ]
            await media.concat(parts, cut_key)

        subtitles = build_srt(clip_subtitles(job.transcript_segments, ranges)) or None
        title = wrap_title(job.generated_title or job.source_title, settings.overlay_title_chars_per_line)
        output_key = await media.overlay(cut_key, title, subtitles, f"{base}.mp4")

        total = sum(end - start for start, end in ranges)
        thumbnail_key = await media.thumbnail(
            output_key, total // 2, f"thumbnails/{job.source_video_id}/{job.id}.jpg"
        )
        return EditResult(edited_video_key=output_key, thumbnail_key=thumbnail_key, duration_ms=total)

    def apply(self, session: Session, job: ContentJobModel, result: EditResult) -> None:
        job.edited_video_key = result.edited_video_key
        job.thumbnail_key = result.thumbnail_key
        job.duration_ms = result.duration_ms
        apply_job_event(job, JobEvent.EDITED)


# =============================================================================
# Review routing
# =============================================================================


class ReviewStage(Stage):
    """Scores edited jobs and routes them to the queue or to auto-rejection."""

    name = "review"
    source_statuses = (JobStatus.EDITED,)

    def __init__(self, providers: Providers | None = None) -> None:
        self.providers = providers

    async def run(self, job: JobSnapshot) -> None:
        return None

    def apply(self, session: Session, job: ContentJobModel, result: None) -> None:
        score = score_job(job)
        decision = route(score.total)
        job.quality_score = score.total
        job.quality_breakdown = score.to_dict()
        job.review_priority = decision.priority.value if decision.priority else None

        if decision.needs_review:
            apply_job_event(job, JobEvent.QUEUED_FOR_REVIEW)
            enqueue_for_review(session, job, decision)
            return

        apply_job_event(job, JobEvent.AUTO_REJECTED)
        job.rejection_reason = RejectionReason.LOW_QUALITY_SCORE.value
        job.reviewed_by = SYSTEM_ACTOR
        job.reviewed_at = datetime.now(UTC)
        if job.pending_content is not None:
            # A re-edited job can fall below the threshold after a reviewer saw it
            job.pending_content.status = PendingContentStatus.REJECTED.value
            job.pending_content.rejection_reason = job.rejection_reason
        logger.info("job_auto_rejected", job_id=str(job.id), score=score.total)


STAGES: dict[str, type[Stage]] = {
    "download": DownloadStage,
    "transcribe": TranscribeStage,
    "analyze": AnalyzeStage,
    "edit": EditStage,
    "review": ReviewStage,
}

STAGE_ORDER = list(STAGES)


def build_stage(name: str, providers: Providers) -> Stage:
    try:
        stage_cls = STAGES[name]
    except KeyError:
        raise ValueError(f"Unknown stage '{name}'. Options: {', '.join(STAGE_ORDER)}") from None
    return stage_cls(providers)
