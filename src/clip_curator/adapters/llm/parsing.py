"""Response parsers for the content capability.

Each parser turns raw model text into domain objects and never raises:
malformed output degrades to the documented default.
"""

from typing import Any

from clip_curator.domain.enums import Category, ContentLanguage, Difficulty, Recommendation
from clip_curator.domain.models import (
    ClipSegment,
    ContentMetadata,
    EditPlan,
    EvaluatedVideo,
    SearchQuery,
    Segment,
    VideoCandidate,
)
from clip_curator.logging import get_logger
from clip_curator.utils.json_extract import as_int, parse_json_list, parse_json_object

logger = get_logger(__name__)

DEFAULT_SCORE = 50


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key; models mix camelCase and snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    return []


def _time_range(item: dict[str, Any]) -> tuple[int, int] | None:
    start = as_int(_pick(item, "startTimeMs", "start_ms", "startMs"), -1)
    end = as_int(_pick(item, "endTimeMs", "end_ms", "endMs"), -1)
    if start < 0 or end <= start:
        return None
    return start, end


def parse_segments(text: str | None) -> list[Segment]:
    """Key segments; malformed output yields ``[]``."""
    segments: list[Segment] = []
    for item in parse_json_list(text, "segments", context="segments"):
        if not isinstance(item, dict):
            continue
        time_range = _time_range(item)
        if time_range is None:
            logger.warning("segment_invalid_range", item=item)
            continue
        segments.append(
            Segment(
                start_ms=time_range[0],
                end_ms=time_range[1],
                title=str(item.get("title", "")),
                description=str(item.get("description", "")),
                keywords=_str_list(item.get("keywords")),
            )
        )
    return segments


def parse_edit_plan(text: str | None) -> EditPlan:
    """Edit plan sorted by orderIndex; malformed output yields ``EditPlan.empty()``."""
    data = parse_json_object(text, context="edit_plan")
    raw_clips = data.get("clips")
    if not isinstance(raw_clips, list):
        return EditPlan.empty()

    clips: list[ClipSegment] = []
    for position, item in enumerate(raw_clips):
        if not isinstance(item, dict):
            continue
        time_range = _time_range(item)
        if time_range is None:
            logger.warning("edit_plan_clip_invalid_range", item=item)
            continue
        clips.append(
            ClipSegment(
                order_index=as_int(_pick(item, "orderIndex", "order_index"), position),
                start_ms=time_range[0],
                end_ms=time_range[1],
                title=str(item.get("title", "")),
                description=str(item.get("description", "")),
                keywords=_str_list(item.get("keywords")),
            )
        )

    if not clips:
        return EditPlan.empty()

    clips.sort(key=lambda c: c.order_index)
    total = as_int(
        _pick(data, "totalDurationMs", "total_duration_ms"),
        sum(c.duration_ms for c in clips),
        low=0,
    )
    return EditPlan(
        clips=clips,
        total_duration_ms=total,
        editing_strategy=str(
            _pick(data, "editingStrategy", "editing_strategy", default="highlight_compilation")
        ),
        transition_style=str(_pick(data, "transitionStyle", "transition_style", default="hard_cut")),
    )


def parse_metadata(text: str | None, language: ContentLanguage) -> ContentMetadata:
    """Metadata for one language; malformed output yields ``ContentMetadata.fallback``."""
    data = parse_json_object(text, context="metadata")
    title = str(data.get("title") or "").strip()
    if not title:
        return ContentMetadata.fallback(language)

    raw_category = data.get("category")
    return ContentMetadata(
        title=title,
        description=str(data.get("description") or "").strip(),
        tags=_str_list(data.get("tags")),
        category=Category.from_string(raw_category) if raw_category else Category.PROGRAMMING,
        difficulty=Difficulty.from_string(data.get("difficulty")),
        language=language,
    )


def parse_search_queries(text: str | None) -> list[SearchQuery]:
    """Search queries; malformed output yields ``[]``."""
    queries: list[SearchQuery] = []
    for item in parse_json_list(text, "queries", context="search_queries"):
        if not isinstance(item, dict):
            continue
        query = str(item.get("query") or "").strip()
        if not query:
            continue
        queries.append(
            SearchQuery(
                query=query,
                target_category=str(
                    _pick(item, "targetCategory", "target_category", default=Category.OTHER)
                ).upper(),
                expected_content_type=str(
                    _pick(item, "expectedContentType", "expected_content_type", default="")
                ),
                priority=as_int(item.get("priority"), 5, low=1, high=10),
                language=ContentLanguage.from_code(item.get("language")),
            )
        )
    return queries


def placeholder_evaluation(candidate: VideoCandidate, reasoning: str) -> EvaluatedVideo:
    return EvaluatedVideo(
        candidate=candidate,
        relevance_score=DEFAULT_SCORE,
        educational_value=DEFAULT_SCORE,
        short_form_suitability=DEFAULT_SCORE,
        predicted_quality=DEFAULT_SCORE,
        recommendation=Recommendation.MAYBE,
        reasoning=reasoning,
    )


def parse_evaluations(text: str | None, batch: list[VideoCandidate]) -> list[EvaluatedVideo]:
    """Evaluations for one sub-batch.

    Items reference candidates by ``index``; out-of-range indices are dropped.
    If nothing parses, every candidate in the batch becomes a MAYBE/50
    placeholder.
    """
    items = parse_json_list(text, "evaluations", context="evaluations")
    if not items:
        return [placeholder_evaluation(c, "Evaluation response could not be parsed") for c in batch]

    results: list[EvaluatedVideo] = []
    seen: set[int] = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        index = as_int(item.get("index"), -1)
        if not 0 <= index < len(batch) or index in seen:
            logger.warning("evaluation_index_invalid", index=item.get("index"), batch_size=len(batch))
            continue
        seen.add(index)
        results.append(
            EvaluatedVideo(
                candidate=batch[index],
                relevance_score=as_int(_pick(item, "relevanceScore", "relevance_score"), DEFAULT_SCORE, 0, 100),
                educational_value=as_int(_pick(item, "educationalValue", "educational_value"), DEFAULT_SCORE, 0, 100),
                short_form_suitability=as_int(
                    _pick(item, "shortFormSuitability", "short_form_suitability"), DEFAULT_SCORE, 0, 100
                ),
                predicted_quality=as_int(_pick(item, "predictedQuality", "predicted_quality"), DEFAULT_SCORE, 0, 100),
                recommendation=Recommendation.parse(item.get("recommendation")),
                reasoning=str(item.get("reasoning") or ""),
            )
        )
    return results
