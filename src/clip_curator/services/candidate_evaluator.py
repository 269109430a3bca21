"""Pre-download candidate triage.

Evaluation is advisory. :func:`evaluate_candidates` never discards a
candidate on its own judgement; the cutoff is applied separately by
:func:`select_candidates`.
"""

from clip_curator.adapters.llm.client import LLMClient
from clip_curator.domain.enums import Recommendation
from clip_curator.domain.models import EvaluatedVideo, VideoCandidate
from clip_curator.logging import get_logger

logger = get_logger(__name__)


def rank_key(evaluated: EvaluatedVideo) -> tuple[int, int]:
    return (evaluated.recommendation.rank, -evaluated.predicted_quality)


def dedupe_candidates(candidates: list[VideoCandidate]) -> list[VideoCandidate]:
    """Keep the first occurrence of each video id."""
    seen: set[str] = set()
    unique: list[VideoCandidate] = []
    for candidate in candidates:
        if candidate.video_id in seen:
            continue
        seen.add(candidate.video_id)
        unique.append(candidate)
    return unique


async def evaluate_candidates(
    llm: LLMClient,
    candidates: list[VideoCandidate],
) -> list[EvaluatedVideo]:
    """Evaluate candidates, best first.

    Candidates whose sub-batch failed are absent from the result.
    """
    unique = dedupe_candidates(candidates)
    if not unique:
        return []

    evaluated = await llm.evaluate_videos(unique)
    evaluated.sort(key=rank_key)

    missing = len(unique) - len(evaluated)
    if missing:
        logger.warning("candidates_not_evaluated", missing=missing, total=len(unique))
    return evaluated


def select_candidates(
    evaluated: list[EvaluatedVideo],
    min_recommendation: Recommendation = Recommendation.MAYBE,
    limit: int | None = None,
) -> list[EvaluatedVideo]:
    """Apply the download cutoff.

    SKIP is never selected, whatever ``min_recommendation`` says.
    """
    selected = [
        e
        for e in sorted(evaluated, key=rank_key)
        if e.recommendation != Recommendation.SKIP
        and e.recommendation.rank <= min_recommendation.rank
    ]
    if limit is not None:
        selected = selected[:limit]
    return selected
