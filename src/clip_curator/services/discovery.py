"""Discovery run: search context to new PENDING jobs."""

from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError

from clip_curator.adapters.llm.client import LLMClient
from clip_curator.adapters.video_source.base import VideoSourceProvider
from clip_curator.config import settings
from clip_curator.db.session import SessionFactory, get_session_context
from clip_curator.domain.enums import Recommendation
from clip_curator.domain.models import SearchQuery, VideoCandidate
from clip_curator.errors import ProviderError, TransientProviderError
from clip_curator.logging import get_logger
from clip_curator.services.candidate_evaluator import evaluate_candidates, select_candidates
from clip_curator.services.jobs import create_job, known_source_ids
from clip_curator.services.query_generator import generate_queries
from clip_curator.services.search_context import collect_search_context

logger = get_logger(__name__)


@dataclass
class DiscoveryResult:
    queries: int = 0
    candidates: int = 0
    evaluated: int = 0
    created_job_ids: list[str] = field(default_factory=list)
    failed_queries: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "queries": self.queries,
            "candidates": self.candidates,
            "evaluated": self.evaluated,
            "created": len(self.created_job_ids),
            "created_job_ids": self.created_job_ids,
            "failed_queries": self.failed_queries,
        }


async def search_all(
    source: VideoSourceProvider,
    queries: list[SearchQuery],
    max_results: int,
) -> tuple[dict[str, tuple[VideoCandidate, str]], list[str]]:
    """Run every query; a failed query is logged and skipped.

    Returns candidates keyed by video id (first query wins) and the failed
    queries. A quota error stops the remaining searches.
    """
    found: dict[str, tuple[VideoCandidate, str]] = {}
    failed: list[str] = []
    for position, q in enumerate(queries):
        try:
            results = await source.search(q.query, q.language, max_results)
        except TransientProviderError as e:
            logger.warning("search_quota_exhausted", query=q.query, error=str(e))
            failed.extend(x.query for x in queries[position:])
            break
        except ProviderError as e:
            logger.warning("search_query_failed", query=q.query, error=str(e))
            failed.append(q.query)
            continue
        for candidate in results:
            found.setdefault(candidate.video_id, (candidate, q.query))
    return found, failed


async def run_discovery(
    llm: LLMClient,
    source: VideoSourceProvider,
    session_factory: SessionFactory = get_session_context,
    max_new_jobs: int | None = None,
) -> DiscoveryResult:
    """Collect context, generate queries, search, evaluate and create jobs.

    Sessions are opened only around database work, never across model or
    search calls.
    """
    result = DiscoveryResult()
    limit = max_new_jobs if max_new_jobs is not None else settings.max_new_jobs_per_run

    with session_factory() as session:
        context = collect_search_context(session)

    queries = await generate_queries(llm, context, settings.max_queries_per_run)
    result.queries = len(queries)
    if not queries:
        logger.warning("discovery_no_queries")
        return result

    found, result.failed_queries = await search_all(source, queries, settings.max_results_per_query)
    result.candidates = len(found)

    with session_factory() as session:
        known = known_source_ids(session, found)
    fresh = [candidate for vid, (candidate, _) in found.items() if vid not in known]
    if not fresh:
        logger.info("discovery_no_new_candidates", candidates=len(found))
        return result

    evaluated = await evaluate_candidates(llm, fresh)
    result.evaluated = len(evaluated)
    selected = select_candidates(
        evaluated,
        Recommendation.parse(settings.min_recommendation),
        limit,
    )

    for item in selected:
        try:
            with session_factory() as session:
                # Another run may have taken the video since the first check
                if known_source_ids(session, [item.video_id]):
                    continue
                job = create_job(session, item, search_query=found[item.video_id][1])
                result.created_job_ids.append(str(job.id))
        except IntegrityError:
            logger.info("discovery_duplicate_skipped", source_video_id=item.video_id)

    logger.info("discovery_completed", **{k: v for k, v in result.to_dict().items() if k != "created_job_ids"})
    return result
