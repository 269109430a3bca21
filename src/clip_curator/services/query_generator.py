"""Search query generation."""

from clip_curator.adapters.llm.client import LLMClient
from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import SearchContext, SearchQuery
from clip_curator.logging import get_logger

logger = get_logger(__name__)


def normalize_queries(
    queries: list[SearchQuery],
    languages: list[ContentLanguage],
    limit: int | None = None,
) -> list[SearchQuery]:
    """Clean generated queries.

    Empty queries are dropped, priority is clamped to 1-10, duplicates
    (case-insensitive, per language) are removed and the result is sorted by
    priority descending. Languages outside ``languages`` fall back to Korean.
    """
    allowed = set(languages) or {ContentLanguage.KO}
    seen: set[tuple[str, ContentLanguage]] = set()
    cleaned: list[SearchQuery] = []

    for q in queries:
        text = " ".join(q.query.split())
        if not text:
            continue
        language = q.language if q.language in allowed else ContentLanguage.KO
        key = (text.lower(), language)
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(
            SearchQuery(
                query=text,
                target_category=q.target_category,
                expected_content_type=q.expected_content_type,
                priority=min(10, max(1, q.priority)),
                language=language,
            )
        )

    cleaned.sort(key=lambda q: q.priority, reverse=True)
    if limit is not None:
        cleaned = cleaned[:limit]
    return cleaned


async def generate_queries(
    llm: LLMClient,
    context: SearchContext,
    limit: int | None = None,
) -> list[SearchQuery]:
    """Ask the language model for queries and clean them up."""
    raw = await llm.generate_search_queries(context)
    queries = normalize_queries(raw, context.target_languages, limit)

    covered = {q.language for q in queries}
    missing = [lang.value for lang in context.target_languages if lang not in covered]
    if missing:
        # Balance across languages is requested in the prompt, not enforced
        logger.warning("search_queries_language_missing", languages=missing)

    logger.info(
        "search_queries_generated",
        provider=llm.name,
        raw_count=len(raw),
        count=len(queries),
    )
    return queries
