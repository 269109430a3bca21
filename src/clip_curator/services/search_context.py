"""Search context collection.

Gathers the signals that steer query generation: catalog taxonomy, seed
keywords, what already performs well, what was published recently, and which
categories are thin.
"""

from collections import Counter
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clip_curator.config import settings
from clip_curator.db.models import ContentJobModel, TagModel
from clip_curator.domain.enums import ContentLanguage, JobStatus
from clip_curator.domain.models import SearchContext
from clip_curator.logging import get_logger

logger = get_logger(__name__)

RECENT_TITLES_LIMIT = 20
UNDERREPRESENTED_LIMIT = 5
TOP_TAGS_LIMIT = 10

FALLBACK_UNDERREPRESENTED = ["SCIENCE", "HISTORY", "ART", "PSYCHOLOGY", "FINANCE"]

SEASONAL_KEYWORDS = {
    1: "new year goals, planning, habit building, motivation",
    2: "winter, valentine's day, self improvement",
    3: "spring, new semester, job preparation",
    4: "spring, outdoor activities, flowers",
    5: "family month, parents, children",
    6: "summer preparation, diet, vacation planning",
    7: "summer vacation, water activities, health",
    8: "vacation, reading, self development",
    9: "autumn, new semester, job hunting",
    10: "halloween, autumn festivals, foliage",
    11: "college entrance exams, year-end preparation, black friday",
    12: "christmas, new year goals, year in review, motivation",
}


def seasonal_hint(today: date | None = None) -> str:
    today = today or date.today()
    return SEASONAL_KEYWORDS[today.month]


def recently_published_titles(session: Session, limit: int = RECENT_TITLES_LIMIT) -> list[str]:
    """Titles of the most recently published jobs, newest first."""
    jobs = session.execute(
        select(ContentJobModel)
        .where(
            ContentJobModel.deleted_at.is_(None),
            ContentJobModel.status == JobStatus.PUBLISHED.value,
        )
        .order_by(ContentJobModel.published_at.desc(), ContentJobModel.created_at.desc())
        .limit(limit)
    ).scalars()
    return [job.generated_title or job.source_title for job in jobs]


def underrepresented_categories(
    session: Session,
    categories: list[str],
    limit: int = UNDERREPRESENTED_LIMIT,
) -> list[str]:
    """Catalog categories with fewer published jobs than the average category."""
    rows = session.execute(
        select(ContentJobModel.category).where(
            ContentJobModel.deleted_at.is_(None),
            ContentJobModel.status == JobStatus.PUBLISHED.value,
            ContentJobModel.category.is_not(None),
        )
    ).scalars()
    counts = Counter(rows)
    if not counts:
        return FALLBACK_UNDERREPRESENTED[:limit]

    average = sum(counts.values()) / len(counts)
    thin = [c for c in categories if counts.get(c, 0) < average]
    return thin[:limit]


def top_performing_tags(session: Session, limit: int = TOP_TAGS_LIMIT) -> list[str]:
    tags = session.execute(
        select(TagModel.name)
        .where(TagModel.usage_count > 0)
        .order_by(TagModel.usage_count.desc(), TagModel.name.asc())
        .limit(limit)
    ).scalars()
    return list(tags)


def collect_search_context(session: Session, today: date | None = None) -> SearchContext:
    """Build the search context from configuration and published history.

    Database failures degrade to configuration-only signals; discovery still
    runs without history.
    """
    categories = list(settings.app_categories)
    languages = [ContentLanguage.from_code(code) for code in settings.target_languages]

    try:
        recent = recently_published_titles(session)
        thin = underrepresented_categories(session, categories)
        top_tags = top_performing_tags(session)
    except SQLAlchemyError as e:
        logger.warning("search_context_history_unavailable", error=str(e))
        recent, thin, top_tags = [], FALLBACK_UNDERREPRESENTED[:UNDERREPRESENTED_LIMIT], []

    context = SearchContext(
        app_categories=categories,
        popular_keywords=list(settings.popular_keywords),
        top_performing_tags=top_tags or list(settings.popular_keywords),
        seasonal_context=seasonal_hint(today),
        recently_published=recent,
        underrepresented_categories=thin,
        target_languages=list(dict.fromkeys(languages)),
    )

    logger.info(
        "search_context_collected",
        seasonal=context.seasonal_context,
        underrepresented=context.underrepresented_categories,
        recent_count=len(context.recently_published),
        languages=[lang.value for lang in context.target_languages],
    )
    return context
