"""Content-level language model capability."""

from abc import ABC, abstractmethod

from clip_curator.adapters.llm import prompts
from clip_curator.adapters.llm.base import LLMMessage, LLMProvider
from clip_curator.adapters.llm.parsing import (
    parse_edit_plan,
    parse_evaluations,
    parse_metadata,
    parse_search_queries,
    parse_segments,
)
from clip_curator.config import settings
from clip_curator.domain.enums import ContentLanguage
from clip_curator.domain.models import (
    ContentMetadata,
    EditPlan,
    EvaluatedVideo,
    SearchContext,
    SearchQuery,
    Segment,
    VideoCandidate,
)
from clip_curator.logging import get_logger
from clip_curator.utils.async_utils import with_timeout

logger = get_logger(__name__)


class LLMClient(ABC):
    """What the pipeline asks of a language model.

    Structured methods never raise on malformed model output; they return
    the parser's safe default instead. Transport errors still propagate so
    the chunk runner can retry them.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    def model(self) -> str:
        return self.name

    @abstractmethod
    async def analyze(self, prompt: str) -> str:
        """Free-form completion."""
        ...

    @abstractmethod
    async def extract_key_segments(self, transcript: str) -> list[Segment]:
        ...

    @abstractmethod
    async def generate_edit_plan(self, transcript: str) -> EditPlan:
        ...

    @abstractmethod
    async def generate_metadata(self, content: str, language: ContentLanguage) -> ContentMetadata:
        ...

    @abstractmethod
    async def generate_search_queries(self, context: SearchContext) -> list[SearchQuery]:
        ...

    @abstractmethod
    async def evaluate_videos(self, candidates: list[VideoCandidate]) -> list[EvaluatedVideo]:
        ...

    async def health_check(self) -> bool:
        return True


def _batches(items: list[VideoCandidate], size: int) -> list[list[VideoCandidate]]:
    size = max(1, size)
    return [items[i : i + size] for i in range(0, len(items), size)]


def format_candidates(batch: list[VideoCandidate]) -> str:
    return "\n".join(
        prompts.CANDIDATE_LINE_TEMPLATE.format(
            index=i,
            title=c.title,
            channel=c.channel_title or "unknown",
            views=c.view_count if c.view_count is not None else "unknown",
            duration=c.duration or "unknown",
            description=(c.description or "")[:300].replace("\n", " "),
        )
        for i, c in enumerate(batch)
    )


class PromptedLLMClient(LLMClient):
    """Implements the capability with prompts over any ``LLMProvider``."""

    def __init__(
        self,
        provider: LLMProvider,
        batch_size: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self._provider = provider
        self.batch_size = batch_size or settings.evaluation_batch_size
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds

    @property
    def name(self) -> str:
        return self._provider.name

    @property
    def model(self) -> str:
        return self._provider.model

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = True,
    ) -> str:
        messages = [
            LLMMessage(role="system", content=system_prompt),
            LLMMessage(role="user", content=user_prompt),
        ]
        response = await with_timeout(
            self._provider.complete(
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                json_mode=json_mode,
            ),
            self.timeout,
        )
        return response.content

    async def analyze(self, prompt: str) -> str:
        return await self._complete(prompts.ANALYZE_SYSTEM_PROMPT, prompt, json_mode=False)

    async def extract_key_segments(self, transcript: str) -> list[Segment]:
        content = await self._complete(
            prompts.SEGMENTS_SYSTEM_PROMPT,
            prompts.SEGMENTS_USER_TEMPLATE.format(transcript=transcript),
            temperature=0.3,
        )
        segments = parse_segments(content)
        logger.info("key_segments_extracted", provider=self.name, count=len(segments))
        return segments

    async def generate_edit_plan(self, transcript: str) -> EditPlan:
        content = await self._complete(
            prompts.EDIT_PLAN_SYSTEM_PROMPT,
            prompts.EDIT_PLAN_USER_TEMPLATE.format(transcript=transcript),
            temperature=0.3,
        )
        plan = parse_edit_plan(content)
        logger.info(
            "edit_plan_generated",
            provider=self.name,
            clips=len(plan.clips),
            strategy=plan.editing_strategy,
        )
        return plan

    async def generate_metadata(self, content: str, language: ContentLanguage) -> ContentMetadata:
        response = await self._complete(
            prompts.METADATA_SYSTEM_PROMPT,
            prompts.METADATA_USER_TEMPLATE.format(
                language_name=language.display_name,
                native_name=language.native_name,
                content=content,
                categories=", ".join(settings.app_categories),
            ),
        )
        return parse_metadata(response, language)

    async def generate_search_queries(self, context: SearchContext) -> list[SearchQuery]:
        response = await self._complete(
            prompts.SEARCH_QUERIES_SYSTEM_PROMPT,
            prompts.SEARCH_QUERIES_USER_TEMPLATE.format(
                categories=", ".join(context.app_categories) or "any",
                keywords=", ".join(context.popular_keywords) or "none",
                top_tags=", ".join(context.top_performing_tags) or "none yet",
                seasonal=context.seasonal_context or "none",
                underrepresented=", ".join(context.underrepresented_categories) or "none",
                recent=", ".join(context.recently_published[:20]) or "none",
                languages=", ".join(
                    f"{lang.value} ({lang.display_name})" for lang in context.target_languages
                ),
            ),
            temperature=0.8,
        )
        return parse_search_queries(response)

    async def evaluate_videos(self, candidates: list[VideoCandidate]) -> list[EvaluatedVideo]:
        results: list[EvaluatedVideo] = []
        batches = _batches(candidates, self.batch_size)
        for number, batch in enumerate(batches, start=1):
            try:
                response = await self._complete(
                    prompts.EVALUATION_SYSTEM_PROMPT,
                    prompts.EVALUATION_USER_TEMPLATE.format(videos=format_candidates(batch)),
                    temperature=0.2,
                )
                evaluated = parse_evaluations(response, batch)
            except Exception as e:
                # One bad batch must not lose the others
                logger.error(
                    "evaluation_batch_failed",
                    provider=self.name,
                    batch=number,
                    batch_count=len(batches),
                    error=str(e),
                )
                continue
            results.extend(evaluated)

        logger.info(
            "videos_evaluated",
            provider=self.name,
            candidates=len(candidates),
            evaluated=len(results),
        )
        return results

    async def health_check(self) -> bool:
        return await self._provider.health_check()
