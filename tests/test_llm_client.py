"""Tests for the prompted language model client."""

import json

import httpx
import pytest

from clip_curator.adapters.llm import get_llm_client
from clip_curator.adapters.llm.client import PromptedLLMClient
from clip_curator.adapters.llm.mock import MockLLMClient
from clip_curator.adapters.llm.stub import StubLLMProvider
from clip_curator.domain.enums import ContentLanguage, Recommendation
from clip_curator.domain.models import SearchContext, VideoCandidate


def _candidates(n: int) -> list[VideoCandidate]:
    return [
        VideoCandidate(video_id=f"v{i}", title=f"Lecture {i}", channel_title="MIT", duration="PT10M")
        for i in range(n)
    ]


def _evaluation_reply(count: int, recommendation: object = "RECOMMENDED") -> str:
    return json.dumps(
        {
            "evaluations": [
                {
                    "index": i,
                    "relevanceScore": 80,
                    "educationalValue": 80,
                    "shortFormSuitability": 80,
                    "predictedQuality": 70 + i,
                    "recommendation": recommendation,
                }
                for i in range(count)
            ]
        }
    )


class TestPromptedLLMClient:
    @pytest.mark.asyncio
    async def test_evaluates_in_batches(self):
        provider = StubLLMProvider([_evaluation_reply(2), _evaluation_reply(2), _evaluation_reply(1)])
        client = PromptedLLMClient(provider, batch_size=2, timeout=0)

        results = await client.evaluate_videos(_candidates(5))

        assert len(provider.calls) == 3
        assert [r.video_id for r in results] == ["v0", "v1", "v2", "v3", "v4"]
        # Indices are relative to each batch
        assert results[2].predicted_quality == 70

    @pytest.mark.asyncio
    async def test_failed_batch_is_skipped(self):
        provider = StubLLMProvider(
            [
                _evaluation_reply(2),
                httpx.ConnectError("connection reset"),
                _evaluation_reply(1),
            ]
        )
        client = PromptedLLMClient(provider, batch_size=2, timeout=0)

        results = await client.evaluate_videos(_candidates(5))

        assert [r.video_id for r in results] == ["v0", "v1", "v4"]

    @pytest.mark.asyncio
    async def test_odd_typed_batch_keeps_earlier_results(self):
        provider = StubLLMProvider([_evaluation_reply(2), _evaluation_reply(2, recommendation=1)])
        client = PromptedLLMClient(provider, batch_size=2, timeout=0)

        results = await client.evaluate_videos(_candidates(4))

        assert [r.video_id for r in results] == ["v0", "v1", "v2", "v3"]
        assert results[0].recommendation == Recommendation.RECOMMENDED
        assert results[3].recommendation == Recommendation.MAYBE

    @pytest.mark.asyncio
    async def test_parse_error_skips_only_that_batch(self, monkeypatch):
        from clip_curator.adapters.llm import client as client_module

        real_parse = client_module.parse_evaluations

        def flaky_parse(text, batch):
            if batch[0].video_id == "v2":
                raise AttributeError("unexpected shape")
            return real_parse(text, batch)

        monkeypatch.setattr(client_module, "parse_evaluations", flaky_parse)
        provider = StubLLMProvider([_evaluation_reply(2), _evaluation_reply(2), _evaluation_reply(1)])
        client = PromptedLLMClient(provider, batch_size=2, timeout=0)

        results = await client.evaluate_videos(_candidates(5))

        assert [r.video_id for r in results] == ["v0", "v1", "v4"]

    @pytest.mark.asyncio
    async def test_garbage_batch_becomes_placeholders(self):
        provider = StubLLMProvider(["Sorry, I can't help with that."])
        client = PromptedLLMClient(provider, batch_size=10, timeout=0)

        results = await client.evaluate_videos(_candidates(3))

        assert len(results) == 3
        assert {r.recommendation for r in results} == {Recommendation.MAYBE}

    @pytest.mark.asyncio
    async def test_candidates_are_rendered_into_prompt(self):
        provider = StubLLMProvider([_evaluation_reply(1)])
        client = PromptedLLMClient(provider, timeout=0)

        await client.evaluate_videos(_candidates(1))

        user_prompt = provider.calls[0][1].content
        assert "Lecture 0" in user_prompt
        assert "MIT" in user_prompt

    @pytest.mark.asyncio
    async def test_metadata_prompt_names_language(self):
        provider = StubLLMProvider(['{"title": "入門", "tags": ["python"]}'])
        client = PromptedLLMClient(provider, timeout=0)

        metadata = await client.generate_metadata("transcript text", ContentLanguage.JA)

        assert metadata.title == "入門"
        assert metadata.language == ContentLanguage.JA
        assert "Japanese" in provider.calls[0][1].content

    @pytest.mark.asyncio
    async def test_search_queries_prompt_carries_context(self):
        provider = StubLLMProvider(['{"queries": [{"query": "calculus", "language": "en"}]}'])
        client = PromptedLLMClient(provider, timeout=0)
        context = SearchContext(
            app_categories=["MATHEMATICS"],
            seasonal_context="autumn, new semester",
            underrepresented_categories=["HISTORY"],
            target_languages=[ContentLanguage.EN],
        )

        queries = await client.generate_search_queries(context)

        assert [q.query for q in queries] == ["calculus"]
        prompt = provider.calls[0][1].content
        assert "autumn, new semester" in prompt
        assert "HISTORY" in prompt

    @pytest.mark.asyncio
    async def test_edit_plan_malformed_is_empty(self):
        client = PromptedLLMClient(StubLLMProvider(["not a plan"]), timeout=0)

        plan = await client.generate_edit_plan("[00:00:00 - 00:00:10] hello")

        assert plan.is_empty

    @pytest.mark.asyncio
    async def test_transport_errors_propagate_outside_evaluation(self):
        client = PromptedLLMClient(StubLLMProvider([httpx.ReadTimeout("slow")]), timeout=0)

        with pytest.raises(httpx.ReadTimeout):
            await client.extract_key_segments("text")

    @pytest.mark.asyncio
    async def test_analyze_is_free_form(self):
        provider = StubLLMProvider(["plain prose"])
        client = PromptedLLMClient(provider, timeout=0)

        assert await client.analyze("summarize") == "plain prose"


def test_factory_returns_mock():
    client = get_llm_client("mock")
    assert isinstance(client, MockLLMClient)


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError):
        get_llm_client("nonexistent")
