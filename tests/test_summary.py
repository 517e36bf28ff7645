"""Tests for enriched summary generation."""

import asyncio
import json
import logging
from unittest.mock import AsyncMock

import httpx
import pytest

from care_stats.clients.base import (
    AuthenticationError,
    NetworkError,
    RateLimitError,
    ResponseFormatError,
    TextGenerator,
)
from care_stats.clients.gemini import GeminiClient, SYSTEM_INSTRUCTION
from care_stats.config import ConfigModel
from care_stats.models import AssetType, Period, Task, TaskAsset
from care_stats.services.statistics import compute_statistics
from care_stats.services.summary import (
    SummaryGenerator,
    build_summary_prompt,
    generate_enriched_summary,
)


class StaticGenerator(TextGenerator):
    def __init__(self, reply="Lovely week. Try a short audio session tomorrow."):
        self.reply = reply
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


class FailingGenerator(TextGenerator):
    def __init__(self, error: Exception):
        self.error = error

    async def generate(self, prompt: str) -> str:
        raise self.error


class SlowGenerator(TextGenerator):
    async def generate(self, prompt: str) -> str:
        await asyncio.sleep(5)
        return "too late"


@pytest.fixture
def stats(fixed_now):
    tasks = [
        Task(id="1", is_completed=True, assets=[TaskAsset(id="a", type=AssetType.GAME, duration=20)]),
        Task(id="2", is_completed=False, assets=[TaskAsset(id="b", type=AssetType.AUDIO, duration=10)]),
    ]
    return compute_statistics(tasks, Period.WEEK, now=fixed_now)


def gemini_with(handler) -> GeminiClient:
    transport = httpx.MockTransport(handler)
    return GeminiClient(api_key="test-key", client=httpx.AsyncClient(transport=transport))


class TestPrompt:

    def test_prompt_embeds_aggregates(self, stats):
        prompt = build_summary_prompt(stats, Period.WEEK)

        assert "Period: Week" in prompt
        assert f"Completion: {stats.completion_score}%" in prompt
        assert "Completed Tasks: 1/2" in prompt
        assert "Total Minutes: 20" in prompt
        assert f"Current Streak: {stats.current_streak}" in prompt
        assert "Categories: Games 100%, Quizzes 0%, Audio 0%, Memory 0%" in prompt
        assert f"Trend Change: {stats.change_from_last_period}%" in prompt

    def test_prompt_accepts_period_name(self, stats):
        assert "Period: Month" in build_summary_prompt(stats, "month")


class TestSummaryGenerator:

    async def test_returns_generated_text(self, stats):
        generator = StaticGenerator("  Great consistency this week.  ")
        text = await SummaryGenerator(generator).generate_enriched_summary(stats, Period.WEEK)

        assert text == "Great consistency this week."
        assert len(generator.prompts) == 1

    @pytest.mark.parametrize("error", [
        NetworkError("offline"),
        RateLimitError("quota"),
        AuthenticationError("bad key"),
        ResponseFormatError("empty"),
        RuntimeError("unexpected"),
    ])
    async def test_failures_fall_back_to_insight(self, stats, error):
        text = await SummaryGenerator(FailingGenerator(error)).generate_enriched_summary(
            stats, Period.WEEK
        )
        assert text == stats.insight

    async def test_timeout_falls_back_to_insight(self, stats):
        generator = SummaryGenerator(SlowGenerator(), timeout=0.01)
        assert await generator.generate_enriched_summary(stats, Period.WEEK) == stats.insight

    async def test_blank_reply_falls_back_to_insight(self, stats):
        text = await SummaryGenerator(StaticGenerator("   ")).generate_enriched_summary(
            stats, Period.WEEK
        )
        assert text == stats.insight

    async def test_without_api_key_no_request_is_made(self, stats):
        with pytest.MonkeyPatch.context() as mp:
            factory = AsyncMock()
            mp.setattr("care_stats.services.summary.GeminiClient", factory)
            text = await generate_enriched_summary(stats, Period.WEEK, config=ConfigModel())

        assert text == stats.insight
        factory.assert_not_called()

    async def test_explicit_generator_is_used(self, stats):
        generator = StaticGenerator("Keep going.")
        text = await generate_enriched_summary(stats, Period.WEEK, generator=generator,
                                               config=ConfigModel())
        assert text == "Keep going."

    async def test_http_failure_falls_back_to_insight(self, stats):
        client = gemini_with(lambda request: httpx.Response(500, text="boom"))
        async with client:
            text = await SummaryGenerator(client).generate_enriched_summary(stats, Period.WEEK)
        assert text == stats.insight


class TestGeminiClient:

    async def test_successful_generation(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "caregiver."}]}}]
            })

        async with gemini_with(handler) as client:
            text = await client.generate("How was the week?")

        assert text == "Hello caregiver."
        assert seen["url"].path.endswith("/models/gemini-2.0-flash:generateContent")
        assert seen["headers"]["x-goog-api-key"] == "test-key"
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "How was the week?"
        assert seen["body"]["systemInstruction"]["parts"][0]["text"] == SYSTEM_INSTRUCTION

    async def test_api_key_stays_out_of_url_and_logs(self, caplog):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "ok"}]}}]})

        transport = httpx.MockTransport(handler)
        client = GeminiClient(api_key="SECRETKEY123",
                              client=httpx.AsyncClient(transport=transport))
        with caplog.at_level(logging.DEBUG):
            async with client:
                await client.generate("prompt")

        assert "key" not in seen["url"].params
        assert "SECRETKEY123" not in str(seen["url"])
        assert "SECRETKEY123" not in caplog.text

    @pytest.mark.parametrize("status,error", [
        (401, AuthenticationError),
        (403, AuthenticationError),
        (429, RateLimitError),
        (500, NetworkError),
        (400, NetworkError),
    ])
    async def test_status_errors(self, status, error):
        async with gemini_with(lambda request: httpx.Response(status, text="nope")) as client:
            with pytest.raises(error):
                await client.generate("prompt")

    async def test_empty_candidates(self):
        async with gemini_with(lambda request: httpx.Response(200, json={"candidates": []})) as client:
            with pytest.raises(ResponseFormatError):
                await client.generate("prompt")

    async def test_non_json_body(self):
        async with gemini_with(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(ResponseFormatError):
                await client.generate("prompt")

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        async with gemini_with(handler) as client:
            with pytest.raises(NetworkError):
                await client.generate("prompt")

    def test_missing_api_key(self):
        with pytest.raises(AuthenticationError):
            GeminiClient(api_key="")
