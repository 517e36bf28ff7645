"""Enriched natural-language summaries of computed statistics.

A summary is produced by an external text generator. Whatever goes wrong with
that call, the caller still gets text: the locally computed insight.
"""

import asyncio
import logging
from typing import Optional, Union

from ..clients.base import TextGenerator
from ..clients.gemini import GeminiClient
from ..config import ConfigModel, get_config
from ..models import Period, StatisticsData


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


def build_summary_prompt(stats: StatisticsData, period: Union[Period, str]) -> str:
    """Build the prompt describing ``stats`` for the text generator."""
    period = Period.parse(period)
    categories = ", ".join(f"{c.label} {c.rate}%" for c in stats.categories)
    return (
        "You are an Alzheimer's care assistant analyzing activity trends. "
        "Write 2-3 supportive sentences for a caregiver.\n\n"
        f"Period: {period.value}\n"
        f"Completion: {stats.completion_score}%\n"
        f"Completed Tasks: {stats.total_completed}/{stats.total_tasks}\n"
        f"Total Minutes: {stats.total_minutes}\n"
        f"Current Streak: {stats.current_streak}\n"
        f"Categories: {categories}\n"
        f"Trend Change: {stats.change_from_last_period}%\n\n"
        "Focus on encouragement and one practical suggestion."
    )


class SummaryGenerator:
    """Requests one enriched summary per call, with a bounded wait."""

    def __init__(self, generator: TextGenerator, timeout: float = DEFAULT_TIMEOUT):
        self.generator = generator
        self.timeout = timeout

    async def generate_enriched_summary(self, stats: StatisticsData,
                                        period: Union[Period, str]) -> str:
        """Return generated text, or ``stats.insight`` on any failure."""
        try:
            prompt = build_summary_prompt(stats, period)
            text = await asyncio.wait_for(self.generator.generate(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Summary generation timed out after %.1fs; using local insight",
                           self.timeout)
            return stats.insight
        except Exception as e:
            logger.warning("Error generating summary: %s; using local insight", e)
            return stats.insight

        if not isinstance(text, str) or not text.strip():
            logger.warning("Summary generator returned no text; using local insight")
            return stats.insight

        return text.strip()


async def generate_enriched_summary(stats: StatisticsData, period: Union[Period, str],
                                    generator: Optional[TextGenerator] = None,
                                    config: Optional[ConfigModel] = None) -> str:
    """Generate a summary, building a Gemini client from config when needed.

    Without a configured API key no request is made and the local insight is
    returned.
    """
    config = config or get_config()

    if generator is not None:
        return await SummaryGenerator(generator, config.summary_timeout).generate_enriched_summary(
            stats, period
        )

    if not config.summary_enabled:
        logger.info("Summary generation not configured; using local insight")
        return stats.insight

    async with GeminiClient(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        timeout=config.summary_timeout,
        base_url=config.gemini_base_url,
    ) as client:
        return await SummaryGenerator(client, config.summary_timeout).generate_enriched_summary(
            stats, period
        )
