"""Application services for care_stats."""

from .statistics import (
    StatisticsEngine,
    compute_statistics,
    compute_legacy_statistics,
    resolve_date_window,
    trend_estimator,
    weekly_completion_data,
    today_completion_rate,
)
from .summary import SummaryGenerator, build_summary_prompt, generate_enriched_summary

__all__ = [
    "StatisticsEngine",
    "compute_statistics",
    "compute_legacy_statistics",
    "resolve_date_window",
    "trend_estimator",
    "weekly_completion_data",
    "today_completion_rate",
    "SummaryGenerator",
    "build_summary_prompt",
    "generate_enriched_summary",
]
