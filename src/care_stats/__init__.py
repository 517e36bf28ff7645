"""care_stats - activity statistics for Alzheimer's caregiving tasks."""

__version__ = "0.1.0"

from .models import (
    AssetType,
    RepeatCadence,
    Period,
    Task,
    TaskAsset,
    DateRange,
    StatisticsData,
    TaskStatistics,
)
from .services.statistics import compute_statistics, compute_legacy_statistics
from .services.summary import generate_enriched_summary

__all__ = [
    "AssetType",
    "RepeatCadence",
    "Period",
    "Task",
    "TaskAsset",
    "DateRange",
    "StatisticsData",
    "TaskStatistics",
    "compute_statistics",
    "compute_legacy_statistics",
    "generate_enriched_summary",
    "__version__",
]
