"""Statistics engine for caregiving activity.

Derives everything the statistics view shows from a flat task list:

- completion score and a deterministic period-over-period trend
- per-category completion rates (games, quizzes, audio, memory)
- a daily (or monthly, for a year) activity series and the streaks in it
- highlight cards and a one-line insight

All calculations are pure. Nothing here performs I/O or keeps state between
calls, so the same tasks and period always give the same result.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..models import (
    AssetType,
    CategoryStats,
    DailyActivity,
    DateRange,
    DateWindow,
    Highlight,
    HighlightType,
    Period,
    RepeatCadence,
    StatisticsData,
    Task,
    TaskStatistics,
)
from ..utils.datetime import (
    end_of_day,
    ensure_aware,
    sunday_first_weekday,
    last_day_of_previous_month,
    now_utc,
    shift_months,
    start_of_day,
    to_iso_date,
)


logger = logging.getLogger(__name__)


DAY_LABELS = ("S", "M", "T", "W", "T", "F", "S")  # Sunday first
MONTH_LABELS = ("J", "F", "M", "A", "M", "J", "J", "A", "S", "O", "N", "D")

DAILY_POINTS = 7
MONTHLY_POINTS = 12
MAX_HIGHLIGHTS = 4

# (label, asset types, color, icon)
CATEGORY_DEFINITIONS: Tuple[Tuple[str, Tuple[AssetType, ...], str, str], ...] = (
    ("Games", (AssetType.GAME,), "#8A6FE8", "🎮"),
    ("Quizzes", (AssetType.QUIZ,), "#4ECDC4", "🧠"),
    ("Audio", (AssetType.AUDIO,), "#FF8C42", "🎵"),
    ("Memory", (AssetType.VIDEO, AssetType.PHOTO), "#3B82F6", "📷"),
)

INSIGHT_NO_TASKS = (
    "No tasks created yet. Start by adding a few small daily activities to build routine."
)
INSIGHT_DEFAULT = (
    "Activities are being tracked. Small daily consistency helps long-term cognitive routine."
)


def _round_half_up(value: float) -> int:
    """Round .5 upwards, matching how the mobile client rounds percentages."""
    return int(math.floor(value + 0.5))


def _percentage(part: int, whole: int) -> int:
    return _round_half_up(part / whole * 100) if whole > 0 else 0


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def resolve_date_window(period: Union[Period, str],
                        custom_range: Optional[DateRange] = None,
                        now: Optional[datetime] = None) -> DateWindow:
    """Resolve the current and previous windows for ``period``.

    Weeks start on Sunday. A Custom period's previous window has the same
    length and ends one microsecond before the custom start. A Custom period
    without a range collapses to the instant ``now``.
    """
    period = Period.parse(period)
    now = ensure_aware(now) if now is not None else now_utc()

    if period == Period.CUSTOM and custom_range is not None:
        start = custom_range.start
        end = custom_range.end
        duration = end - start
        prev_end = start - timedelta(microseconds=1)
        return DateWindow(start=start, end=end,
                          prev_start=prev_end - duration, prev_end=prev_end)

    if period == Period.DAY:
        start = start_of_day(now)
        yesterday = now - timedelta(days=1)
        return DateWindow(start=start, end=now,
                          prev_start=start_of_day(yesterday), prev_end=end_of_day(yesterday))

    if period == Period.WEEK:
        start = start_of_day(now - timedelta(days=sunday_first_weekday(now)))
        return DateWindow(start=start, end=now,
                          prev_start=start - timedelta(days=7),
                          prev_end=end_of_day(start - timedelta(days=1)))

    if period == Period.MONTH:
        start = start_of_day(now.replace(day=1))
        return DateWindow(start=start, end=now,
                          prev_start=shift_months(start, -1),
                          prev_end=last_day_of_previous_month(now))

    if period == Period.YEAR:
        start = start_of_day(now.replace(month=1, day=1))
        return DateWindow(start=start, end=now,
                          prev_start=start.replace(year=start.year - 1),
                          prev_end=end_of_day(now.replace(year=now.year - 1, month=12, day=31)))

    return DateWindow(start=now, end=now, prev_start=now, prev_end=now)


def trend_estimator(seed: str) -> int:
    """Map a seed string to a stable trend value in [-8, 17].

    Uses the 31-multiplier string hash with signed 32-bit wraparound so the
    values agree with the mobile client for the same seed.
    """
    value = 0
    for char in seed:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value) % 26 - 8


def deterministic_trend(tasks: Sequence[Task], period: Union[Period, str]) -> int:
    """Trend versus the previous period, derived from the task counts."""
    period = Period.parse(period)
    completed = sum(1 for task in tasks if task.is_completed)
    return trend_estimator(f"{period.value}:{len(tasks)}:{completed}")


def calculate_categories(tasks: Iterable[Task]) -> Tuple[CategoryStats, ...]:
    """Bucket every asset of every task into the four display categories.

    An asset counts as completed when its task is completed. Assets of an
    unknown type are ignored.
    """
    totals: Dict[AssetType, int] = {asset_type: 0 for asset_type in AssetType}
    completed: Dict[AssetType, int] = {asset_type: 0 for asset_type in AssetType}

    for task in tasks:
        for asset in task.assets:
            if not isinstance(asset.type, AssetType):
                continue
            totals[asset.type] += 1
            if task.is_completed:
                completed[asset.type] += 1

    categories = []
    for label, types, color, icon in CATEGORY_DEFINITIONS:
        total = sum(totals[t] for t in types)
        done = sum(completed[t] for t in types)
        categories.append(CategoryStats(
            label=label,
            count=done,
            skipped=total - done,
            rate=_percentage(done, total),
            color=color,
            icon=icon,
        ))
    return tuple(categories)


def build_activity_series(period: Period, completion_score: int, total_completed: int,
                          total_tasks: int, change: int, now: datetime) -> Tuple[DailyActivity, ...]:
    """Synthesize the activity series, oldest point first.

    There is no per-day completion history, so earlier points are smoothed
    approximations around the current score. The most recent point always
    carries the live score and counts.
    """
    series = []

    if period == Period.YEAR:
        for i in range(MONTHLY_POINTS - 1, -1, -1):
            date = shift_months(now, -i)
            if i == 0:
                percentage, done, total = completion_score, total_completed, total_tasks
            else:
                percentage = _clamp(35 + change + (11 - i) * 2, 0, 65)
                done = max(0, _round_half_up(total_completed / 12 * (12 - i) / 2))
                total = max(1, _round_half_up(total_tasks / 12 * (12 - i) / 2) + 1)
            series.append(DailyActivity(
                day=MONTH_LABELS[date.month - 1],
                date=to_iso_date(date),
                percentage=percentage,
                tasks_completed=done,
                total_tasks=total,
            ))
        return tuple(series)

    for i in range(DAILY_POINTS - 1, -1, -1):
        date = now - timedelta(days=i)
        if i == 0:
            percentage, done, total = completion_score, total_completed, total_tasks
        else:
            percentage = _clamp(completion_score - 18 + (6 - i) * 4, 0, 95)
            done = max(0, _round_half_up(total_completed / 7 * (7 - i) / 2))
            total = max(1, _round_half_up(total_tasks / 7 * (7 - i) / 2) + 1)
        series.append(DailyActivity(
            day=DAY_LABELS[sunday_first_weekday(date)],
            date=to_iso_date(date),
            percentage=percentage,
            tasks_completed=done,
            total_tasks=total,
        ))
    return tuple(series)


def calculate_streaks(series: Sequence[DailyActivity]) -> Tuple[int, int]:
    """Return (current, longest) runs of non-zero points.

    ``series`` is ordered oldest first. The current streak is the run that
    reaches the most recent point, so it is 0 when the latest point is empty.
    """
    running = 0
    longest = 0
    for point in series:
        if point.percentage > 0:
            running += 1
            longest = max(longest, running)
        else:
            running = 0
    return running, longest


def _best_category(categories: Sequence[CategoryStats]) -> CategoryStats:
    best = categories[0]
    for category in categories[1:]:
        if category.rate > best.rate:
            best = category
    return best


def _weakest_category(categories: Sequence[CategoryStats]) -> CategoryStats:
    weakest = categories[0]
    for category in categories[1:]:
        if category.rate < weakest.rate:
            weakest = category
    return weakest


def generate_highlights(completion_score: int, current_streak: int, change: int,
                        total_tasks: int, categories: Sequence[CategoryStats],
                        period: Period) -> Tuple[Highlight, ...]:
    """Apply the highlight rules in priority order, keeping at most four cards."""
    highlights: List[Highlight] = []

    if completion_score >= 80:
        highlights.append(Highlight(
            id="h1",
            type=HighlightType.ACHIEVEMENT,
            title="Outstanding Progress",
            description=f"{completion_score}% completion this {period.value.lower()}",
            icon="🏆",
            color="#92400E",
        ))

    if current_streak >= 3:
        highlights.append(Highlight(
            id="h2",
            type=HighlightType.STREAK,
            title=f"{current_streak} Day Streak",
            description="Consistency is building healthy routine.",
            icon="🔥",
            color="#C2410C",
        ))

    if change > 10:
        highlights.append(Highlight(
            id="h3",
            type=HighlightType.IMPROVEMENT,
            title="Major Improvement",
            description=f"{change}% above last period.",
            icon="📈",
            color="#166534",
        ))

    if completion_score < 30 and total_tasks > 0:
        highlights.append(Highlight(
            id="h4",
            type=HighlightType.CONCERN,
            title="Needs Attention",
            description="Activity is low; consider shorter sessions.",
            icon="💡",
            color="#1E40AF",
        ))

    if categories:
        best = _best_category(categories)
        if best.rate > 0:
            highlights.append(Highlight(
                id="h5",
                type=HighlightType.ACHIEVEMENT,
                title=f"{best.label} Champion",
                description=f"{best.rate}% completion in {best.label.lower()}.",
                icon="⭐",
                color="#6D28D9",
            ))

    return tuple(highlights[:MAX_HIGHLIGHTS])


def generate_insight(total_tasks: int, completion_score: int,
                     categories: Sequence[CategoryStats]) -> str:
    """Pick the insight template for the computed aggregates."""
    if total_tasks == 0:
        return INSIGHT_NO_TASKS
    if completion_score >= 80:
        best = _best_category(categories)
        return f"Excellent progress. {best.label} is strongest at {best.rate}% completion."
    if completion_score >= 50:
        weakest = _weakest_category(categories)
        return f"Good momentum. Consider boosting {weakest.label.lower()} to balance activity variety."
    return INSIGHT_DEFAULT


class StatisticsEngine:
    """Computes StatisticsData from a task list.

    The engine holds no mutable state; ``clock`` only supplies "now" when a
    call does not pass one.
    """

    def __init__(self, clock: Callable[[], datetime] = now_utc):
        self.clock = clock

    def compute(self, tasks: Sequence[Task],
                period: Union[Period, str] = Period.MONTH,
                custom_range: Optional[DateRange] = None,
                now: Optional[datetime] = None) -> StatisticsData:
        """Generate statistics for ``tasks`` over ``period``"""
        period = Period.parse(period)
        now = ensure_aware(now) if now is not None else self.clock()
        tasks = list(tasks)

        # The window is not applied to the task list: every aggregate below
        # covers all tasks passed in.
        window = resolve_date_window(period, custom_range, now)
        logger.debug("Statistics window for %s: %s", period.value, window.to_dict())

        total_tasks = len(tasks)
        completed_tasks = [task for task in tasks if task.is_completed]
        total_completed = len(completed_tasks)
        completion_score = _percentage(total_completed, total_tasks)

        total_minutes = sum(task.total_minutes for task in completed_tasks)
        average_session_minutes = (
            _round_half_up(total_minutes / total_completed) if total_completed > 0 else 0
        )

        change = deterministic_trend(tasks, period)
        categories = calculate_categories(tasks)

        daily_activity = build_activity_series(
            period, completion_score, total_completed, total_tasks, change, now
        )
        current_streak, longest_streak = calculate_streaks(daily_activity)

        highlights = generate_highlights(
            completion_score, current_streak, change, total_tasks, categories, period
        )
        insight = generate_insight(total_tasks, completion_score, categories)

        return StatisticsData(
            completion_score=completion_score,
            change_from_last_period=change,
            categories=categories,
            daily_activity=daily_activity,
            total_completed=total_completed,
            total_tasks=total_tasks,
            total_minutes=total_minutes,
            average_session_minutes=average_session_minutes,
            current_streak=current_streak,
            longest_streak=longest_streak,
            highlights=highlights,
            insight=insight,
        )


_default_engine = StatisticsEngine()


def compute_statistics(tasks: Sequence[Task],
                       period: Union[Period, str] = Period.MONTH,
                       custom_range: Optional[DateRange] = None,
                       now: Optional[datetime] = None) -> StatisticsData:
    """Compute statistics with the default engine."""
    return _default_engine.compute(tasks, period, custom_range, now)


# Compatibility helpers for the older statistics view.

def compute_legacy_statistics(tasks: Sequence[Task]) -> TaskStatistics:
    """Completion, automation and repeat-cadence counts over all tasks."""
    total = len(tasks)
    completed = sum(1 for task in tasks if task.is_completed)
    automated = sum(1 for task in tasks if task.automation_enabled)

    return TaskStatistics(
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=total - completed,
        completion_rate=(completed / total * 100) if total > 0 else 0.0,
        automated_tasks=automated,
        manual_tasks=total - automated,
        tasks_by_repeat={
            cadence.value: sum(1 for task in tasks if task.repeat == cadence)
            for cadence in RepeatCadence
        },
    )


def weekly_completion_data(tasks: Sequence[Task],
                           now: Optional[datetime] = None) -> List[Dict[str, Union[str, int]]]:
    """Per-day completed/total counts from the weekly activity series."""
    stats = compute_statistics(tasks, Period.WEEK, now=now)
    return [
        {"day": point.day, "completed": point.tasks_completed, "total": point.total_tasks}
        for point in stats.daily_activity
    ]


def today_completion_rate(tasks: Sequence[Task]) -> float:
    """Unrounded completion percentage of ``tasks``."""
    if not tasks:
        return 0.0
    completed = sum(1 for task in tasks if task.is_completed)
    return completed / len(tasks) * 100
