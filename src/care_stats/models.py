"""Data model for caregiving tasks and the statistics derived from them."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any, Tuple, Union

from .utils.datetime import ensure_aware


class AssetType(Enum):
    """Kinds of sub-activity a task can contain."""
    GAME = "GAME"
    QUIZ = "QUIZ"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"
    PHOTO = "PHOTO"


class RepeatCadence(Enum):
    """How often a task is scheduled to repeat."""
    DAILY = "Daily"
    WEEKLY = "Weekly"
    CUSTOMIZE = "Customize"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            name = value.strip().lower()
            if name == "custom":
                return cls.CUSTOMIZE
            for member in cls:
                if member.value.lower() == name:
                    return member
        return None


class Period(Enum):
    """Statistics aggregation window selector."""
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    YEAR = "Year"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value: Union[str, "Period"]) -> "Period":
        """Accept a Period or its name in any letter case."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown period: {value!r}")


class HighlightType(Enum):
    """Kind of highlight card."""
    ACHIEVEMENT = "achievement"
    STREAK = "streak"
    IMPROVEMENT = "improvement"
    CONCERN = "concern"


def _coerce_enum(enum_cls, value):
    """Return the enum member for ``value``, or the raw value if unknown."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _coerce_duration(value: Any) -> int:
    """Durations are whole, non-negative minutes; anything else reads as 0."""
    try:
        minutes = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, minutes)


_TRUE_STRINGS = {"true", "yes", "y", "1", "on"}
_FALSE_STRINGS = {"false", "no", "n", "0", "off", ""}


def _coerce_bool(value: Any, name: str) -> bool:
    """Read a flag from a bool, 0/1, None, or a common true/false string."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _coerce_days(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"customDays must be a list, got {type(value).__name__}")
    return [str(day) for day in value]


@dataclass
class TaskAsset:
    """A typed, duration-bearing piece of activity content attached to a task."""

    id: str
    type: Union[AssetType, str]
    title: str = ""
    duration: int = 0  # minutes

    def __post_init__(self):
        self.type = _coerce_enum(AssetType, self.type)
        self.duration = _coerce_duration(self.duration)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value if isinstance(self.type, AssetType) else self.type,
            "title": self.title,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskAsset":
        return cls(
            id=str(data.get("id", "")),
            type=str(data.get("type", "")).upper(),
            title=data.get("title", "") or "",
            duration=data.get("duration", 0),
        )


@dataclass
class Task:
    """A schedulable caregiving activity.

    Only ``is_completed`` and ``assets`` feed the statistics math;
    ``repeat`` and ``automation_enabled`` are used by the legacy summary.
    """

    id: str
    title: str = ""
    start_time: str = ""  # HH:mm
    end_time: str = ""  # HH:mm
    repeat: Union[RepeatCadence, str] = RepeatCadence.DAILY
    is_completed: bool = False
    automation_enabled: bool = False
    assets: List[TaskAsset] = field(default_factory=list)

    assigned_to: str = ""
    patient_profile_id: Optional[str] = None
    custom_days: List[str] = field(default_factory=list)
    voice_reminder: bool = False

    def __post_init__(self):
        self.repeat = _coerce_enum(RepeatCadence, self.repeat)
        if self.assets is None:
            self.assets = []

    @property
    def total_minutes(self) -> int:
        """Sum of asset durations; zero for a task without assets."""
        return sum(asset.duration for asset in self.assets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "repeat": self.repeat.value if isinstance(self.repeat, RepeatCadence) else self.repeat,
            "isCompleted": self.is_completed,
            "automationEnabled": self.automation_enabled,
            "assets": [asset.to_dict() for asset in self.assets],
            "assignedTo": self.assigned_to,
            "patientProfileId": self.patient_profile_id,
            "customDays": self.custom_days,
            "voiceReminder": self.voice_reminder,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Create a Task from the app shape (camelCase) or a backend row (snake_case)."""
        if not isinstance(data, dict):
            raise ValueError(f"Task record must be a mapping, got {type(data).__name__}")

        def pick(camel: str, snake: str, default=None):
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        raw_assets = data.get("assets")
        if raw_assets is None:
            raw_assets = data.get("task_assets", [])

        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", "") or "",
            start_time=pick("startTime", "start_time", "") or "",
            end_time=pick("endTime", "end_time", "") or "",
            repeat=data.get("repeat") or RepeatCadence.DAILY,
            is_completed=_coerce_bool(pick("isCompleted", "is_completed"), "isCompleted"),
            automation_enabled=_coerce_bool(
                pick("automationEnabled", "automation_enabled"), "automationEnabled"
            ),
            assets=[TaskAsset.from_dict(a) for a in raw_assets or [] if isinstance(a, dict)],
            assigned_to=pick("assignedTo", "assigned_to", "") or "",
            patient_profile_id=pick("patientProfileId", "patient_profile_id"),
            custom_days=_coerce_days(pick("customDays", "custom_days")),
            voice_reminder=_coerce_bool(pick("voiceReminder", "voice_reminder"), "voiceReminder"),
        )


@dataclass(frozen=True)
class DateRange:
    """Caller-supplied window for the Custom period."""
    start: datetime
    end: datetime

    def __post_init__(self):
        object.__setattr__(self, "start", ensure_aware(self.start))
        object.__setattr__(self, "end", ensure_aware(self.end))


@dataclass(frozen=True)
class DateWindow:
    """Resolved current and previous windows for a period."""
    start: datetime
    end: datetime
    prev_start: datetime
    prev_end: datetime

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "prevStart": self.prev_start.isoformat(),
            "prevEnd": self.prev_end.isoformat(),
        }


@dataclass(frozen=True)
class CategoryStats:
    """Completion breakdown for one activity category."""
    label: str
    count: int  # completed
    skipped: int
    rate: int  # 0-100
    color: str
    icon: str

    @property
    def total(self) -> int:
        return self.count + self.skipped

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "count": self.count,
            "skipped": self.skipped,
            "rate": self.rate,
            "color": self.color,
            "icon": self.icon,
        }


@dataclass(frozen=True)
class DailyActivity:
    """One point of the activity series."""
    day: str  # single-letter day or month label
    date: str  # YYYY-MM-DD
    percentage: int
    tasks_completed: int
    total_tasks: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "date": self.date,
            "percentage": self.percentage,
            "tasksCompleted": self.tasks_completed,
            "totalTasks": self.total_tasks,
        }


@dataclass(frozen=True)
class Highlight:
    """Achievement or concern card surfaced to the caregiver."""
    id: str
    type: HighlightType
    title: str
    description: str
    icon: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
        }


@dataclass(frozen=True)
class StatisticsData:
    """Derived statistics for a task list and period."""
    completion_score: int
    change_from_last_period: int
    categories: Tuple[CategoryStats, ...]
    daily_activity: Tuple[DailyActivity, ...]
    total_completed: int
    total_tasks: int
    total_minutes: int
    average_session_minutes: int
    current_streak: int
    longest_streak: int
    highlights: Tuple[Highlight, ...]
    insight: str

    def category(self, label: str) -> Optional[CategoryStats]:
        """Look up a category by its label."""
        for category in self.categories:
            if category.label == label:
                return category
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "completionScore": self.completion_score,
            "changeFromLastPeriod": self.change_from_last_period,
            "categories": [c.to_dict() for c in self.categories],
            "dailyActivity": [d.to_dict() for d in self.daily_activity],
            "totalCompleted": self.total_completed,
            "totalTasks": self.total_tasks,
            "totalMinutes": self.total_minutes,
            "averageSessionMinutes": self.average_session_minutes,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "highlights": [h.to_dict() for h in self.highlights],
            "insight": self.insight,
        }


@dataclass(frozen=True)
class TaskStatistics:
    """Simple aggregate kept for the older statistics view."""
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    completion_rate: float  # percentage, unrounded
    automated_tasks: int
    manual_tasks: int
    tasks_by_repeat: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "pendingTasks": self.pending_tasks,
            "completionRate": self.completion_rate,
            "automatedTasks": self.automated_tasks,
            "manualTasks": self.manual_tasks,
            "tasksByRepeat": dict(self.tasks_by_repeat),
        }
