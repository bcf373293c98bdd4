"""Core data models for EyeRest.

Defines all dataclasses and enums used across the application:
- Timers: TimerKind, TimerStatus, TimerState, TimerSnapshot, TimeDisplay
- Streaks: DayActivity, StreakData
- Settings: AppSettings
- History: TimerSession, DailyStats
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, NamedTuple, Optional


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------

class TimerKind(Enum):
    """The two named reminder timers."""
    EYE = "eye"
    POSTURE = "posture"

    @classmethod
    def parse(cls, value: "TimerKind | str") -> "TimerKind":
        """Accept a TimerKind or its string value; raise ValueError otherwise."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown timer kind: {value!r}") from None


class TimerStatus(Enum):
    """Lifecycle state of a countdown timer."""
    PAUSED = "paused"    # also the initial idle state
    RUNNING = "running"
    EXPIRED = "expired"


def compute_progress(time_left: int, total_time: int) -> float:
    """Percentage of *total_time* already elapsed, clamped to [0, 100]."""
    if total_time <= 0:
        return 0.0
    percent = (total_time - time_left) / total_time * 100
    return max(0.0, min(percent, 100.0))


@dataclass
class TimerState:
    """Live state of a single countdown timer."""
    is_running: bool
    time_left: int   # seconds
    total_time: int  # seconds
    progress: float = 0.0

    @classmethod
    def fresh(cls, minutes: float) -> "TimerState":
        total = int(minutes * 60)
        return cls(is_running=False, time_left=total, total_time=total, progress=0.0)


@dataclass
class TimerSnapshot:
    """Persisted shadow of a TimerState, stamped with the save time."""
    time_left: int
    total_time: int
    is_running: bool
    progress: float
    last_saved: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimerSnapshot":
        """Build a snapshot from stored JSON.

        Raises KeyError/TypeError/ValueError when *data* is malformed.
        """
        if not isinstance(data, dict):
            raise TypeError("Snapshot must be a JSON object")
        return cls(
            time_left=int(data["time_left"]),
            total_time=int(data["total_time"]),
            is_running=bool(data["is_running"]),
            progress=float(data.get("progress", 0.0)),
            last_saved=int(data["last_saved"]),
        )


class TimeDisplay(NamedTuple):
    """A countdown rendered as whole minutes and zero-padded seconds."""
    minutes: int
    seconds: str
    display: str


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

DAILY_EYE_GOAL = 5
DAILY_POSTURE_GOAL = 3


@dataclass
class DayActivity:
    """Break counts for one calendar day."""
    date: date
    eye_breaks: int = 0
    posture_checks: int = 0
    completed: bool = False

    def refresh_completed(self) -> None:
        self.completed = (
            self.eye_breaks >= DAILY_EYE_GOAL
            and self.posture_checks >= DAILY_POSTURE_GOAL
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "eye_breaks": self.eye_breaks,
            "posture_checks": self.posture_checks,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DayActivity":
        day = cls(
            date=date.fromisoformat(data["date"]),
            eye_breaks=max(0, int(data.get("eye_breaks", 0))),
            posture_checks=max(0, int(data.get("posture_checks", 0))),
        )
        day.refresh_completed()
        return day


@dataclass
class StreakData:
    """Aggregate streak counters, owned by the StreakTracker."""
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[date] = None
    total_completed_sessions: int = 0
    weekly_goal: int = 35  # 5 sessions per day * 7 days
    completed_this_week: int = 0
    streak_goal: int = 7

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["last_activity_date"] = (
            self.last_activity_date.isoformat() if self.last_activity_date else ""
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StreakData":
        """Merge stored values over the defaults; unknown keys are ignored."""
        result = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            if f.name == "last_activity_date":
                result.last_activity_date = date.fromisoformat(value) if value else None
            else:
                setattr(result, f.name, int(value))
        result.longest_streak = max(result.longest_streak, result.current_streak)
        return result


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass
class AppSettings:
    """User-configurable intervals (minutes) and toggles."""
    eye_interval: int = 20
    posture_interval: int = 45
    eye_notifications: bool = True
    posture_notifications: bool = True
    sound_alerts: bool = False
    auto_start: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def interval_for(self, kind: TimerKind) -> int:
        return self.eye_interval if kind is TimerKind.EYE else self.posture_interval

    def notifications_for(self, kind: TimerKind) -> bool:
        return self.eye_notifications if kind is TimerKind.EYE else self.posture_notifications


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@dataclass
class TimerSession:
    """A completed (or abandoned) countdown, persisted to the history table."""
    id: int
    timer_type: TimerKind
    duration_seconds: int
    completed: bool
    started_at: datetime
    completed_at: Optional[datetime] = None


@dataclass
class DailyStats:
    """Completed sessions aggregated for a single day."""
    date: date
    eye_breaks: int = 0
    posture_checks: int = 0
    focus_seconds: int = 0  # summed duration of completed countdowns

    @property
    def total(self) -> int:
        return self.eye_breaks + self.posture_checks


@dataclass
class HistoryRange:
    """Daily stats for a contiguous date range."""
    start_date: date
    end_date: date
    days: list[DailyStats] = field(default_factory=list)

    @property
    def eye_breaks(self) -> int:
        return sum(d.eye_breaks for d in self.days)

    @property
    def posture_checks(self) -> int:
        return sum(d.posture_checks for d in self.days)

    @property
    def focus_seconds(self) -> int:
        return sum(d.focus_seconds for d in self.days)
