"""Streak tracking for EyeRest.

Counts eye breaks and posture checks per calendar day over a rolling
seven-day window and derives streak continuity from them.  Two thresholds
are in play on purpose:

- the *daily goal* (``DayActivity.completed``): 5 eye breaks and 3 posture
  checks, display only;
- *streak eligibility*: 4 eye breaks or 2 posture checks in a day.
"""

import logging
from datetime import date, timedelta
from typing import Callable, Optional

from eyerest.core.models import DayActivity, StreakData, TimerKind

logger = logging.getLogger(__name__)

STREAK_KEY = "eyerest-streak-data"
ACTIVITY_KEY = "eyerest-daily-activity"

WINDOW_DAYS = 7
STREAK_EYE_THRESHOLD = 4
STREAK_POSTURE_THRESHOLD = 2


class StreakTracker:
    """Owns StreakData and the seven-day DayActivity window."""

    def __init__(self, store, today: Callable[[], date] = date.today) -> None:
        self.store = store
        self._today = today
        self._streak = StreakData()
        self._window: list[DayActivity] = []
        self._load()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def streak_data(self) -> StreakData:
        return StreakData(**vars(self._streak))

    @property
    def weekly_activity(self) -> list[DayActivity]:
        return [DayActivity(**vars(d)) for d in self._window]

    def today_activity(self) -> DayActivity:
        self._roll_window()
        return DayActivity(**vars(self._window[-1]))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record_activity(self, kind: "TimerKind | str") -> StreakData:
        """Count one eye break or posture check for today.

        Updates the day entry, streak continuity, lifetime session count and
        the weekly total, then persists both structures.
        """
        kind = TimerKind.parse(kind)
        today = self._today()
        self._roll_window()

        day = self._window[-1]
        if kind is TimerKind.EYE:
            day.eye_breaks += 1
            eligible = day.eye_breaks >= STREAK_EYE_THRESHOLD
        else:
            day.posture_checks += 1
            eligible = day.posture_checks >= STREAK_POSTURE_THRESHOLD
        day.refresh_completed()

        s = self._streak
        if eligible and s.last_activity_date != today:
            if s.last_activity_date == today - timedelta(days=1) or s.current_streak == 0:
                s.current_streak += 1
            else:
                s.current_streak = 1
            s.longest_streak = max(s.longest_streak, s.current_streak)
            s.last_activity_date = today
            logger.info("Streak extended to %d day(s)", s.current_streak)

        s.total_completed_sessions += 1
        s.completed_this_week = sum(d.eye_breaks + d.posture_checks for d in self._window)

        self._save_window()
        self._save_streak()
        return self.streak_data

    def get_streak_message(self) -> str:
        streak = self._streak.current_streak
        if streak == 0:
            return "Start your wellness streak today!"
        if streak == 1:
            return "Great start! Keep it going tomorrow."
        if streak < 7:
            return f"{streak} days strong! You're building a healthy habit."
        if streak < 30:
            return f"Amazing! {streak} day streak. You're on fire! 🔥"
        return f"Incredible! {streak} days of wellness. You're a champion! 🏆"

    def get_weekly_progress(self) -> float:
        """Share of the weekly goal reached, as a percentage capped at 100."""
        goal = self._streak.weekly_goal
        if goal <= 0:
            return 0.0
        return min(self._streak.completed_this_week / goal * 100, 100.0)

    def update_weekly_goal(self, goal: int) -> None:
        self._streak.weekly_goal = _positive_int(goal, "weekly_goal")
        self._save_streak()

    def update_streak_goal(self, goal: int) -> None:
        self._streak.streak_goal = _positive_int(goal, "streak_goal")
        self._save_streak()

    def reset_streak(self) -> None:
        """Start over, keeping the longest streak and lifetime session count."""
        self._streak = StreakData(
            longest_streak=self._streak.longest_streak,
            total_completed_sessions=self._streak.total_completed_sessions,
        )
        self._save_streak()
        logger.info("Streak reset")

    def initialize_weekly_activity(self) -> None:
        """Replace the window with seven zeroed days ending today."""
        today = self._today()
        self._window = [
            DayActivity(date=today - timedelta(days=offset))
            for offset in range(WINDOW_DAYS - 1, -1, -1)
        ]
        self._save_window()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _roll_window(self) -> None:
        """Keep exactly the last seven calendar days, oldest first.

        Days that fell out of range are dropped; missing days up to today
        are filled with zeroed entries.
        """
        today = self._today()
        first = today - timedelta(days=WINDOW_DAYS - 1)
        by_date = {d.date: d for d in self._window if first <= d.date <= today}
        window = [
            by_date.get(first + timedelta(days=i)) or DayActivity(date=first + timedelta(days=i))
            for i in range(WINDOW_DAYS)
        ]
        changed = [d.date for d in window] != [d.date for d in self._window]
        self._window = window
        if changed:
            self._save_window()

    def _load(self) -> None:
        stored_streak = self._read(STREAK_KEY)
        if stored_streak is not None:
            try:
                self._streak = StreakData.from_dict(stored_streak)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Ignoring malformed streak data: %s", exc)

        stored_window = self._read(ACTIVITY_KEY)
        if stored_window is None:
            self.initialize_weekly_activity()
            return
        try:
            self._window = [DayActivity.from_dict(d) for d in stored_window]
        except (KeyError, AttributeError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed activity window: %s", exc)
            self.initialize_weekly_activity()
            return
        self._roll_window()

    def _read(self, key: str) -> Optional[object]:
        try:
            return self.store.get(key)
        except Exception:
            logger.exception("Failed to read %s; using defaults", key)
            return None

    def _save_window(self) -> None:
        try:
            self.store.set(ACTIVITY_KEY, [d.to_dict() for d in self._window])
        except Exception:
            logger.exception("Failed to persist activity window")

    def _save_streak(self) -> None:
        try:
            self.store.set(STREAK_KEY, self._streak.to_dict())
        except Exception:
            logger.exception("Failed to persist streak data")


def _positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value
