"""Unit tests for TextFormatter."""

from datetime import date, timedelta

import pytest

from eyerest.core.exercises import get_exercises
from eyerest.core.models import DailyStats, DayActivity, HistoryRange, StreakData
from eyerest.reporting.formatter import TextFormatter


# ------------------------------------------------------------------
# format_duration
# ------------------------------------------------------------------

class TestFormatDuration:
    def test_zero(self):
        assert TextFormatter.format_duration(timedelta()) == "0m"

    def test_minutes_only(self):
        assert TextFormatter.format_duration(timedelta(minutes=20)) == "20m"

    def test_hours_and_minutes(self):
        assert TextFormatter.format_duration(timedelta(hours=1, minutes=45)) == "1h 45m"

    def test_truncates_seconds(self):
        assert TextFormatter.format_duration(timedelta(minutes=44, seconds=59)) == "44m"

    def test_negative_treated_as_zero(self):
        assert TextFormatter.format_duration(timedelta(seconds=-10)) == "0m"


# ------------------------------------------------------------------
# format_status
# ------------------------------------------------------------------

def _status(**eye_overrides):
    eye = {"display": "12:30", "progress": 37.5, "status": "running", "next_break": "3:15 PM"}
    eye.update(eye_overrides)
    return {
        "eye": eye,
        "posture": {"display": "45:00", "progress": 0.0, "status": "paused", "next_break": None},
    }


class TestFormatStatus:
    def test_rows_per_timer(self):
        text = TextFormatter.format_status(_status())
        assert text.startswith("Timers")
        assert "Eye" in text
        assert "Posture" in text
        assert "12:30" in text
        assert "3:15 PM" in text

    def test_progress_rounded(self):
        assert "38%" in TextFormatter.format_status(_status(progress=37.6))

    def test_idle_timer_shows_dash(self):
        posture_line = [l for l in TextFormatter.format_status(_status()).splitlines() if "Posture" in l][0]
        assert posture_line.rstrip().endswith("-")

    def test_columns_aligned(self):
        lines = TextFormatter.format_status(_status()).splitlines()
        table = [l for l in lines[2:] if l.strip() and not set(l.strip()) == {"─"}]
        assert len({len(l) for l in table}) == 1


# ------------------------------------------------------------------
# format_streak
# ------------------------------------------------------------------

class TestFormatStreak:
    def test_counters(self):
        streak = StreakData(
            current_streak=3, longest_streak=5, last_activity_date=date(2025, 1, 6),
            total_completed_sessions=40, completed_this_week=10,
        )
        text = TextFormatter.format_streak(streak, "3 days strong!", 28.571)
        assert "Streak: 3 day(s)" in text
        assert "longest 5" in text
        assert "10/35 (28.6%)" in text
        assert "Total breaks: 40" in text
        assert "2025-01-06" in text
        assert "3 days strong!" in text

    def test_never(self):
        text = TextFormatter.format_streak(StreakData(), "Start", 0.0)
        assert "Last streak day: never" in text


# ------------------------------------------------------------------
# format_weekly
# ------------------------------------------------------------------

class TestFormatWeekly:
    def _window(self):
        start = date(2025, 1, 6)
        days = [DayActivity(date=start + timedelta(days=i)) for i in range(7)]
        days[-1].eye_breaks = 5
        days[-1].posture_checks = 3
        days[-1].refresh_completed()
        days[-2].eye_breaks = 2
        return days

    def test_contains_all_days(self):
        text = TextFormatter.format_weekly(self._window())
        assert text.startswith("Last 7 Days")
        for label in ("Mon 06 Jan", "Sun 12 Jan"):
            assert label in text

    def test_totals(self):
        total_line = TextFormatter.format_weekly(self._window()).splitlines()[-1]
        assert total_line.split() == ["Total", "7", "3", "1"]

    def test_goal_met_marked(self):
        last_day = [l for l in TextFormatter.format_weekly(self._window()).splitlines() if "Sun 12 Jan" in l][0]
        assert last_day.rstrip().endswith("yes")


# ------------------------------------------------------------------
# format_history
# ------------------------------------------------------------------

class TestFormatHistory:
    def test_empty(self):
        history = HistoryRange(
            date(2025, 1, 1), date(2025, 1, 7),
            [DailyStats(date(2025, 1, 1) + timedelta(days=i)) for i in range(7)],
        )
        text = TextFormatter.format_history(history)
        assert "January 01, 2025 - January 07, 2025" in text
        assert "No breaks recorded." in text

    def test_with_data(self):
        history = HistoryRange(
            date(2025, 1, 6), date(2025, 1, 7),
            [
                DailyStats(date(2025, 1, 6), eye_breaks=3, posture_checks=1, focus_seconds=3 * 1200 + 2700),
                DailyStats(date(2025, 1, 7), eye_breaks=1, focus_seconds=1200),
            ],
        )
        text = TextFormatter.format_history(history)
        assert "1h 45m" in text
        assert text.splitlines()[-1].split() == ["Total", "4", "1", "2h", "5m"]


# ------------------------------------------------------------------
# format_exercises
# ------------------------------------------------------------------

class TestFormatExercises:
    def test_numbered_steps(self):
        text = TextFormatter.format_exercises(get_exercises("eye"))
        assert "20-20-20 Eye Exercise" in text
        assert "  1. Look at something 20 feet away" in text
        assert text.endswith("\n")
        assert not text.endswith("\n\n")

    @pytest.mark.parametrize("kind", ["eye", "posture"])
    def test_every_exercise_listed(self, kind):
        exercises = get_exercises(kind)
        text = TextFormatter.format_exercises(exercises)
        assert all(e.title in text for e in exercises)
