"""Text formatter for EyeRest reports.

Renders timer status, the seven-day activity window and session history
as aligned plain text.
"""

from datetime import timedelta
from typing import Any

from eyerest.core.exercises import Exercise
from eyerest.core.models import DayActivity, HistoryRange, StreakData


class TextFormatter:
    """Formats reminder data as human-readable plain text."""

    @staticmethod
    def format_duration(duration: timedelta) -> str:
        """Format a timedelta as 'Xh Ym' (e.g., '2h 15m').

        Truncates to whole minutes. Returns '0m' for zero/negative durations.
        """
        total_seconds = int(duration.total_seconds())
        if total_seconds < 0:
            total_seconds = 0
        total_minutes = total_seconds // 60
        hours = total_minutes // 60
        minutes = total_minutes % 60

        if hours == 0:
            return f"{minutes}m"
        return f"{hours}h {minutes}m"

    @staticmethod
    def _format_table(headers: list[str], rows: list[list[str]], footer: list[str] | None = None) -> str:
        """Render rows under *headers*; first column left-aligned, the rest right.

        Returns lines like:
          Date          Eye  Posture
          ──────────────────────────
          Mon 06 Jan      5        3
          ──────────────────────────
          Total           5        3
        """
        all_rows = rows + ([footer] if footer else [])
        widths = [
            max([len(headers[i])] + [len(r[i]) for r in all_rows])
            for i in range(len(headers))
        ]

        def _line(cells: list[str]) -> str:
            parts = [f"{cells[0]:<{widths[0]}}"]
            parts += [f"{c:>{w}}" for c, w in zip(cells[1:], widths[1:])]
            return "  " + "  ".join(parts)

        header = _line(headers)
        separator = "  " + "─" * (len(header) - 2)
        lines = [header, separator]
        lines += [_line(r) for r in rows]
        if footer:
            lines.append(separator)
            lines.append(_line(footer))
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_status(status: dict[str, dict[str, Any]]) -> str:
        """Render the orchestrator's per-timer status."""
        rows = []
        for name, t in status.items():
            rows.append([
                name.capitalize(),
                t["display"],
                f"{t['progress']:.0f}%",
                t["status"],
                t.get("next_break") or "-",
            ])
        return "Timers\n\n" + TextFormatter._format_table(
            ["Timer", "Left", "Done", "State", "Next break"], rows
        )

    @staticmethod
    def format_streak(streak: StreakData, message: str, weekly_progress: float) -> str:
        """Render streak counters and the weekly goal."""
        last = streak.last_activity_date.isoformat() if streak.last_activity_date else "never"
        return (
            f"Streak: {streak.current_streak} day(s) "
            f"(longest {streak.longest_streak}, goal {streak.streak_goal})\n"
            f"  {message}\n"
            f"  This week: {streak.completed_this_week}/{streak.weekly_goal} "
            f"({weekly_progress:.1f}%)\n"
            f"  Total breaks: {streak.total_completed_sessions}\n"
            f"  Last streak day: {last}\n"
        )

    @staticmethod
    def format_weekly(window: list[DayActivity]) -> str:
        """Render the seven-day activity window."""
        rows = [
            [
                d.date.strftime("%a %d %b"),
                str(d.eye_breaks),
                str(d.posture_checks),
                "yes" if d.completed else "",
            ]
            for d in window
        ]
        footer = [
            "Total",
            str(sum(d.eye_breaks for d in window)),
            str(sum(d.posture_checks for d in window)),
            str(sum(1 for d in window if d.completed)),
        ]
        return "Last 7 Days\n\n" + TextFormatter._format_table(
            ["Date", "Eye", "Posture", "Goal met"], rows, footer
        )

    @staticmethod
    def format_history(history: HistoryRange) -> str:
        """Render completed-session totals per day."""
        start_str = history.start_date.strftime("%B %d, %Y")
        end_str = history.end_date.strftime("%B %d, %Y")
        if not any(d.total for d in history.days):
            return f"History: {start_str} - {end_str}\n\n  No breaks recorded.\n"

        rows = [
            [
                d.date.strftime("%a %d %b"),
                str(d.eye_breaks),
                str(d.posture_checks),
                TextFormatter.format_duration(timedelta(seconds=d.focus_seconds)),
            ]
            for d in history.days
        ]
        footer = [
            "Total",
            str(history.eye_breaks),
            str(history.posture_checks),
            TextFormatter.format_duration(timedelta(seconds=history.focus_seconds)),
        ]
        return f"History: {start_str} - {end_str}\n\n" + TextFormatter._format_table(
            ["Date", "Eye", "Posture", "Focus"], rows, footer
        )

    @staticmethod
    def format_exercises(exercises: list[Exercise]) -> str:
        parts = []
        for e in exercises:
            parts.append(f"{e.title}\n  {e.description}\n")
            parts.extend(f"  {i}. {step}\n" for i, step in enumerate(e.steps, 1))
            parts.append("\n")
        return "".join(parts).rstrip("\n") + "\n"
